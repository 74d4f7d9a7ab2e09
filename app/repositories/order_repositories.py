from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from app.models.order_models import Order, OrderItem, OrderStatus
from app.schemas.order_schemas import CreateOrderRequest


class OrderRepository:
    """Data Access Layer for Order and OrderItem models."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, order_id: UUID, include_deleted: bool = False) -> Optional[Order]:
        """Get an order by its ID. Soft-deleted orders are skipped unless asked for."""
        query = self.db.query(Order).filter(Order.id == order_id)
        if not include_deleted:
            query = query.filter(Order.status == OrderStatus.ACTIVE)
        return query.first()

    def list_active(self) -> List[Order]:
        """Active orders, oldest first."""
        return (
            self.db.query(Order)
            .options(selectinload(Order.items))
            .filter(Order.status == OrderStatus.ACTIVE)
            .order_by(Order.created_at, Order.id)
            .all()
        )

    # ---------- CREATE ----------
    def create(self, order_in: CreateOrderRequest) -> Order:
        """Create a new active order with its line items."""
        db_order = Order(created_by=order_in.created_by, status=OrderStatus.ACTIVE)

        total = Decimal("0")
        for position, item_in in enumerate(order_in.items):
            line_total = item_in.price_per_unit * item_in.quantity
            total += line_total
            db_order.items.append(
                OrderItem(
                    position=position,
                    product_id=item_in.product_id,
                    product_name=item_in.product_name,
                    quantity=item_in.quantity,
                    price_per_unit=item_in.price_per_unit,
                    line_total=line_total,
                )
            )
        db_order.total_amount = total

        self.db.add(db_order)
        self.db.commit()
        self.db.refresh(db_order)
        return db_order

    # ---------- SOFT DELETE ----------
    def soft_delete(self, order: Order) -> Order:
        """Mark an order as deleted. The row is kept."""
        order.status = OrderStatus.DELETED
        order.deleted_at = datetime.now(timezone.utc)

        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        return order
