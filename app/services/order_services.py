# app/services/order_services.py
from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from app.core.errors import OrderNotFoundError, OrderValidationError
from app.models.order_models import Order
from app.repositories.order_repositories import OrderRepository
from app.schemas.order_schemas import CreateOrderRequest
from app.infra.events.contracts import MessagePublisher

logger = logging.getLogger(__name__)


class OrderService:
    """
    Couche métier pour les commandes.
    - Suppression logique uniquement (status = deleted, ligne conservée).
    - Publie `order.created` / `order.deleted` après chaque écriture.
    """

    def __init__(self, repository: OrderRepository, publisher: MessagePublisher):
        self.repository = repository
        self.publisher = publisher

    # ==========================================================
    # === Lecture ==============================================
    # ==========================================================

    def get_order_by_id(self, order_id: UUID) -> Order:
        order = self.repository.get(order_id)
        if not order:
            logger.debug("order introuvable", extra={"order_id": str(order_id)})
            raise OrderNotFoundError(order_id)
        return order

    def get_all_active_orders(self) -> List[Order]:
        return self.repository.list_active()

    # ==========================================================
    # === Création =============================================
    # ==========================================================

    async def create_order(self, order_in: CreateOrderRequest) -> Order:
        if not order_in.items:
            raise OrderValidationError("Order must contain at least one item")

        order = self.repository.create(order_in)

        await self.publisher.publish_message(
            "order.created",
            {
                **order.to_dict(),
                "created_at": order.created_at.isoformat() if order.created_at else None,
            },
        )
        logger.info(
            "order created",
            extra={"order_id": str(order.id), "created_by": str(order.created_by), "items": len(order.items)},
        )
        return order

    # ==========================================================
    # === Suppression logique ==================================
    # ==========================================================

    async def soft_delete_order(self, order_id: UUID) -> Order:
        order = self.get_order_by_id(order_id)
        deleted = self.repository.soft_delete(order)

        await self.publisher.publish_message(
            "order.deleted",
            {
                "order_id": str(order_id),
                "created_by": str(deleted.created_by),
                "deleted_at": deleted.deleted_at.isoformat() if deleted.deleted_at else None,
            },
        )
        logger.info("order soft-deleted", extra={"order_id": str(order_id)})
        return deleted
