from __future__ import annotations

from typing import List, Protocol
from uuid import UUID

from app.models.order_models import Order
from app.schemas.order_schemas import CreateOrderRequest


class OrderServicePort(Protocol):
    """
    Ce dont le contrôleur HTTP a besoin. `get_order_by_id` et
    `soft_delete_order` lèvent OrderNotFoundError si l'id est inconnu.
    """

    async def create_order(self, request: CreateOrderRequest) -> Order: ...

    def get_all_active_orders(self) -> List[Order]: ...

    def get_order_by_id(self, order_id: UUID) -> Order: ...

    async def soft_delete_order(self, order_id: UUID) -> Order: ...
