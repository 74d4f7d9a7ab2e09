from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.order_models import OrderStatus

# Bornes choisies pour que line_total / total_amount tiennent dans les colonnes Numeric
MAX_QUANTITY = 100_000
MAX_ITEMS = 500


# ---------- Requêtes ----------
class OrderLineItemRequest(BaseModel):
    """Un produit à inclure dans une nouvelle commande."""

    product_id: UUID = Field(..., description="ID of the product")
    product_name: str = Field(..., min_length=1, max_length=255, description="Display name of the product")
    quantity: int = Field(..., gt=0, le=MAX_QUANTITY, description="Quantity of the product")
    price_per_unit: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2, description="Unit price")

    @field_validator("product_name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("product_name must not be blank")
        return v


class CreateOrderRequest(BaseModel):
    created_by: UUID = Field(..., description="ID of the user placing the order")
    items: List[OrderLineItemRequest] = Field(..., min_length=1, max_length=MAX_ITEMS)


# ---------- Réponses ----------
class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    product_id: UUID
    product_name: str
    quantity: int
    price_per_unit: Decimal
    line_total: Decimal


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_by: UUID
    status: OrderStatus
    total_amount: Decimal
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None
    items: List[OrderItemResponse] = []
