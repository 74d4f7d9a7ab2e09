from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import get_db
from app.infra.events.rabbitmq import rabbitmq
from app.repositories.order_repositories import OrderRepository
from app.schemas.order_schemas import CreateOrderRequest, OrderResponse
from app.services.contracts import OrderServicePort
from app.services.order_services import OrderService


router = APIRouter(prefix=f"{settings.API_PREFIX}/orders", tags=["orders"])
logger = logging.getLogger(__name__)


# ---------- Dependency injection ----------
def get_order_service(db: Session = Depends(get_db)) -> OrderServicePort:
    """Construit un OrderService avec repo + publisher (RabbitMQ)."""
    return OrderService(OrderRepository(db), rabbitmq)


# ---------- Endpoints ----------
# Les erreurs métier (404, 400) sont traduites par app.core.errors.

@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    order_in: CreateOrderRequest,
    svc: OrderServicePort = Depends(get_order_service),
):
    """Créer une commande."""
    logger.info("Creating order for %s (%d items)", order_in.created_by, len(order_in.items))
    return await svc.create_order(order_in)


@router.get("", response_model=List[OrderResponse])
def list_active_orders(svc: OrderServicePort = Depends(get_order_service)):
    """Lister les commandes actives (non supprimées)."""
    return svc.get_all_active_orders()


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(order_id: UUID, svc: OrderServicePort = Depends(get_order_service)):
    """Obtenir une commande par son ID."""
    return svc.get_order_by_id(order_id)


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_order(order_id: UUID, svc: OrderServicePort = Depends(get_order_service)):
    """Suppression logique d'une commande."""
    logger.info("Deleting order %s", order_id)
    await svc.soft_delete_order(order_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
