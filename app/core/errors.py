from __future__ import annotations

import logging
from typing import Dict, Type

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class DomainError(Exception):
    """Erreur métier, traduite en statut HTTP par `status_for`."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class OrderNotFoundError(DomainError):
    """Exception levée si une commande n’existe pas (ou a été supprimée)."""

    def __init__(self, order_id=None, message: str | None = None) -> None:
        super().__init__(message or (f"Order {order_id} not found" if order_id else "Order not found"))
        self.order_id = order_id


class OrderValidationError(DomainError):
    """Payload de commande refusé par la couche métier."""


_STATUS_BY_ERROR: Dict[Type[DomainError], int] = {
    OrderNotFoundError: status.HTTP_404_NOT_FOUND,
    OrderValidationError: status.HTTP_400_BAD_REQUEST,
}


def status_for(exc: DomainError) -> int:
    """Statut HTTP d'une erreur métier (sous-classes comprises), 500 à défaut."""
    for klass in type(exc).__mro__:
        if klass in _STATUS_BY_ERROR:
            return _STATUS_BY_ERROR[klass]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    code = status_for(exc)
    if code >= 500:
        logger.error("unmapped domain error: %s", exc, extra={"path": request.url.path})
    else:
        logger.info("domain error -> %s: %s", code, exc, extra={"path": request.url.path})
    return JSONResponse(status_code=code, content={"detail": exc.message or str(exc)})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("invalid request", extra={"path": request.url.path, "errors": len(exc.errors())})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
