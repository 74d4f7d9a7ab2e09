from __future__ import annotations

import json
import logging
from typing import Optional

import aio_pika
from aio_pika.abc import AbstractChannel, AbstractExchange, AbstractRobustConnection

from app.core.config import settings

logger = logging.getLogger(__name__)


class RabbitMQ:
    """Publisher RabbitMQ (implémente MessagePublisher)."""

    def __init__(
        self,
        url: Optional[str] = None,
        exchange_name: Optional[str] = None,
        exchange_type: Optional[str] = None,
    ) -> None:
        self.url = url or settings.RABBITMQ_URL
        self.exchange_name = exchange_name or settings.RABBITMQ_EXCHANGE
        self.exchange_type = aio_pika.ExchangeType(exchange_type or settings.RABBITMQ_EXCHANGE_TYPE)
        self.connection: Optional[AbstractRobustConnection] = None
        self.channel: Optional[AbstractChannel] = None
        self.exchange: Optional[AbstractExchange] = None

    async def connect(self) -> None:
        self.connection = await aio_pika.connect_robust(
            self.url, timeout=settings.RABBITMQ_CONNECT_TIMEOUT
        )
        self.channel = await self.connection.channel()
        self.exchange = await self.channel.declare_exchange(
            self.exchange_name, self.exchange_type, durable=True
        )
        logger.info("RabbitMQ connected, exchange=%s (%s)", self.exchange_name, self.exchange_type.value)

    async def disconnect(self) -> None:
        if self.channel is not None and not self.channel.is_closed:
            try:
                await self.channel.close()
                logger.info("RabbitMQ channel closed")
            except Exception:
                logger.exception("Failed to close RabbitMQ channel")
        if self.connection is not None and not self.connection.is_closed:
            try:
                await self.connection.close()
                logger.info("RabbitMQ connection closed")
            except Exception:
                logger.exception("Failed to close RabbitMQ connection")
        self.exchange = None

    async def publish_message(self, routing_key: str, message: dict) -> None:
        if self.exchange is None:
            logger.error("RabbitMQ exchange is not available, message %s dropped", routing_key)
            return

        # fanout: la routing key est ignorée par le broker
        rk = "" if self.exchange_type == aio_pika.ExchangeType.FANOUT else routing_key
        body = json.dumps(message, default=str).encode()
        try:
            await self.exchange.publish(
                aio_pika.Message(
                    body=body,
                    content_type="application/json",
                    delivery_mode=aio_pika.DeliveryMode.PERSISTENT,
                ),
                routing_key=rk,
            )
            logger.info("event published", extra={"routing_key": routing_key})
        except Exception:
            logger.exception("Failed to publish %s", routing_key)


rabbitmq = RabbitMQ()
