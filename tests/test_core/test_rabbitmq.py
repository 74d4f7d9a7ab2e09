import json
import logging
from unittest.mock import AsyncMock, MagicMock

import aio_pika
import pytest

from app.infra.events.rabbitmq import RabbitMQ

pytestmark = pytest.mark.asyncio


# ---------- RabbitMQ.connect ----------
async def test_rabbitmq_connect_sets_exchange_and_channel(monkeypatch):
    conn = AsyncMock()
    channel = AsyncMock()
    exchange = MagicMock()

    conn.channel = AsyncMock(return_value=channel)
    channel.declare_exchange = AsyncMock(return_value=exchange)

    connect_robust = AsyncMock(return_value=conn)
    monkeypatch.setattr("app.infra.events.rabbitmq.aio_pika.connect_robust", connect_robust)

    r = RabbitMQ(url="amqp://test", exchange_name="orders", exchange_type="topic")
    await r.connect()

    assert r.connection is conn
    assert r.channel is channel
    assert r.exchange is exchange
    assert connect_robust.await_args.args[0] == "amqp://test"
    channel.declare_exchange.assert_awaited_once_with("orders", aio_pika.ExchangeType.TOPIC, durable=True)


# ---------- RabbitMQ.disconnect ----------
async def test_disconnect_success_and_fail(caplog):
    caplog.set_level(logging.INFO)
    r = RabbitMQ()
    r.channel = AsyncMock()
    r.channel.is_closed = False
    r.connection = AsyncMock()
    r.connection.is_closed = False

    await r.disconnect()
    assert "RabbitMQ channel closed" in caplog.text
    assert "RabbitMQ connection closed" in caplog.text
    assert r.exchange is None

    # simulate errors during close
    r.channel = AsyncMock()
    r.channel.is_closed = False
    r.channel.close = AsyncMock(side_effect=Exception("close fail"))
    r.connection = AsyncMock()
    r.connection.is_closed = False
    r.connection.close = AsyncMock(side_effect=Exception("conn fail"))

    await r.disconnect()
    assert "Failed to close RabbitMQ channel" in caplog.text
    assert "Failed to close RabbitMQ connection" in caplog.text


async def test_disconnect_never_connected():
    r = RabbitMQ()
    await r.disconnect()
    assert r.connection is None


# ---------- RabbitMQ.publish_message ----------
async def test_publish_message_topic_and_fanout():
    r = RabbitMQ()
    mock_exchange = AsyncMock()
    r.exchange = mock_exchange

    # TOPIC → routing_key kept
    r.exchange_type = aio_pika.ExchangeType.TOPIC
    await r.publish_message("order.created", {"order_id": "abc"})
    call = mock_exchange.publish.await_args_list[-1]
    assert call.kwargs["routing_key"] == "order.created"
    msg = call.args[0]
    assert json.loads(msg.body.decode()) == {"order_id": "abc"}
    assert msg.content_type == "application/json"

    # FANOUT → routing_key ignored
    r.exchange_type = aio_pika.ExchangeType.FANOUT
    await r.publish_message("ignored", {"x": 1})
    call2 = mock_exchange.publish.await_args_list[-1]
    assert call2.kwargs["routing_key"] == ""


async def test_publish_message_no_exchange_logs_error(caplog):
    r = RabbitMQ()
    r.exchange = None
    await r.publish_message("order.deleted", {"a": 1})
    assert "exchange is not available" in caplog.text


async def test_publish_message_exception(caplog):
    r = RabbitMQ()
    mock_exchange = AsyncMock()
    mock_exchange.publish = AsyncMock(side_effect=Exception("publish fail"))
    r.exchange = mock_exchange
    r.exchange_type = aio_pika.ExchangeType.TOPIC

    await r.publish_message("order.created", {"y": 2})
    assert "Failed to publish" in caplog.text


async def test_publish_message_is_persistent_json():
    r = RabbitMQ()
    r.exchange = AsyncMock()
    r.exchange_type = aio_pika.ExchangeType.TOPIC

    await r.publish_message("order.deleted", {"order_id": "abc", "deleted_at": None})

    msg = r.exchange.publish.await_args.args[0]
    assert msg.delivery_mode == aio_pika.DeliveryMode.PERSISTENT
    assert json.loads(msg.body) == {"order_id": "abc", "deleted_at": None}
