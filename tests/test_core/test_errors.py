import uuid

from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.errors import (
    DomainError,
    OrderNotFoundError,
    OrderValidationError,
    register_exception_handlers,
    status_for,
)


class _OrderGoneError(OrderNotFoundError):
    pass


def test_status_for_known_errors():
    assert status_for(OrderNotFoundError()) == 404
    assert status_for(OrderValidationError("bad")) == 400


def test_status_for_subclass_uses_parent_mapping():
    assert status_for(_OrderGoneError()) == 404


def test_status_for_unmapped_domain_error():
    assert status_for(DomainError("???")) == 500


def test_not_found_message():
    oid = uuid.uuid4()
    assert str(OrderNotFoundError(oid)) == f"Order {oid} not found"
    assert str(OrderNotFoundError()) == "Order not found"


def test_handlers_translate_domain_errors():
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/missing")
    def missing():
        raise OrderNotFoundError(message="nope")

    @app.get("/invalid")
    def invalid():
        raise OrderValidationError("bad payload")

    @app.get("/typed/{n}")
    def typed(n: int):
        return {"n": n}

    client = TestClient(app)

    r = client.get("/missing")
    assert r.status_code == 404
    assert r.json() == {"detail": "nope"}

    r = client.get("/invalid")
    assert r.status_code == 400
    assert r.json() == {"detail": "bad payload"}

    r = client.get("/typed/abc")
    assert r.status_code == 400
    assert r.json()["detail"][0]["loc"] == ["path", "n"]
