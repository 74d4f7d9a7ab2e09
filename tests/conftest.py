import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

os.environ["TESTING"] = "1"
os.environ["DATABASE_URL"] = "sqlite:///./test_orders.db"
os.environ["RABBITMQ_ENABLED"] = "0"
os.environ.setdefault("LOG_FORMAT", "text")

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest
from app.core.db import Base, engine, SessionLocal
from app.models import order_models  # noqa: F401  enregistre les tables
from app.models.order_models import OrderStatus


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def order_factory():
    """Objets « commande » minimaux, sérialisables par OrderResponse."""

    def _make(order_id=None, created_by=None, status=OrderStatus.ACTIVE, items=None):
        now = datetime.now(timezone.utc)
        return SimpleNamespace(
            id=order_id or uuid.uuid4(),
            created_by=created_by or uuid.uuid4(),
            status=status,
            total_amount=Decimal("0"),
            created_at=now,
            updated_at=now,
            deleted_at=None,
            items=items or [],
        )

    return _make
