from __future__ import annotations

import logging
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.core.config import settings
from app.core.errors import DomainError

logger = logging.getLogger(__name__)

# --- Engine SQLAlchemy ---
engine = create_engine(
    str(settings.DATABASE_URL),
    future=True,
    pool_pre_ping=True,
    echo=settings.DB_ECHO,
    # SQLite + TestClient/uvicorn: la session peut changer de thread
    connect_args={"check_same_thread": False} if settings.is_sqlite else {},
)

# --- Session factory ---
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    future=True,
)

# --- Base déclarative ---
Base = declarative_base()


def init_db() -> None:
    """
    Enregistre tous les modèles et crée les tables manquantes.
    IMPORTANT: il faut importer les modèles avant d’appeler create_all().
    """
    from app.models import order_models  # noqa: F401  import retardé
    Base.metadata.create_all(bind=engine)
    logger.info("[orders-api] DB init: tables ensured")


def get_db() -> Generator[Session, None, None]:
    """Fournit une session DB par requête HTTP."""
    db = SessionLocal()
    try:
        yield db
    except DomainError:
        db.rollback()
        raise
    except Exception:
        db.rollback()
        logger.exception("[orders-api] db session rolled back due to exception")
        raise
    finally:
        db.close()
        logger.debug("[orders-api] db session closed")
