from __future__ import annotations

import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from sqlalchemy import text

from app.core.config import settings
from app.core.db import engine, init_db
from app.core.errors import register_exception_handlers
from app.core.log import setup_logging, access_log_middleware
from app.infra.events.rabbitmq import rabbitmq
from app.api import order_routes as order_router

# --- Logging ---
setup_logging()
logger = logging.getLogger(__name__)

# --- Prometheus ---
# les URLs sans route partagent un label, sinon une série par URL inconnue
UNMATCHED_ROUTE_LABEL = "<unmatched>"
REQUEST_COUNT = Counter(
    "http_requests_total", "Total des requêtes HTTP", ["method", "path", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "Latence des requêtes HTTP", ["method", "path"]
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Startup ---
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("database connection OK")
        init_db()
    except Exception:
        logger.exception("database connectivity check failed")

    if settings.RABBITMQ_ENABLED:
        try:
            await rabbitmq.connect()
            logger.info("[orders-api] RabbitMQ connecté, exchange=%s", rabbitmq.exchange_name)
        except Exception as e:
            logger.exception("[orders-api] Échec initialisation RabbitMQ: %s", e)
    else:
        logger.info("[orders-api] RabbitMQ désactivé, événements non publiés")

    yield  # Application runs here

    # --- Shutdown ---
    if settings.RABBITMQ_ENABLED:
        await rabbitmq.disconnect()


app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    lifespan=lifespan,
    root_path=os.getenv("ROOT_PATH", ""),
    docs_url="/docs" if settings.ENV != "prod" else None,
    redoc_url="/redoc" if settings.ENV != "prod" else None,
    openapi_url="/openapi.json" if settings.ENV != "prod" else None,
)

# --- Erreurs métier -> HTTP ---
register_exception_handlers(app)

# --- Middlewares ---
app.middleware("http")(access_log_middleware)


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    start = time.perf_counter()
    response: Response = await call_next(request)
    duration = time.perf_counter() - start

    # Route template (/api/v1/orders/{order_id}) plutôt que le chemin brut
    route = request.scope.get("route")
    path = getattr(route, "path", UNMATCHED_ROUTE_LABEL)

    REQUEST_COUNT.labels(request.method, path, str(response.status_code)).inc()
    REQUEST_LATENCY.labels(request.method, path).observe(duration)
    return response


# --- CORS ---
allow_methods = (
    ["*"]
    if settings.CORS_ALLOW_METHODS == "*"
    else [m.strip() for m in settings.CORS_ALLOW_METHODS.split(",") if m.strip()]
)
allow_headers = (
    ["*"]
    if settings.CORS_ALLOW_HEADERS == "*"
    else [h.strip() for h in settings.CORS_ALLOW_HEADERS.split(",") if h.strip()]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=allow_methods,
    allow_headers=allow_headers,
)

# --- Tech endpoints ---
@app.get("/metrics", include_in_schema=False)
def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/health", tags=["health"])
def health():
    return {"status": "ok"}


# --- Routes ---
app.include_router(order_router.router)
