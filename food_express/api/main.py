"""Food Express order service FastAPI application: entry point.

Start with:
    uvicorn food_express.api.main:app --reload --host 0.0.0.0 --port 8000

Configuration is read from the environment once at startup and kept on
``app.state.config`` together with the engine and session factory.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from food_express.config.app import cors_origins_from_env, load_app_config
from food_express.core.exceptions import ConfigurationError, ProjectError
from food_express.core.logger import configure
from food_express.infra.database.engine import (
    build_engine,
    build_session_factory,
    close_engine,
    ensure_database_exists,
    init_db,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ── Startup ──────────────────────────────────────────────────
    configure()

    try:
        config = load_app_config()
    except ValueError as exc:
        raise ConfigurationError(str(exc), cause=exc) from exc

    await ensure_database_exists(config.postgres)
    engine = build_engine(config.postgres)
    session_factory = build_session_factory(engine)
    await init_db(engine)

    app.state.config = config
    orders.configure_rate_limits(config)
    app.state.engine = engine
    app.state.session_factory = session_factory
    logger.info(
        "API: ready (tax_rate=%s free_delivery_over=%s order_rate_limit=%s)",
        config.pricing.tax_rate, config.pricing.free_delivery_threshold, config.order_rate_limit,
    )

    yield

    # ── Shutdown ─────────────────────────────────────────────────
    await close_engine(engine)
    logger.info("API: engine disposed")


app = FastAPI(
    title="Food Express Orders API",
    version="1.0.0",
    description="Order lifecycle engine: pricing, status tracking, ratings and the restaurant catalog.",
    lifespan=lifespan,
)


async def project_error_handler(request: Request, exc: ProjectError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("API: %s %s failed: %s", request.method, request.url.path, exc.to_dict())
    else:
        logger.info(
            "API: %s %s rejected: %s %s",
            request.method, request.url.path, exc.code, exc.message,
        )
    return JSONResponse(status_code=exc.http_status, content=jsonable_encoder(exc.to_response()))


app.add_exception_handler(ProjectError, project_error_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(cors_origins_from_env()),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Routers ───────────────────────────────────────────────────────
from food_express.api.routers import orders, restaurants  # noqa: E402

# Rate limiter lives with the order-placement route; the exception handler needs it on app.state
app.state.limiter = orders.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.include_router(orders.router, prefix="/api/v1")
app.include_router(restaurants.router, prefix="/api/v1")


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
