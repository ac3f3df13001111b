"""FastAPI dependency providers."""
from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from food_express.config.app import AppConfig
from food_express.core.exceptions import AuthenticationError
from food_express.infra.database.errors import translate_db_errors
from food_express.ordering.types import Actor, Role
from food_express.services.catalog_service import CatalogService
from food_express.services.order_service import OrderService


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield a transactional AsyncSession from the app-level session factory."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            async with translate_db_errors("commit"):
                await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_actor(
    x_actor_id: Optional[str] = Header(default=None),
    x_actor_role: Optional[str] = Header(default=None),
) -> Actor:
    """Resolve the caller from headers set by the upstream authentication layer."""
    if not x_actor_id or not x_actor_role:
        raise AuthenticationError("Missing X-Actor-Id or X-Actor-Role header")
    try:
        actor_id = UUID(x_actor_id)
    except ValueError:
        raise AuthenticationError("X-Actor-Id is not a valid UUID") from None
    try:
        role = Role(x_actor_role.strip().lower())
    except ValueError:
        raise AuthenticationError(
            f"Unknown role {x_actor_role!r}",
            details={"allowed": [r.value for r in Role]},
        ) from None
    return Actor(id=actor_id, role=role)


def get_catalog_service(session: AsyncSession = Depends(get_session)) -> CatalogService:
    return CatalogService(session)


def get_order_service(
    session: AsyncSession = Depends(get_session),
    config: AppConfig = Depends(get_config),
) -> OrderService:
    return OrderService(session, config)
