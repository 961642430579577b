"""Database session and engine helpers."""

from __future__ import annotations

import enum
from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from petclaim.core.config import get_settings

_engine_cache: dict[str, AsyncEngine] = {}
_sessionmaker_cache: dict[str, async_sessionmaker[AsyncSession]] = {}


class ClientCapability(str, enum.Enum):
    """Credential tier a session connects with."""

    # Anon role, subject to row-level security.
    RESTRICTED = "restricted"
    # Service role, bypasses row-level security.
    ELEVATED = "elevated"


def resolve_database_url(
    capability: ClientCapability = ClientCapability.ELEVATED,
    override: str | None = None,
) -> str:
    if override:
        return override
    settings = get_settings()
    if capability is ClientCapability.RESTRICTED:
        return settings.database_anon_url or settings.database_url
    return settings.database_url


def get_sessionmaker(
    database_url: str | None = None,
    *,
    capability: ClientCapability = ClientCapability.ELEVATED,
) -> async_sessionmaker[AsyncSession]:
    """Return (and cache) an async sessionmaker for the given database URL."""
    url = resolve_database_url(capability, database_url)
    sessionmaker = _sessionmaker_cache.get(url)
    if sessionmaker is None:
        engine = create_async_engine(url, echo=False, future=True)
        sessionmaker = async_sessionmaker(
            engine, expire_on_commit=False, class_=AsyncSession
        )
        _engine_cache[url] = engine
        _sessionmaker_cache[url] = sessionmaker
    return sessionmaker


async def get_session(
    capability: ClientCapability = ClientCapability.ELEVATED,
) -> AsyncIterator[AsyncSession]:
    """Yield an async database session for the requested credential tier."""
    session_factory = get_sessionmaker(capability=capability)
    async with session_factory() as session:
        yield session


async def dispose_engine(database_url: str | None = None) -> None:
    """Dispose the cached engine/sessionmaker for the given database URL."""
    url = resolve_database_url(override=database_url)
    engine = _engine_cache.pop(url, None)
    if engine is not None:
        await engine.dispose()
    _sessionmaker_cache.pop(url, None)
