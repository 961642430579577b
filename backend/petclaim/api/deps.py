"""Common API dependencies."""

from __future__ import annotations

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from petclaim.db.session import ClientCapability, get_session


async def get_public_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide an anon-role session for unauthenticated link handlers."""
    async for session in get_session(ClientCapability.RESTRICTED):
        yield session
