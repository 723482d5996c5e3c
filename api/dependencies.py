"""
FastAPI dependencies (shared across routes).
"""

from __future__ import annotations

from typing import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from core.context import AppContext


def get_context(request: Request) -> AppContext:
    """The ``AppContext`` built by ``create_app``."""
    return request.app.state.context


async def db_session(
    context: AppContext = Depends(get_context),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped DB session (commit on success, rollback on error)."""
    async for session in context.database.session():
        yield session
