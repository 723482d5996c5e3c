"""
User profile service — notification preference and account deletion.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import InternalError, NotFoundError
from database.models import Task, User

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"


def _profile(user: User) -> Dict[str, Any]:
    return {
        "username": user.username,
        "email": user.email,
        "browser_notifications": bool(user.browser_notifications),
    }


class ProfileService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _get_user(self, user_id: int) -> User:
        result = await self._session.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError(USER_NOT_FOUND)
        return user

    async def get_profile(self, user_id: int) -> Dict[str, Any]:
        return _profile(await self._get_user(user_id))

    async def update_profile(
        self,
        user_id: int,
        browser_notifications: Optional[bool] = None,
    ) -> Dict[str, Any]:
        user = await self._get_user(user_id)
        if browser_notifications is not None:
            user.browser_notifications = browser_notifications
            await self._session.flush()
            await self._session.refresh(user)
        return _profile(user)

    async def delete_account(self, user_id: int) -> None:
        """
        Delete the user's tasks and then the user row in one transaction.

        If the user row is missing nothing is deleted: the transaction is
        rolled back and ``NotFoundError`` raised.
        """
        try:
            await self._session.execute(delete(Task).where(Task.user_id == user_id))
            result = await self._session.execute(delete(User).where(User.id == user_id))
            if not result.rowcount:
                await self._session.rollback()
                raise NotFoundError(USER_NOT_FOUND)
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            logger.exception("Delete account failed for user %s", user_id)
            raise InternalError("Failed to delete account") from exc

        logger.info("Deleted account %s and all its tasks", user_id)
