"""
Current-user routes — profile settings and account deletion.

Route prefix: /api/me
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import db_session
from auth.dependencies import get_current_identity
from auth.jwt import Identity
from users.service import ProfileService

router = APIRouter(tags=["users"])


class ProfileUpdate(BaseModel):
    browser_notifications: Optional[bool] = None


def get_profile_service(session: AsyncSession = Depends(db_session)) -> ProfileService:
    return ProfileService(session)


@router.get("")
async def get_profile(
    identity: Identity = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service),
) -> Dict[str, Any]:
    return await service.get_profile(identity.id)


@router.put("")
async def update_profile(
    req: ProfileUpdate,
    identity: Identity = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service),
) -> Dict[str, Any]:
    return await service.update_profile(identity.id, req.browser_notifications)


@router.delete("/delete-account")
async def delete_account(
    identity: Identity = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service),
) -> Dict[str, Any]:
    await service.delete_account(identity.id)
    return {"message": "Account and all data deleted successfully"}
