"""
Auth API routes — register, login, forgot-password.

Route prefix: /api/auth
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import db_session, get_context
from auth.service import CredentialService
from core.context import AppContext

router = APIRouter(tags=["auth"])


# ── Request / response schemas ─────────────────────────────────────────


class RegisterRequest(BaseModel):
    # rules are checked by CredentialService so every violation is reported
    username: str = ""
    email: str = ""
    password: str = ""


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class ForgotPasswordRequest(BaseModel):
    email: str = ""


class AuthResponse(BaseModel):
    access_token: str
    token_type: str
    username: str
    email: str


def get_credential_service(
    session: AsyncSession = Depends(db_session),
    context: AppContext = Depends(get_context),
) -> CredentialService:
    return CredentialService(session, context.tokens, bcrypt_rounds=context.settings.bcrypt_rounds)


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    req: RegisterRequest,
    service: CredentialService = Depends(get_credential_service),
) -> Dict[str, Any]:
    """Register a new user."""
    await service.register(req.username, req.email, req.password)
    return {"message": "Registration successful"}


@router.post("/login", response_model=AuthResponse)
async def login(
    req: LoginRequest,
    service: CredentialService = Depends(get_credential_service),
) -> Dict[str, Any]:
    """Login with email + password."""
    return await service.login(req.email, req.password)


@router.post("/forgot-password")
async def forgot_password(
    req: Optional[ForgotPasswordRequest] = None,
    service: CredentialService = Depends(get_credential_service),
) -> Dict[str, Any]:
    email = req.email if req is not None else ""
    return {"message": await service.forgot_password(email)}
