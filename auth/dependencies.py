"""
FastAPI dependencies for authentication.

``get_current_identity`` guards every protected route: it reads the
``Authorization: Bearer <token>`` header, verifies the token and hands the
caller's ``Identity`` to the handler for the duration of the request.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from api.dependencies import get_context
from auth.jwt import Identity
from core.context import AppContext
from core.errors import AuthError

NO_TOKEN = "No token provided"

# auto_error=False so a missing header maps to our own 401 message
_bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    context: AppContext = Depends(get_context),
) -> Identity:
    if credentials is None or not credentials.credentials:
        raise AuthError(NO_TOKEN)
    return context.tokens.verify_token(credentials.credentials)
