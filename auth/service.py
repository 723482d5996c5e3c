"""
Credential service — registration, login and token handling.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from auth.jwt import Identity, TokenSigner
from auth.models import User
from auth.password import MAX_PASSWORD_BYTES, hash_password, verify_password
from core.errors import AuthError, ConflictError, ValidationError

logger = logging.getLogger(__name__)

DUPLICATE_USER = "Email or Username already exists"
BAD_CREDENTIALS = "Incorrect email or password"
FORGOT_PASSWORD_MESSAGE = (
    "If the email is registered, password reset instructions will be sent."
)


def _is_valid_email(email: str) -> bool:
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def validate_registration(username: str, email: str, password: str) -> List[Dict[str, str]]:
    """Return every violated registration rule (empty list when valid)."""
    violations: List[Dict[str, str]] = []
    if len(username) < 3:
        violations.append({"field": "username", "message": "Username must be at least 3 characters"})
    if not _is_valid_email(email):
        violations.append({"field": "email", "message": "Invalid email"})
    if len(password) < 6:
        violations.append({"field": "password", "message": "Password must be at least 6 characters"})
    elif len(password.encode()) > MAX_PASSWORD_BYTES:
        violations.append({"field": "password", "message": f"Password must be at most {MAX_PASSWORD_BYTES} bytes"})
    return violations


class CredentialService:
    def __init__(self, session: AsyncSession, tokens: TokenSigner, bcrypt_rounds: int = 10) -> None:
        self._session = session
        self._tokens = tokens
        self._bcrypt_rounds = bcrypt_rounds

    async def register(self, username: str, email: str, password: str) -> User:
        username = username.strip()
        violations = validate_registration(username, email, password)
        if violations:
            raise ValidationError("Invalid input", errors=violations)

        result = await self._session.execute(
            select(User.id).where(or_(User.email == email, User.username == username)).limit(1)
        )
        if result.scalar_one_or_none() is not None:
            raise ConflictError(DUPLICATE_USER)

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password, rounds=self._bcrypt_rounds),
            browser_notifications=True,
        )
        self._session.add(user)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            # lost a race with a concurrent registration
            await self._session.rollback()
            raise ConflictError(DUPLICATE_USER) from exc

        logger.info("Registered user %s (%s)", user.username, user.id)
        return user

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        result = await self._session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password_hash):
            raise AuthError(BAD_CREDENTIALS)

        logger.info("Login: %s (%s)", user.username, user.id)
        return {
            "access_token": self.issue_token(user),
            "token_type": "bearer",
            "username": user.username,
            "email": user.email,
        }

    def issue_token(self, user: User) -> str:
        return self._tokens.create_token(user.id, user.username)

    def verify_token(self, token: str) -> Identity:
        return self._tokens.verify_token(token)

    async def forgot_password(self, email: str) -> str:
        # Same answer whether or not the address is registered.
        logger.debug("Password reset requested")
        return FORGOT_PASSWORD_MESSAGE
