"""
Domain error taxonomy.

Services raise these; ``api.middleware.register_exception_handlers`` maps
them to JSON responses at the HTTP boundary.  Messages are user-safe.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class AppError(Exception):
    status_code: int = 500
    default_message: str = "Internal Server Error"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
    ) -> None:
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"message": self.message}
        if self.errors:
            payload["errors"] = self.errors
        return payload


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid input"


class ConflictError(AppError):
    status_code = 400
    default_message = "Resource already exists"


class AuthError(AppError):
    status_code = 401
    default_message = "Unauthorized"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class InternalError(AppError):
    status_code = 500


class MigrationError(RuntimeError):
    """Raised at startup when a schema migration step fails in strict mode."""
