"""Re-exports the ``User`` ORM model and the token ``Identity`` for auth code.
"""

from auth.jwt import Identity  # noqa: F401
from database.models import User  # noqa: F401

__all__ = ["Identity", "User"]
