"""
Process-wide application context.

Built once in ``main.create_app`` and stored on ``app.state.context``;
components receive what they need from it through their constructors.
"""

from __future__ import annotations

from dataclasses import dataclass

from auth.jwt import TokenSigner
from config.settings import Settings
from database.session import Database


@dataclass
class AppContext:
    settings: Settings
    database: Database
    tokens: TokenSigner

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContext":
        return cls(
            settings=settings,
            database=Database(settings.database_url, echo=settings.database_echo),
            tokens=TokenSigner(settings.jwt_secret, settings.jwt_expiry_seconds),
        )

    async def close(self) -> None:
        await self.database.dispose()
