"""
Router assembly plus the unauthenticated status endpoints.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Response, status

from auth.routes import router as auth_router
from tasks.routes import router as tasks_router
from users.routes import router as users_router

router = APIRouter()
router.include_router(auth_router, prefix="/api/auth")
router.include_router(tasks_router, prefix="/api/tasks")
router.include_router(users_router, prefix="/api/me")


@router.get("/", tags=["status"])
async def root() -> Dict[str, Any]:
    return {
        "message": "TaskFlow backend running",
        "features": ["Authentication", "Task Management", "Browser Notifications"],
    }


@router.get("/api/health", tags=["status"])
async def health() -> Dict[str, Any]:
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "features": {
            "database": "Connected",
            "notifications": "Browser-based",
            "reminders": "Client-side",
        },
    }


@router.get("/favicon.ico", include_in_schema=False)
async def favicon() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT)
