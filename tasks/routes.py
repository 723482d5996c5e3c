"""
Task API routes.

Route prefix: /api/tasks  (all routes require a bearer token)
"""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import db_session
from auth.dependencies import get_current_identity
from auth.jwt import Identity
from database.models import Task
from tasks.repository import TaskRepository
from tasks.schemas import DueSoonTaskOut, TaskCreate, TaskOut, TaskUpdate

router = APIRouter(tags=["tasks"])

# ids beyond SQLite INTEGER range are rejected as invalid input
TaskId = Path(..., ge=1, le=2**63 - 1)


def get_task_repository(session: AsyncSession = Depends(db_session)) -> TaskRepository:
    return TaskRepository(session)


def _task_json(task: Task) -> Dict[str, Any]:
    return TaskOut.model_validate(task).model_dump(mode="json", by_alias=True)


@router.get("")
async def list_tasks(
    identity: Identity = Depends(get_current_identity),
    repo: TaskRepository = Depends(get_task_repository),
) -> List[Dict[str, Any]]:
    return [_task_json(task) for task in await repo.list_tasks(identity.id)]


@router.get("/due-soon")
async def list_due_soon(
    identity: Identity = Depends(get_current_identity),
    repo: TaskRepository = Depends(get_task_repository),
) -> List[Dict[str, Any]]:
    """Incomplete tasks due today or tomorrow, for client-side reminders."""
    due = await repo.list_due_soon(identity.id)
    return [
        DueSoonTaskOut(
            **TaskOut.model_validate(task).model_dump(),
            days_until_due=days,
        ).model_dump(mode="json", by_alias=True)
        for task, days in due
    ]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_task(
    req: TaskCreate,
    identity: Identity = Depends(get_current_identity),
    repo: TaskRepository = Depends(get_task_repository),
) -> Dict[str, Any]:
    task = await repo.create_task(
        identity.id,
        title=req.title,
        description=req.description,
        priority=req.priority,
        status=req.status,
        due_date=req.due_date,
    )
    return _task_json(task)


@router.put("/{task_id}")
async def update_task(
    req: TaskUpdate,
    task_id: int = TaskId,
    identity: Identity = Depends(get_current_identity),
    repo: TaskRepository = Depends(get_task_repository),
) -> Dict[str, Any]:
    task = await repo.update_task(identity.id, task_id, req.model_dump(exclude_unset=True))
    return _task_json(task)


@router.delete("/{task_id}")
async def delete_task(
    task_id: int = TaskId,
    identity: Identity = Depends(get_current_identity),
    repo: TaskRepository = Depends(get_task_repository),
) -> Dict[str, Any]:
    await repo.delete_task(identity.id, task_id)
    return {"message": "Task deleted"}
