"""
Task repository — CRUD on task rows scoped to their owner.

Every query filters on ``user_id``; a task owned by someone else is
reported exactly like a task that does not exist.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import NotFoundError, ValidationError
from database.models import Task

logger = logging.getLogger(__name__)

TASK_NOT_FOUND = "Task not found"
USER_NOT_FOUND = "User not found"

# Wire name → ORM attribute for fields a client may change.
MUTABLE_FIELDS = {
    "title": "title",
    "description": "description",
    "priority": "priority",
    "status": "status",
    "dueDate": "due_date",
    "completed": "completed",
}
_REQUIRED_FIELDS = ("title", "priority", "status")


def sync_completed(fields: Dict[str, Any]) -> Dict[str, Any]:
    """
    Keep ``completed`` consistent with ``status`` in a write payload.

    ``status == "completed"`` forces ``completed=True``; any other non-empty
    status forces ``completed=False``.  Payloads without a status are left
    alone.  Used by every task write path.
    """
    status = fields.get("status")
    if status == "completed":
        fields["completed"] = True
    elif status:
        fields["completed"] = False
    return fields


def days_until(due: str, today: date) -> int:
    """Whole days from ``today`` to an ISO ``YYYY-MM-DD`` due date."""
    return (date.fromisoformat(due) - today).days


class TaskRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _get_owned(self, user_id: int, task_id: int) -> Task:
        result = await self._session.execute(
            select(Task).where(Task.id == task_id, Task.user_id == user_id)
        )
        task = result.scalar_one_or_none()
        if task is None:
            raise NotFoundError(TASK_NOT_FOUND)
        return task

    async def list_tasks(self, user_id: int) -> List[Task]:
        result = await self._session.execute(
            select(Task).where(Task.user_id == user_id).order_by(Task.id.asc())
        )
        return list(result.scalars().all())

    async def list_due_soon(
        self,
        user_id: int,
        today: Optional[date] = None,
    ) -> List[Tuple[Task, int]]:
        """
        Incomplete tasks due today or tomorrow (server-local calendar date),
        soonest first, each paired with its days-until-due.
        """
        today = today or date.today()
        window = [today.isoformat(), (today + timedelta(days=1)).isoformat()]
        result = await self._session.execute(
            select(Task)
            .where(
                Task.user_id == user_id,
                Task.completed.is_(False),
                Task.due_date.in_(window),
            )
            .order_by(Task.due_date.asc(), Task.id.asc())
        )
        return [(task, days_until(task.due_date, today)) for task in result.scalars().all()]

    async def create_task(
        self,
        user_id: int,
        title: Optional[str],
        description: Optional[str] = None,
        priority: Optional[str] = None,
        status: Optional[str] = None,
        due_date: Optional[str] = None,
    ) -> Task:
        if not title:
            raise ValidationError("Task title is required")

        fields = sync_completed({
            "title": title,
            "description": description if description is not None else "",
            "priority": priority or "medium",
            "status": status or "pending",
            "due_date": due_date,
            "completed": False,
        })
        task = Task(
            user_id=user_id,
            created_at=datetime.now(timezone.utc),
            **fields,
        )
        self._session.add(task)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            # owner row is gone (account deleted while the token is still valid)
            await self._session.rollback()
            raise NotFoundError(USER_NOT_FOUND) from exc
        await self._session.refresh(task)
        logger.debug("Created task %s for user %s", task.id, user_id)
        return task

    async def update_task(self, user_id: int, task_id: int, updates: Dict[str, Any]) -> Task:
        """
        Apply a partial update to an owned task.

        Only ``MUTABLE_FIELDS`` are honoured; anything else in ``updates``
        (``id``, ``user_id``, ``created_at`` …) is ignored.
        """
        task = await self._get_owned(user_id, task_id)

        fields = {key: value for key, value in updates.items() if key in MUTABLE_FIELDS}
        violations = [
            {"field": key, "message": f"Task {key} cannot be empty"}
            for key in _REQUIRED_FIELDS
            if key in fields and not fields[key]
        ]
        if "completed" in fields and fields["completed"] is None:
            violations.append({"field": "completed", "message": "Task completed cannot be null"})
        if violations:
            raise ValidationError("Invalid input", errors=violations)

        for key, value in sync_completed(fields).items():
            setattr(task, MUTABLE_FIELDS[key], value)
        await self._session.flush()
        await self._session.refresh(task)
        return task

    async def delete_task(self, user_id: int, task_id: int) -> None:
        result = await self._session.execute(
            delete(Task).where(Task.id == task_id, Task.user_id == user_id)
        )
        if not result.rowcount:
            raise NotFoundError(TASK_NOT_FOUND)
        logger.debug("Deleted task %s for user %s", task_id, user_id)
