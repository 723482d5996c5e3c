"""
Pydantic request / response schemas for the task API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TaskCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    due_date: Optional[str] = Field(None, alias="dueDate")


class TaskUpdate(BaseModel):
    """Partial update; unknown keys (``id``, ``user_id`` …) are dropped."""

    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    dueDate: Optional[str] = None
    completed: Optional[bool] = None


class TaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    title: str
    description: Optional[str] = ""
    priority: str
    status: str
    due_date: Optional[str] = Field(None, serialization_alias="dueDate")
    completed: bool
    user_id: int
    created_at: Optional[datetime] = None


class DueSoonTaskOut(TaskOut):
    days_until_due: int = Field(serialization_alias="daysUntilDue")
