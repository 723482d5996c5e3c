"""
SQLAlchemy ORM models for the ``users`` and ``tasks`` tables.

The physical shape is owned by ``database.migrations``; these classes must
stay in step with the latest migration.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    true,
    false,
)
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column("password", String(255), nullable=False)
    browser_notifications = Column(Boolean, default=True, server_default=true())

    tasks = relationship("Task", back_populates="owner")

    def __repr__(self) -> str:
        return f"<User {self.id} {self.username}>"


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, default="")
    priority = Column(String(32), nullable=False, default="medium")
    status = Column(String(32), nullable=False, default="pending")
    due_date = Column("dueDate", String(32), nullable=True)
    completed = Column(Boolean, default=False, server_default=false())
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    owner = relationship("User", back_populates="tasks")

    def __repr__(self) -> str:
        return f"<Task {self.id} user={self.user_id} status={self.status}>"


class SchemaMigration(Base):
    __tablename__ = "schema_migrations"

    version = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(128), nullable=False)
    applied_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
