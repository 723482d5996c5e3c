"""
Versioned schema migrations.

Each step has a version number and is recorded in the ``schema_migrations``
ledger once applied, so it never runs twice.  Steps are additionally guarded
by introspection: databases created before the ledger existed (legacy
``email_notifications`` / ``reminder_sent`` columns, missing ``created_at``)
are brought forward without data loss.

DDL goes through Alembic ``Operations``.  Alterations use
``batch_alter_table(..., recreate="never")`` so they are emitted as plain
``ALTER TABLE`` statements (SQLite 3.35+ for DROP COLUMN); a copy-and-move
recreate would drop the UNIQUE constraints on ``users``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Set

import sqlalchemy as sa
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine

from core.errors import MigrationError
from database.models import SchemaMigration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Migration:
    version: int
    name: str
    apply: Callable[[Connection], None]

    @property
    def label(self) -> str:
        return f"{self.version:03d}_{self.name}"


def _ops(conn: Connection) -> Operations:
    return Operations(MigrationContext.configure(conn))


def _columns(conn: Connection, table: str) -> Set[str]:
    inspector = sa.inspect(conn)
    if not inspector.has_table(table):
        return set()
    return {col["name"] for col in inspector.get_columns(table)}


# ── Steps ───────────────────────────────────────────────────────────────


def _create_users_table(conn: Connection) -> None:
    if sa.inspect(conn).has_table("users"):
        return
    _ops(conn).create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(255), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("browser_notifications", sa.Boolean(), server_default=sa.true()),
    )
    logger.info("Created users table")


def _create_tasks_table(conn: Connection) -> None:
    if sa.inspect(conn).has_table("tasks"):
        return
    _ops(conn).create_table(
        "tasks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("priority", sa.String(32), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("dueDate", sa.String(32)),
        sa.Column("completed", sa.Boolean(), server_default=sa.false()),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    logger.info("Created tasks table")


def _rename_email_notifications(conn: Connection) -> None:
    columns = _columns(conn, "users")
    if "email_notifications" not in columns:
        return
    if "browser_notifications" in columns:
        logger.warning(
            "users has both email_notifications and browser_notifications; "
            "leaving the legacy column untouched"
        )
        return
    with _ops(conn).batch_alter_table("users", recreate="never") as batch:
        batch.alter_column(
            "email_notifications",
            new_column_name="browser_notifications",
            existing_type=sa.Boolean(),
        )
    logger.info("Renamed email_notifications to browser_notifications")


def _add_browser_notifications(conn: Connection) -> None:
    if "browser_notifications" in _columns(conn, "users"):
        return
    with _ops(conn).batch_alter_table("users", recreate="never") as batch:
        batch.add_column(
            sa.Column("browser_notifications", sa.Boolean(), server_default=sa.true())
        )
    logger.info("Added browser_notifications to users")


def _drop_reminder_sent(conn: Connection) -> None:
    if "reminder_sent" not in _columns(conn, "tasks"):
        return
    with _ops(conn).batch_alter_table("tasks", recreate="never") as batch:
        batch.drop_column("reminder_sent")
    logger.info("Removed reminder_sent column from tasks")


def _add_created_at(conn: Connection) -> None:
    if "created_at" in _columns(conn, "tasks"):
        return
    # SQLite cannot add a column with a non-constant default, so backfill instead
    _ops(conn).add_column("tasks", sa.Column("created_at", sa.DateTime(timezone=True)))
    tasks = sa.table("tasks", sa.column("created_at", sa.DateTime(timezone=True)))
    conn.execute(tasks.update().values(created_at=datetime.now(timezone.utc)))
    logger.info("Added created_at to tasks")


MIGRATIONS: List[Migration] = [
    Migration(1, "create_users", _create_users_table),
    Migration(2, "create_tasks", _create_tasks_table),
    Migration(3, "rename_email_notifications", _rename_email_notifications),
    Migration(4, "add_browser_notifications", _add_browser_notifications),
    Migration(5, "drop_reminder_sent", _drop_reminder_sent),
    Migration(6, "add_tasks_created_at", _add_created_at),
]


# ── Runner ──────────────────────────────────────────────────────────────


def _ensure_ledger(conn: Connection) -> None:
    SchemaMigration.__table__.create(conn, checkfirst=True)


async def applied_versions(engine: AsyncEngine) -> Set[int]:
    async with engine.begin() as conn:
        await conn.run_sync(_ensure_ledger)
        result = await conn.execute(sa.select(SchemaMigration.version))
        return set(result.scalars().all())


async def run_migrations(
    engine: AsyncEngine,
    strict: bool = True,
    migrations: List[Migration] | None = None,
) -> List[int]:
    """
    Apply every migration not yet recorded in the ledger, in version order.

    Each step runs in its own transaction together with its ledger row.
    On failure the step is logged; with ``strict`` a ``MigrationError`` is
    raised, otherwise the remaining steps are skipped and startup goes on.

    Returns the versions applied by this call.
    """
    steps = sorted(migrations if migrations is not None else MIGRATIONS, key=lambda m: m.version)
    done = await applied_versions(engine)
    applied: List[int] = []

    for migration in steps:
        if migration.version in done:
            continue
        try:
            async with engine.begin() as conn:
                await conn.run_sync(migration.apply)
                await conn.execute(
                    sa.insert(SchemaMigration).values(
                        version=migration.version,
                        name=migration.name,
                        applied_at=datetime.now(timezone.utc),
                    )
                )
        except Exception as exc:
            logger.exception("Migration %s failed", migration.label)
            if strict:
                raise MigrationError(f"Migration {migration.label} failed: {exc}") from exc
            logger.warning(
                "Skipping remaining migrations; schema may not match the application"
            )
            break
        logger.info("Applied migration %s", migration.label)
        applied.append(migration.version)

    if applied:
        logger.info("Database schema ready (applied %d migration(s))", len(applied))
    else:
        logger.info("Database schema already up to date")
    return applied
