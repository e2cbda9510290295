"""Task actions — create, list, update, delete."""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from . import ActionError, NotFoundError
from ..models import Task, TASK_STATUSES, TASK_PRIORITIES

logger = logging.getLogger(__name__)

_UPDATABLE = ("title", "description", "status", "priority", "due_date", "duration")


def parse_due_date(value) -> Optional[datetime]:
    """Accept a datetime, an ISO date (YYYY-MM-DD) or ISO datetime string."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        raise ActionError(f"Invalid due date: {value!r} (expected YYYY-MM-DD)")


def _validate(title=None, status=None, priority=None, duration=None, require_title=True):
    if require_title or title is not None:
        if not title or not str(title).strip():
            raise ActionError("Title is required")
    if status is not None and status not in TASK_STATUSES:
        raise ActionError(f"Invalid status: {status}")
    if priority is not None and priority not in TASK_PRIORITIES:
        raise ActionError(f"Invalid priority: {priority}")
    if duration is not None and duration < 0:
        raise ActionError("Duration must not be negative")


async def create_task(
    db: AsyncSession,
    user_id: int,
    title: str,
    description: Optional[str] = None,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    due_date=None,
    duration: Optional[int] = None,
) -> Task:
    _validate(title=title, status=status, priority=priority, duration=duration)
    task = Task(
        user_id=user_id,
        title=title.strip(),
        description=description,
        status=status or "TODO",
        priority=priority or "MEDIUM",
        due_date=parse_due_date(due_date),
        duration=duration,
    )
    db.add(task)
    await db.commit()
    await db.refresh(task)
    logger.info(f"Task created for user {user_id}: '{task.title}' (id={task.id})")
    return task


async def list_tasks(db: AsyncSession, user_id: int) -> List[Task]:
    result = await db.execute(
        select(Task).where(Task.user_id == user_id).order_by(Task.created_at.desc(), Task.id.desc())
    )
    return list(result.scalars().all())


async def get_task(db: AsyncSession, user_id: int, task_id: int) -> Task:
    result = await db.execute(select(Task).where(Task.id == task_id, Task.user_id == user_id))
    task = result.scalar_one_or_none()
    if not task:
        raise NotFoundError("Task not found")
    return task


async def update_task(db: AsyncSession, user_id: int, task_id: int, **changes) -> Task:
    unknown = set(changes) - set(_UPDATABLE)
    if unknown:
        raise ActionError(f"Cannot update fields: {', '.join(sorted(unknown))}")
    _validate(
        title=changes.get("title"),
        status=changes.get("status"),
        priority=changes.get("priority"),
        duration=changes.get("duration"),
        require_title=False,
    )

    task = await get_task(db, user_id, task_id)
    for field, value in changes.items():
        if field == "due_date":
            value = parse_due_date(value)
        setattr(task, field, value)
    await db.commit()
    await db.refresh(task)
    return task


async def delete_task(db: AsyncSession, user_id: int, task_id: int) -> None:
    task = await get_task(db, user_id, task_id)
    await db.delete(task)
    await db.commit()
    logger.info(f"Task {task_id} deleted for user {user_id}")
