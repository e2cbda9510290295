"""Habit actions — create, list, delete, and daily completion with streaks."""
import logging
from datetime import datetime
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from . import ActionError, NotFoundError
from ..models import Habit, HabitLog, HABIT_FREQUENCIES

logger = logging.getLogger(__name__)


async def create_habit(db: AsyncSession, user_id: int, title: str, frequency: str) -> Habit:
    if not title or not title.strip():
        raise ActionError("Title is required")
    if frequency not in HABIT_FREQUENCIES:
        raise ActionError(f"Invalid frequency: {frequency}")

    habit = Habit(user_id=user_id, title=title.strip(), frequency=frequency)
    db.add(habit)
    await db.commit()
    await db.refresh(habit)
    logger.info(f"Habit created for user {user_id}: '{habit.title}' ({frequency})")
    return habit


async def list_habits(db: AsyncSession, user_id: int) -> List[Habit]:
    result = await db.execute(
        select(Habit).where(Habit.user_id == user_id).order_by(Habit.created_at.desc(), Habit.id.desc())
    )
    return list(result.scalars().all())


async def get_habit(db: AsyncSession, user_id: int, habit_id: int) -> Habit:
    result = await db.execute(select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id))
    habit = result.scalar_one_or_none()
    if not habit:
        raise NotFoundError("Habit not found")
    return habit


async def delete_habit(db: AsyncSession, user_id: int, habit_id: int) -> None:
    habit = await get_habit(db, user_id, habit_id)
    await db.delete(habit)
    await db.commit()


async def complete_habit_today(db: AsyncSession, user_id: int, habit_id: int, now=None) -> Habit:
    """Log today's completion and bump the streak. One log per calendar day."""
    habit = await get_habit(db, user_id, habit_id)

    now = now or datetime.now()
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    existing = await db.execute(
        select(HabitLog).where(HabitLog.habit_id == habit.id, HabitLog.completed_at >= start_of_day)
    )
    if existing.scalars().first():
        raise ActionError("Already completed today")

    db.add(HabitLog(habit_id=habit.id, completed_at=now))
    habit.streak_current = (habit.streak_current or 0) + 1
    habit.streak_best = max(habit.streak_best or 0, habit.streak_current)
    await db.commit()
    await db.refresh(habit)
    logger.info(f"Habit {habit.id} completed, streak={habit.streak_current}")
    return habit
