"""SQLAlchemy ORM models for users, tasks, habits, finances, and subscriptions."""
import datetime
from sqlalchemy import Column, Integer, String, DateTime, Date, Float, ForeignKey, Text
from sqlalchemy.orm import relationship
from .database import Base

TASK_STATUSES = ("TODO", "IN_PROGRESS", "COMPLETED", "CANCELED")
TASK_PRIORITIES = ("LOW", "MEDIUM", "HIGH", "URGENT")
HABIT_FREQUENCIES = ("DAILY", "WEEKLY")
TRANSACTION_TYPES = ("INCOME", "EXPENSE")
ACCOUNT_TYPES = ("CHECKING", "SAVINGS", "CREDIT", "CASH", "INVESTMENT")
SUBSCRIPTION_INTERVALS = ("WEEKLY", "MONTHLY", "YEARLY")
SUBSCRIPTION_STATUSES = ("ACTIVE", "CANCELED")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(128), default="")
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    tasks = relationship("Task", back_populates="owner", cascade="all, delete-orphan")
    habits = relationship("Habit", back_populates="owner", cascade="all, delete-orphan")


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(256), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(16), default="TODO")  # TODO / IN_PROGRESS / COMPLETED / CANCELED
    priority = Column(String(16), default="MEDIUM")  # LOW / MEDIUM / HIGH / URGENT
    due_date = Column(DateTime, nullable=True)
    duration = Column(Integer, nullable=True)  # minutes
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    owner = relationship("User", back_populates="tasks")


class Habit(Base):
    __tablename__ = "habits"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(256), nullable=False)
    frequency = Column(String(16), default="DAILY")  # DAILY / WEEKLY
    streak_current = Column(Integer, default=0)
    streak_best = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    owner = relationship("User", back_populates="habits")
    logs = relationship("HabitLog", back_populates="habit", cascade="all, delete-orphan",
                        lazy="selectin")


class HabitLog(Base):
    __tablename__ = "habit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    habit_id = Column(Integer, ForeignKey("habits.id"), nullable=False, index=True)
    completed_at = Column(DateTime, default=datetime.datetime.now)

    habit = relationship("Habit", back_populates="logs")


class FinancialAccount(Base):
    __tablename__ = "financial_accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(128), nullable=False)
    type = Column(String(16), nullable=False)  # CHECKING / SAVINGS / CREDIT / CASH / INVESTMENT
    balance = Column(Float, default=0.0)
    currency = Column(String(8), default="USD")
    created_at = Column(DateTime, default=datetime.datetime.utcnow)


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("financial_accounts.id"), nullable=True)
    amount = Column(Float, nullable=False)
    type = Column(String(16), nullable=False)  # INCOME / EXPENSE
    category = Column(String(64), nullable=False)
    description = Column(Text, nullable=True)
    date = Column(DateTime, default=datetime.datetime.now)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)


class Budget(Base):
    __tablename__ = "budgets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    category = Column(String(64), nullable=False)
    limit = Column(Float, nullable=False)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)


class Asset(Base):
    __tablename__ = "assets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(128), nullable=False)
    value = Column(Float, nullable=False)
    type = Column(String(32), default="")
    account_id = Column(Integer, ForeignKey("financial_accounts.id"), nullable=True)


class Liability(Base):
    __tablename__ = "liabilities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(128), nullable=False)
    amount = Column(Float, nullable=False)
    type = Column(String(32), default="")
    account_id = Column(Integer, ForeignKey("financial_accounts.id"), nullable=True)
    due_date = Column(Date, nullable=True)


class SavingsGoal(Base):
    __tablename__ = "savings_goals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(128), nullable=False)
    target = Column(Float, nullable=False)
    current = Column(Float, default=0.0)
    deadline = Column(Date, nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(128), nullable=False)
    amount = Column(Float, nullable=False)
    interval = Column(String(16), default="MONTHLY")  # WEEKLY / MONTHLY / YEARLY
    next_billing = Column(Date, nullable=False)
    status = Column(String(16), default="ACTIVE")  # ACTIVE / CANCELED
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
