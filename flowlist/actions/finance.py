"""Finance actions — transactions, budgets, accounts, net worth, savings goals, subscriptions."""
import logging
import math
from calendar import monthrange
from datetime import date, datetime
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from . import ActionError, NotFoundError
from ..models import (
    Asset, Budget, FinancialAccount, Liability, SavingsGoal, Subscription, Transaction,
    ACCOUNT_TYPES, SUBSCRIPTION_INTERVALS, TRANSACTION_TYPES,
)

logger = logging.getLogger(__name__)


def _parse_date(value, field: str) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ActionError(f"Invalid {field}: {value!r} (expected YYYY-MM-DD)")


def _require_positive(value, field: str) -> float:
    if value is None or not math.isfinite(value) or value <= 0:
        raise ActionError(f"{field} must be greater than 0")
    return float(value)


def _require_non_negative(value, field: str) -> float:
    if value is None or not math.isfinite(value) or value < 0:
        raise ActionError(f"{field} must not be negative")
    return float(value)


def _totals(transactions) -> Dict[str, float]:
    income = sum(t.amount for t in transactions if t.type == "INCOME")
    expenses = sum(t.amount for t in transactions if t.type == "EXPENSE")
    return {"income": income, "expenses": expenses}


# ── Transactions ──────────────────────────────────────────────

async def add_transaction(
    db: AsyncSession,
    user_id: int,
    amount: float,
    type: str,
    category: str,
    description: Optional[str] = None,
    date=None,
    account_id: Optional[int] = None,
) -> Transaction:
    amount = _require_positive(amount, "Amount")
    if type not in TRANSACTION_TYPES:
        raise ActionError(f"Invalid transaction type: {type}")
    if not category:
        raise ActionError("Category is required")

    account = None
    if account_id is not None:
        account = await get_account(db, user_id, account_id)

    when = _parse_date(date, "date")
    txn = Transaction(
        user_id=user_id,
        account_id=account_id,
        amount=amount,
        type=type,
        category=category,
        description=description,
        date=datetime.combine(when, datetime.min.time()) if when else datetime.now(),
    )
    db.add(txn)

    if account is not None:
        account.balance = (account.balance or 0.0) + (amount if type == "INCOME" else -amount)

    await db.commit()
    await db.refresh(txn)
    logger.info(f"Transaction added for user {user_id}: {type} {amount} ({category})")
    return txn


async def list_transactions(db: AsyncSession, user_id: int) -> List[Transaction]:
    result = await db.execute(
        select(Transaction).where(Transaction.user_id == user_id)
        .order_by(Transaction.date.desc(), Transaction.id.desc())
    )
    return list(result.scalars().all())


async def delete_transaction(db: AsyncSession, user_id: int, transaction_id: int) -> None:
    result = await db.execute(
        select(Transaction).where(Transaction.id == transaction_id, Transaction.user_id == user_id)
    )
    txn = result.scalar_one_or_none()
    if not txn:
        raise NotFoundError("Transaction not found")
    await db.delete(txn)
    await db.commit()


async def get_balance_status(db: AsyncSession, user_id: int) -> Dict[str, float]:
    totals = _totals(await list_transactions(db, user_id))
    return {
        "balance": totals["income"] - totals["expenses"],
        "income": totals["income"],
        "expenses": totals["expenses"],
    }


async def get_monthly_summary(db: AsyncSession, user_id: int, month: int, year: int) -> Dict[str, float]:
    if not 1 <= month <= 12:
        raise ActionError(f"Invalid month: {month}")
    if not 1 <= year <= 9999:
        raise ActionError(f"Invalid year: {year}")
    start = datetime(year, month, 1)
    end = datetime(year, month, monthrange(year, month)[1], 23, 59, 59, 999999)
    result = await db.execute(
        select(Transaction).where(
            Transaction.user_id == user_id,
            Transaction.date >= start,
            Transaction.date <= end,
        )
    )
    return _totals(result.scalars().all())


# ── Budgets ───────────────────────────────────────────────────

async def set_budget(db: AsyncSession, user_id: int, category: str, limit: float,
                     month: int, year: int) -> Budget:
    """Create or update the budget for a category in a given month."""
    limit = _require_positive(limit, "Limit")
    result = await db.execute(
        select(Budget).where(
            Budget.user_id == user_id, Budget.category == category,
            Budget.month == month, Budget.year == year,
        )
    )
    budget = result.scalar_one_or_none()
    if budget:
        budget.limit = limit
    else:
        budget = Budget(user_id=user_id, category=category, limit=limit, month=month, year=year)
        db.add(budget)
    await db.commit()
    await db.refresh(budget)
    return budget


async def list_budgets(db: AsyncSession, user_id: int, month: int, year: int) -> List[Budget]:
    result = await db.execute(
        select(Budget).where(Budget.user_id == user_id, Budget.month == month, Budget.year == year)
    )
    return list(result.scalars().all())


# ── Accounts ──────────────────────────────────────────────────

async def add_account(db: AsyncSession, user_id: int, name: str, type: str, balance: float = 0.0,
                      currency: Optional[str] = None) -> FinancialAccount:
    if not name:
        raise ActionError("Name is required")
    if type not in ACCOUNT_TYPES:
        raise ActionError(f"Invalid account type: {type}")
    balance = float(balance or 0.0)
    if not math.isfinite(balance):
        raise ActionError("Balance must be a finite number")
    account = FinancialAccount(
        user_id=user_id, name=name, type=type, balance=balance, currency=currency or "USD",
    )
    db.add(account)
    await db.commit()
    await db.refresh(account)
    return account


async def get_account(db: AsyncSession, user_id: int, account_id: int) -> FinancialAccount:
    result = await db.execute(
        select(FinancialAccount).where(FinancialAccount.id == account_id, FinancialAccount.user_id == user_id)
    )
    account = result.scalar_one_or_none()
    if not account:
        raise NotFoundError("Account not found")
    return account


async def list_accounts(db: AsyncSession, user_id: int) -> List[FinancialAccount]:
    result = await db.execute(select(FinancialAccount).where(FinancialAccount.user_id == user_id))
    return list(result.scalars().all())


# ── Assets & liabilities ──────────────────────────────────────

async def add_asset(db: AsyncSession, user_id: int, name: str, value: float, type: str = "",
                    account_id: Optional[int] = None) -> Asset:
    if not name:
        raise ActionError("Name is required")
    value = _require_non_negative(value, "Value")
    if account_id is not None:
        await get_account(db, user_id, account_id)
    asset = Asset(user_id=user_id, name=name, value=value, type=type, account_id=account_id)
    db.add(asset)
    await db.commit()
    await db.refresh(asset)
    return asset


async def add_liability(db: AsyncSession, user_id: int, name: str, amount: float, type: str = "",
                        account_id: Optional[int] = None, due_date=None) -> Liability:
    if not name:
        raise ActionError("Name is required")
    amount = _require_non_negative(amount, "Amount")
    if account_id is not None:
        await get_account(db, user_id, account_id)
    liability = Liability(
        user_id=user_id, name=name, amount=amount, type=type, account_id=account_id,
        due_date=_parse_date(due_date, "due date"),
    )
    db.add(liability)
    await db.commit()
    await db.refresh(liability)
    return liability


async def get_net_worth(db: AsyncSession, user_id: int) -> Dict[str, float]:
    assets = (await db.execute(select(Asset).where(Asset.user_id == user_id))).scalars().all()
    liabilities = (await db.execute(select(Liability).where(Liability.user_id == user_id))).scalars().all()
    accounts = await list_accounts(db, user_id)

    total_assets = sum(a.value for a in assets) + sum(
        a.balance for a in accounts if a.type != "CREDIT"
    )
    total_liabilities = sum(item.amount for item in liabilities) + sum(
        abs(a.balance) for a in accounts if a.type == "CREDIT"
    )
    return {
        "assets": total_assets,
        "liabilities": total_liabilities,
        "netWorth": total_assets - total_liabilities,
    }


# ── Savings goals ─────────────────────────────────────────────

async def add_savings_goal(db: AsyncSession, user_id: int, name: str, target: float,
                           deadline=None) -> SavingsGoal:
    if not name:
        raise ActionError("Name is required")
    target = _require_positive(target, "Target")
    goal = SavingsGoal(user_id=user_id, name=name, target=target, deadline=_parse_date(deadline, "deadline"))
    db.add(goal)
    await db.commit()
    await db.refresh(goal)
    return goal


async def update_savings_goal(db: AsyncSession, user_id: int, goal_id: int, current: float) -> SavingsGoal:
    result = await db.execute(
        select(SavingsGoal).where(SavingsGoal.id == goal_id, SavingsGoal.user_id == user_id)
    )
    goal = result.scalar_one_or_none()
    if not goal:
        raise NotFoundError("Savings goal not found")
    goal.current = _require_non_negative(current, "Current amount")
    await db.commit()
    await db.refresh(goal)
    return goal


async def list_savings_goals(db: AsyncSession, user_id: int) -> List[SavingsGoal]:
    result = await db.execute(select(SavingsGoal).where(SavingsGoal.user_id == user_id))
    return list(result.scalars().all())


# ── Subscriptions ─────────────────────────────────────────────

async def add_subscription(db: AsyncSession, user_id: int, name: str, amount: float, interval: str,
                           next_billing) -> Subscription:
    if not name:
        raise ActionError("Name is required")
    amount = _require_positive(amount, "Amount")
    if interval not in SUBSCRIPTION_INTERVALS:
        raise ActionError(f"Invalid subscription interval: {interval}")
    billing = _parse_date(next_billing, "next billing date")
    if billing is None:
        raise ActionError("Next billing date is required")
    sub = Subscription(user_id=user_id, name=name, amount=amount, interval=interval, next_billing=billing)
    db.add(sub)
    await db.commit()
    await db.refresh(sub)
    logger.info(f"Subscription added for user {user_id}: {name} {amount}/{interval}")
    return sub


async def list_subscriptions(db: AsyncSession, user_id: int) -> List[Subscription]:
    """Active subscriptions, soonest billing first."""
    result = await db.execute(
        select(Subscription)
        .where(Subscription.user_id == user_id, Subscription.status == "ACTIVE")
        .order_by(Subscription.next_billing.asc(), Subscription.id.asc())
    )
    return list(result.scalars().all())
