"""REST API routes: assistant chat, tasks, habits, finances."""
import logging
from datetime import date, datetime
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from .actions import finance as finance_actions
from .actions import habits as habit_actions
from .actions import tasks as task_actions
from .auth import get_current_user_id, require_user_id
from .database import get_db
from .llm import Assistant, ErrorKind, build_assistant

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api")

_assistant: Optional[Assistant] = None


def get_assistant() -> Assistant:
    """FastAPI dependency: the process-wide assistant, built on first use."""
    global _assistant
    if _assistant is None:
        _assistant = build_assistant()
    return _assistant


# ── Pydantic schemas ──────────────────────────────────────────

class ClientMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str

class ChatRequest(BaseModel):
    messages: List[ClientMessage] = Field(default_factory=list)

class TaskCreate(BaseModel):
    title: str
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[str] = None
    duration: Optional[int] = None

class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[str] = None
    duration: Optional[int] = None

class TaskOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    status: str
    priority: str
    due_date: Optional[datetime] = None
    duration: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class HabitCreate(BaseModel):
    title: str
    frequency: str

class HabitOut(BaseModel):
    id: int
    title: str
    frequency: str
    streak_current: int
    streak_best: int
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class TransactionCreate(BaseModel):
    amount: float
    type: str
    category: str
    description: Optional[str] = None
    date: Optional[str] = None
    account_id: Optional[int] = None

class TransactionOut(BaseModel):
    id: int
    account_id: Optional[int] = None
    amount: float
    type: str
    category: str
    description: Optional[str] = None
    date: Optional[datetime] = None

    model_config = {"from_attributes": True}

class AccountCreate(BaseModel):
    name: str
    type: str
    balance: float = 0.0
    currency: Optional[str] = None

class AccountOut(BaseModel):
    id: int
    name: str
    type: str
    balance: float
    currency: str

    model_config = {"from_attributes": True}

class AssetCreate(BaseModel):
    name: str
    value: float
    type: str = ""
    account_id: Optional[int] = None

class LiabilityCreate(BaseModel):
    name: str
    amount: float
    type: str = ""
    account_id: Optional[int] = None
    due_date: Optional[str] = None

class BudgetSet(BaseModel):
    category: str
    limit: float
    month: int
    year: int

class BudgetOut(BaseModel):
    id: int
    category: str
    limit: float
    month: int
    year: int

    model_config = {"from_attributes": True}

class GoalCreate(BaseModel):
    name: str
    target: float
    deadline: Optional[str] = None

class GoalUpdate(BaseModel):
    current: float

class GoalOut(BaseModel):
    id: int
    name: str
    target: float
    current: float
    deadline: Optional[date] = None

    model_config = {"from_attributes": True}

class SubscriptionCreate(BaseModel):
    name: str
    amount: float
    interval: str = "MONTHLY"
    next_billing: str

class SubscriptionOut(BaseModel):
    id: int
    name: str
    amount: float
    interval: str
    next_billing: date
    status: str

    model_config = {"from_attributes": True}


# ── Assistant ─────────────────────────────────────────────────

_ERROR_STATUS = {
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.CONFIGURATION: 503,
    ErrorKind.AI_SERVICE: 502,
}


@router.post("/chat")
async def chat(
    req: ChatRequest,
    user_id: Optional[int] = Depends(get_current_user_id),
    assistant: Assistant = Depends(get_assistant),
):
    reply = await assistant.respond([m.model_dump() for m in req.messages], user_id)
    if reply.ok:
        return {"message": reply.message}
    return JSONResponse(
        status_code=_ERROR_STATUS[reply.error],
        content={"error": reply.error.value, "message": reply.message},
    )


# ── Tasks ─────────────────────────────────────────────────────

@router.get("/tasks", response_model=List[TaskOut])
async def list_tasks(user_id: int = Depends(require_user_id), db: AsyncSession = Depends(get_db)):
    return await task_actions.list_tasks(db, user_id)


@router.post("/tasks", response_model=TaskOut, status_code=201)
async def create_task(req: TaskCreate, user_id: int = Depends(require_user_id),
                      db: AsyncSession = Depends(get_db)):
    return await task_actions.create_task(db, user_id, **req.model_dump())


@router.patch("/tasks/{task_id}", response_model=TaskOut)
async def update_task(task_id: int, req: TaskUpdate, user_id: int = Depends(require_user_id),
                      db: AsyncSession = Depends(get_db)):
    # Update only provided fields
    return await task_actions.update_task(db, user_id, task_id, **req.model_dump(exclude_unset=True))


@router.delete("/tasks/{task_id}")
async def delete_task(task_id: int, user_id: int = Depends(require_user_id),
                      db: AsyncSession = Depends(get_db)):
    await task_actions.delete_task(db, user_id, task_id)
    return {"ok": True}


# ── Habits ────────────────────────────────────────────────────

@router.get("/habits", response_model=List[HabitOut])
async def list_habits(user_id: int = Depends(require_user_id), db: AsyncSession = Depends(get_db)):
    return await habit_actions.list_habits(db, user_id)


@router.post("/habits", response_model=HabitOut, status_code=201)
async def create_habit(req: HabitCreate, user_id: int = Depends(require_user_id),
                       db: AsyncSession = Depends(get_db)):
    return await habit_actions.create_habit(db, user_id, req.title, req.frequency)


@router.post("/habits/{habit_id}/complete", response_model=HabitOut)
async def complete_habit(habit_id: int, user_id: int = Depends(require_user_id),
                         db: AsyncSession = Depends(get_db)):
    return await habit_actions.complete_habit_today(db, user_id, habit_id)


@router.delete("/habits/{habit_id}")
async def delete_habit(habit_id: int, user_id: int = Depends(require_user_id),
                       db: AsyncSession = Depends(get_db)):
    await habit_actions.delete_habit(db, user_id, habit_id)
    return {"ok": True}


# ── Finance ───────────────────────────────────────────────────

@router.get("/finance/status")
async def financial_status(user_id: int = Depends(require_user_id), db: AsyncSession = Depends(get_db)):
    return await finance_actions.get_balance_status(db, user_id)


@router.get("/finance/summary")
async def monthly_summary(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1, le=9999),
    user_id: int = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await finance_actions.get_monthly_summary(db, user_id, month, year)


@router.get("/finance/transactions", response_model=List[TransactionOut])
async def list_transactions(user_id: int = Depends(require_user_id), db: AsyncSession = Depends(get_db)):
    return await finance_actions.list_transactions(db, user_id)


@router.post("/finance/transactions", response_model=TransactionOut, status_code=201)
async def add_transaction(req: TransactionCreate, user_id: int = Depends(require_user_id),
                          db: AsyncSession = Depends(get_db)):
    return await finance_actions.add_transaction(db, user_id, **req.model_dump())


@router.delete("/finance/transactions/{transaction_id}")
async def delete_transaction(transaction_id: int, user_id: int = Depends(require_user_id),
                             db: AsyncSession = Depends(get_db)):
    await finance_actions.delete_transaction(db, user_id, transaction_id)
    return {"ok": True}


@router.get("/finance/budgets", response_model=List[BudgetOut])
async def list_budgets(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1, le=9999),
    user_id: int = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await finance_actions.list_budgets(db, user_id, month, year)


@router.put("/finance/budgets", response_model=BudgetOut)
async def set_budget(req: BudgetSet, user_id: int = Depends(require_user_id),
                     db: AsyncSession = Depends(get_db)):
    return await finance_actions.set_budget(db, user_id, req.category, req.limit, req.month, req.year)


@router.get("/finance/accounts", response_model=List[AccountOut])
async def list_accounts(user_id: int = Depends(require_user_id), db: AsyncSession = Depends(get_db)):
    return await finance_actions.list_accounts(db, user_id)


@router.post("/finance/accounts", response_model=AccountOut, status_code=201)
async def add_account(req: AccountCreate, user_id: int = Depends(require_user_id),
                      db: AsyncSession = Depends(get_db)):
    return await finance_actions.add_account(db, user_id, req.name, req.type, req.balance, currency=req.currency)


@router.post("/finance/assets", status_code=201)
async def add_asset(req: AssetCreate, user_id: int = Depends(require_user_id),
                    db: AsyncSession = Depends(get_db)):
    asset = await finance_actions.add_asset(db, user_id, **req.model_dump())
    return asset.as_dict()


@router.post("/finance/liabilities", status_code=201)
async def add_liability(req: LiabilityCreate, user_id: int = Depends(require_user_id),
                        db: AsyncSession = Depends(get_db)):
    liability = await finance_actions.add_liability(db, user_id, **req.model_dump())
    return liability.as_dict()


@router.get("/finance/net-worth")
async def net_worth(user_id: int = Depends(require_user_id), db: AsyncSession = Depends(get_db)):
    return await finance_actions.get_net_worth(db, user_id)


@router.get("/finance/goals", response_model=List[GoalOut])
async def list_goals(user_id: int = Depends(require_user_id), db: AsyncSession = Depends(get_db)):
    return await finance_actions.list_savings_goals(db, user_id)


@router.post("/finance/goals", response_model=GoalOut, status_code=201)
async def add_goal(req: GoalCreate, user_id: int = Depends(require_user_id),
                   db: AsyncSession = Depends(get_db)):
    return await finance_actions.add_savings_goal(db, user_id, req.name, req.target, deadline=req.deadline)


@router.patch("/finance/goals/{goal_id}", response_model=GoalOut)
async def update_goal(goal_id: int, req: GoalUpdate, user_id: int = Depends(require_user_id),
                      db: AsyncSession = Depends(get_db)):
    return await finance_actions.update_savings_goal(db, user_id, goal_id, req.current)


@router.get("/finance/subscriptions", response_model=List[SubscriptionOut])
async def list_subscriptions(user_id: int = Depends(require_user_id), db: AsyncSession = Depends(get_db)):
    return await finance_actions.list_subscriptions(db, user_id)


@router.post("/finance/subscriptions", response_model=SubscriptionOut, status_code=201)
async def add_subscription(req: SubscriptionCreate, user_id: int = Depends(require_user_id),
                           db: AsyncSession = Depends(get_db)):
    return await finance_actions.add_subscription(db, user_id, **req.model_dump())
