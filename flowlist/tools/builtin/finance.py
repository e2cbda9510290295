"""Finance tools — transactions, balance, accounts, net worth, savings goals."""
from ..registry import register_tool, ToolParam, ToolName, ToolGroup
from ...actions import finance as finance_actions
from ...models import ACCOUNT_TYPES, TRANSACTION_TYPES


@register_tool(
    ToolName.ADD_TRANSACTION,
    description="Record an income or expense transaction",
    params=[
        ToolParam("amount", type="number", description="Positive amount of money"),
        ToolParam("type", enum=list(TRANSACTION_TYPES)),
        ToolParam("category", description="Category such as Food, Rent, Salary"),
        ToolParam("description", description="Optional note", required=False),
        ToolParam("date", description="Transaction date in YYYY-MM-DD format, defaults to today", required=False),
        ToolParam("accountId", type="integer", description="Account to adjust", required=False, dest="account_id"),
    ],
    group=ToolGroup.FINANCE,
)
async def add_transaction(ctx, amount, type, category, description=None, date=None, account_id=None):
    async with ctx.session_factory() as db:
        txn = await finance_actions.add_transaction(
            db, ctx.user_id, amount, type, category,
            description=description, date=date, account_id=account_id,
        )
    return {"success": "Transaction added!", "transaction": txn.as_dict()}


@register_tool(
    ToolName.GET_FINANCIAL_STATUS,
    description="Get the user's overall balance, total income and total expenses",
    params=[],
    group=ToolGroup.FINANCE,
)
async def get_financial_status(ctx):
    async with ctx.session_factory() as db:
        return await finance_actions.get_balance_status(db, ctx.user_id)


@register_tool(
    ToolName.GET_MONTHLY_SUMMARY,
    description="Get income and expenses for one month",
    params=[
        ToolParam("month", type="integer", description="Month number 1-12"),
        ToolParam("year", type="integer", description="Four-digit year"),
    ],
    group=ToolGroup.FINANCE,
)
async def get_monthly_summary(ctx, month, year):
    async with ctx.session_factory() as db:
        summary = await finance_actions.get_monthly_summary(db, ctx.user_id, month, year)
    return {"month": month, "year": year, **summary}


@register_tool(
    ToolName.ADD_FINANCIAL_ACCOUNT,
    description="Add a bank, cash, credit or investment account",
    params=[
        ToolParam("name", description="Account name"),
        ToolParam("type", enum=list(ACCOUNT_TYPES)),
        ToolParam("balance", type="number", description="Current balance"),
        ToolParam("currency", description="ISO currency code, defaults to USD", required=False),
    ],
    group=ToolGroup.FINANCE,
)
async def add_financial_account(ctx, name, type, balance, currency=None):
    async with ctx.session_factory() as db:
        account = await finance_actions.add_account(db, ctx.user_id, name, type, balance, currency=currency)
    return {"success": "Account added!", "account": account.as_dict()}


@register_tool(
    ToolName.GET_FINANCIAL_ACCOUNTS,
    description="List the user's financial accounts and balances",
    params=[],
    group=ToolGroup.FINANCE,
)
async def get_financial_accounts(ctx):
    async with ctx.session_factory() as db:
        accounts = await finance_actions.list_accounts(db, ctx.user_id)
    return {"accounts": [a.as_dict() for a in accounts]}


@register_tool(
    ToolName.GET_NET_WORTH,
    description="Get total assets, total liabilities and net worth",
    params=[],
    group=ToolGroup.FINANCE,
)
async def get_net_worth(ctx):
    async with ctx.session_factory() as db:
        return await finance_actions.get_net_worth(db, ctx.user_id)


@register_tool(
    ToolName.ADD_SAVINGS_GOAL,
    description="Create a savings goal",
    params=[
        ToolParam("name", description="What the user is saving for"),
        ToolParam("target", type="number", description="Target amount"),
        ToolParam("deadline", description="Deadline in YYYY-MM-DD format", required=False),
    ],
    group=ToolGroup.FINANCE,
)
async def add_savings_goal(ctx, name, target, deadline=None):
    async with ctx.session_factory() as db:
        goal = await finance_actions.add_savings_goal(db, ctx.user_id, name, target, deadline=deadline)
    return {"success": "Savings goal created!", "goal": goal.as_dict()}


@register_tool(
    ToolName.GET_SAVINGS_GOALS,
    description="List savings goals and progress",
    params=[],
    group=ToolGroup.FINANCE,
)
async def get_savings_goals(ctx):
    async with ctx.session_factory() as db:
        goals = await finance_actions.list_savings_goals(db, ctx.user_id)
    return {"goals": [g.as_dict() for g in goals]}
