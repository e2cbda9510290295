"""Habit tools."""
from ..registry import register_tool, ToolParam, ToolName, ToolGroup
from ...actions import habits as habit_actions
from ...models import HABIT_FREQUENCIES


def _habit_summary(habit) -> dict:
    data = habit.as_dict()
    data["completions"] = len(habit.logs)
    return data


@register_tool(
    ToolName.CREATE_HABIT,
    description="Create a new habit to track",
    params=[
        ToolParam("title", description="The habit title"),
        ToolParam("frequency", enum=list(HABIT_FREQUENCIES)),
    ],
    group=ToolGroup.HABITS,
)
async def create_habit(ctx, title, frequency):
    async with ctx.session_factory() as db:
        habit = await habit_actions.create_habit(db, ctx.user_id, title, frequency)
    return {"success": "Habit created!", "habit": habit.as_dict()}


@register_tool(
    ToolName.GET_HABITS,
    description="List the habits the user is tracking with their current streaks",
    params=[],
    group=ToolGroup.HABITS,
)
async def get_habits(ctx):
    async with ctx.session_factory() as db:
        habits = await habit_actions.list_habits(db, ctx.user_id)
        return {"habits": [_habit_summary(h) for h in habits]}


@register_tool(
    ToolName.COMPLETE_HABIT,
    description="Log today's completion of a habit",
    params=[
        ToolParam("habitId", type="integer", description="The id of the habit", dest="habit_id"),
    ],
    group=ToolGroup.HABITS,
)
async def complete_habit(ctx, habit_id):
    async with ctx.session_factory() as db:
        habit = await habit_actions.complete_habit_today(db, ctx.user_id, habit_id)
    return {"success": "Habit completed!", "habit": habit.as_dict()}
