"""Task tools — create tasks, list pending ones, mark them done."""
from ..registry import register_tool, ToolParam, ToolName, ToolGroup
from ...actions import tasks as task_actions
from ...models import TASK_PRIORITIES


@register_tool(
    ToolName.CREATE_TASK,
    description="Create a new task for the user",
    params=[
        ToolParam("title", description="The title of the task"),
        ToolParam("description", description="A detailed description", required=False),
        ToolParam("priority", required=False, enum=list(TASK_PRIORITIES)),
        ToolParam("dueDate", description="The due date in YYYY-MM-DD format", required=False, dest="due_date"),
        ToolParam("duration", type="integer", description="Estimated duration in minutes", required=False),
    ],
    group=ToolGroup.TASKS,
)
async def create_task(ctx, title, description=None, priority=None, due_date=None, duration=None):
    async with ctx.session_factory() as db:
        task = await task_actions.create_task(
            db, ctx.user_id, title,
            description=description, priority=priority, due_date=due_date, duration=duration,
        )
    return {"success": "Task created!", "task": task.as_dict()}


@register_tool(
    ToolName.GET_PENDING_TASKS,
    description="Get the current list of pending tasks for the user to help with scheduling",
    params=[],
    group=ToolGroup.TASKS,
)
async def get_pending_tasks(ctx):
    async with ctx.session_factory() as db:
        tasks = await task_actions.list_tasks(db, ctx.user_id)
    # Only incomplete items are useful for planning
    return {"tasks": [t.as_dict() for t in tasks if t.status == "TODO"]}


@register_tool(
    ToolName.COMPLETE_TASK,
    description="Mark one of the user's tasks as completed",
    params=[
        ToolParam("taskId", type="integer", description="The id of the task", dest="task_id"),
    ],
    group=ToolGroup.TASKS,
)
async def complete_task(ctx, task_id):
    async with ctx.session_factory() as db:
        task = await task_actions.update_task(db, ctx.user_id, task_id, status="COMPLETED")
    return {"success": "Task completed!", "task": task.as_dict()}
