"""Auto-import builtin tool modules to trigger @register_tool decorators."""
from . import tasks
from . import habits
from . import finance
