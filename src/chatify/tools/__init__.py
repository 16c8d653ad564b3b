# Re-export the base tool interfaces and registry
from .base import (  # noqa: F401
    BaseTool,
    ToolResponseType,
    ToolTextResponse,
    register_tool,
    unregister_tool,
    get_tool,
    get_all_tools,
)

# Importing the tool modules registers them.
from . import (  # noqa: F401
    apply_patch_tool,
    batch_tool,
    edit_tool,
    read_tool,
    semantic_tool,
    todo_tool,
    write_tool,
)
