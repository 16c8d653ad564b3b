from __future__ import annotations

import json
from typing import Any, Dict

from pydantic import ValidationError

from chatify.settings import ToolSpec
from chatify.todo import TodoList, read_todo_file, write_todo_file
from chatify.tools import base as tools_base


def _dump_todos(todo_list: TodoList) -> str:
    return json.dumps(todo_list.model_dump(mode="json")["todos"], indent=2)


class TodoWriteTool(tools_base.BaseTool):
    """Replace the project todo list."""

    name = "todowrite"

    async def run(self, spec: ToolSpec, args: Any):
        args = tools_base.require_dict_args(self.name, args)
        raw_todos = args.get("todos")
        if not isinstance(raw_todos, list):
            raise ValueError("todowrite requires a 'todos' list")
        try:
            todo_list = TodoList.model_validate({"todos": raw_todos})
        except ValidationError as e:
            raise ValueError(f"Invalid todo list: {e}") from e

        message = write_todo_file(self.prj.todo_path, todo_list)
        return tools_base.ToolTextResponse(text=message + "\n" + _dump_todos(todo_list))

    async def openapi_spec(self, spec: ToolSpec) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": (
                "Manage the task list for multi-step work. Only one task may be "
                "in_progress at a time; mark tasks completed as soon as they are done. "
                "Skip for simple, single-step requests."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "todos": {
                        "type": "array",
                        "description": "The full updated todo list.",
                        "items": {
                            "type": "object",
                            "properties": {
                                "content": {
                                    "type": "string",
                                    "description": "Brief description of the task",
                                },
                                "status": {
                                    "type": "string",
                                    "enum": ["pending", "in_progress", "completed", "cancelled"],
                                },
                                "priority": {
                                    "type": "string",
                                    "enum": ["high", "medium", "low"],
                                },
                                "id": {
                                    "type": "string",
                                    "description": "Unique identifier for the todo item",
                                },
                            },
                            "required": ["content", "status", "priority", "id"],
                            "additionalProperties": False,
                        },
                    },
                },
                "required": ["todos"],
                "additionalProperties": False,
            },
        }


class TodoReadTool(tools_base.BaseTool):
    name = "todoread"

    async def run(self, spec: ToolSpec, args: Any):
        return tools_base.ToolTextResponse(
            text=_dump_todos(read_todo_file(self.prj.todo_path))
        )

    async def openapi_spec(self, spec: ToolSpec) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": "Read the current task list. Check it before starting new work.",
            "parameters": {
                "type": "object",
                "properties": {},
                "additionalProperties": False,
            },
        }


tools_base.register_tool(TodoWriteTool.name, TodoWriteTool)
tools_base.register_tool(TodoReadTool.name, TodoReadTool)
