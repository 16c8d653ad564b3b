from __future__ import annotations

import json
import re
from enum import Enum
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field, ValidationError, model_validator

from chatify.logger import logger


TODO_MARKER = "chatify-todo"
_PAYLOAD_RE = re.compile(r"<!-- " + TODO_MARKER + r"\n([\s\S]*?)\n-->")


class TodoStatus(str, Enum):
    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


class TodoPriority(str, Enum):
    high = "high"
    medium = "medium"
    low = "low"


class TodoItem(BaseModel):
    content: str = Field(..., description="Brief description of the task.")
    status: TodoStatus = Field(default=TodoStatus.pending)
    priority: TodoPriority = Field(default=TodoPriority.medium)
    id: str = Field(..., description="Unique identifier for the todo item.")


class TodoList(BaseModel):
    todos: List[TodoItem] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_single_in_progress(self) -> "TodoList":
        in_progress_count = sum(
            1 for item in self.todos if item.status == TodoStatus.in_progress
        )
        if in_progress_count > 1:
            raise ValueError(
                "At most one task may have status 'in_progress' in the todo list."
            )
        return self

    @property
    def remaining(self) -> List[TodoItem]:
        return [t for t in self.todos if t.status != TodoStatus.completed]


def format_todo_markdown(todo_list: TodoList) -> str:
    lines = ["# Todo", ""]
    for item in todo_list.todos:
        box = "x" if item.status == TodoStatus.completed else " "
        lines.append(
            f"- [{box}] {item.content} (priority: {item.priority.value}, "
            f"id: {item.id}, status: {item.status.value})"
        )
    lines.extend(["", f"<!-- {TODO_MARKER}"])
    lines.append(json.dumps(todo_list.model_dump(mode="json")["todos"], indent=2))
    lines.append("-->")
    return "\n".join(lines)


def read_todo_file(todo_path: Path) -> TodoList:
    """Load the embedded JSON payload; a missing or malformed file reads as empty."""
    if not todo_path.is_file():
        return TodoList()
    match = _PAYLOAD_RE.search(todo_path.read_text(encoding="utf-8"))
    if not match:
        return TodoList()
    try:
        raw = json.loads(match.group(1))
        return TodoList.model_validate({"todos": raw})
    except (ValueError, ValidationError) as e:
        logger.warning("todo.read_failed", path=str(todo_path), err=str(e))
        return TodoList()


def write_todo_file(todo_path: Path, todo_list: TodoList) -> str:
    """Persist the list. Once nothing is left to do the file is removed."""
    remaining = todo_list.remaining
    if not remaining:
        todo_path.unlink(missing_ok=True)
        return f"All todos completed. Removed {todo_path.name}."
    todo_path.parent.mkdir(parents=True, exist_ok=True)
    todo_path.write_text(format_todo_markdown(todo_list), encoding="utf-8")
    return f"{len(remaining)} todos remaining. Updated {todo_path.name}."
