from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from chatify import todo as todo_state


def _item(id_: str, status: todo_state.TodoStatus) -> todo_state.TodoItem:
    return todo_state.TodoItem(id=id_, content=f"task {id_}", status=status)


def test_todolist_single_in_progress_validator() -> None:
    todo_state.TodoList(
        todos=[
            _item("a", todo_state.TodoStatus.pending),
            _item("b", todo_state.TodoStatus.in_progress),
        ]
    )

    with pytest.raises(ValidationError):
        todo_state.TodoList(
            todos=[
                _item("a", todo_state.TodoStatus.in_progress),
                _item("b", todo_state.TodoStatus.in_progress),
            ]
        )


def test_cancelled_items_still_count_as_remaining(tmp_path: Path) -> None:
    todo_list = todo_state.TodoList(
        todos=[
            _item("a", todo_state.TodoStatus.completed),
            _item("b", todo_state.TodoStatus.cancelled),
        ]
    )
    assert [t.id for t in todo_list.remaining] == ["b"]

    path = tmp_path / "todo.md"
    assert todo_state.write_todo_file(path, todo_list) == "1 todos remaining. Updated todo.md."
    assert todo_state.read_todo_file(path) == todo_list


def test_markdown_layout() -> None:
    todo_list = todo_state.TodoList(
        todos=[
            todo_state.TodoItem(
                id="1",
                content="Write docs",
                status=todo_state.TodoStatus.pending,
                priority=todo_state.TodoPriority.high,
            )
        ]
    )
    assert todo_state.format_todo_markdown(todo_list) == (
        "# Todo\n"
        "\n"
        "- [ ] Write docs (priority: high, id: 1, status: pending)\n"
        "\n"
        "<!-- chatify-todo\n"
        "[\n"
        "  {\n"
        '    "content": "Write docs",\n'
        '    "status": "pending",\n'
        '    "priority": "high",\n'
        '    "id": "1"\n'
        "  }\n"
        "]\n"
        "-->"
    )
