from typing import Any, Dict

from chatify.lib.text import replace_once
from chatify.settings import ToolSpec
from chatify.tools import base as tools_base


class EditTool(tools_base.BaseTool):
    """Targeted string replacement inside a single file."""

    name = "edit"

    async def run(self, spec: ToolSpec, args: Any):
        args = tools_base.require_dict_args(self.name, args)
        file_path = self.prj.resolve(tools_base.require_str_arg(self.name, args, "file_path"))
        old_string = args.get("old_string")
        new_string = args.get("new_string")
        if not isinstance(old_string, str) or not isinstance(new_string, str):
            raise ValueError("edit requires 'old_string' and 'new_string' strings")

        if not file_path.is_file():
            raise FileNotFoundError(f"File not found: {file_path}")
        with open(file_path, "r", encoding="utf-8", newline="") as f:
            content = f.read()

        updated = replace_once(
            content, old_string, new_string, bool(args.get("replace_all", False))
        )
        with open(file_path, "w", encoding="utf-8", newline="") as f:
            f.write(updated)
        return tools_base.ToolTextResponse(text=f"Updated {self.prj.relpath(file_path)}")

    async def openapi_spec(self, spec: ToolSpec) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": (
                "Replace text in a file. Read the file first and preserve its "
                "formatting and indentation. Fails if old_string is not found or "
                "matches more than once; use replace_all for global replacements."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "file_path": {
                        "type": "string",
                        "description": "Path of the file to modify, relative to the project root.",
                    },
                    "old_string": {
                        "type": "string",
                        "description": "The text to replace. Empty replaces the whole file.",
                    },
                    "new_string": {
                        "type": "string",
                        "description": "The replacement text (must differ from old_string).",
                    },
                    "replace_all": {
                        "type": "boolean",
                        "description": "Replace every occurrence of old_string.",
                        "default": False,
                    },
                },
                "required": ["file_path", "old_string", "new_string"],
                "additionalProperties": False,
            },
        }


tools_base.register_tool(EditTool.name, EditTool)
