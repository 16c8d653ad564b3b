from typing import Any, Dict

from chatify.settings import ToolSpec
from chatify.tools import base as tools_base


class WriteTool(tools_base.BaseTool):
    name = "write"

    async def run(self, spec: ToolSpec, args: Any):
        args = tools_base.require_dict_args(self.name, args)
        file_path = self.prj.resolve(tools_base.require_str_arg(self.name, args, "file_path"))
        content = args.get("content")
        if not isinstance(content, str):
            raise ValueError("write requires 'content' (string)")

        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        return tools_base.ToolTextResponse(text=f"Wrote {self.prj.relpath(file_path)}")

    async def openapi_spec(self, spec: ToolSpec) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": (
                "Write file contents. Overwrites existing files completely and "
                "creates parent directories if needed. Use the edit tool for "
                "partial modifications."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "file_path": {
                        "type": "string",
                        "description": "Path of the file to write, relative to the project root.",
                    },
                    "content": {
                        "type": "string",
                        "description": "The full content to write.",
                    },
                },
                "required": ["file_path", "content"],
                "additionalProperties": False,
            },
        }


tools_base.register_tool(WriteTool.name, WriteTool)
