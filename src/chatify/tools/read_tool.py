from typing import Any, Dict

from chatify.lib.paths import is_binary_file, is_blocked_env_path, is_image_extension
from chatify.lib.text import trim_line
from chatify.settings import ToolSpec
from chatify.tools import base as tools_base


def _int_arg(args: Dict[str, Any], key: str, default: int) -> int:
    value = args.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"read '{key}' must be a number")
    value = int(value)
    if value < 0:
        raise ValueError(f"read '{key}' must not be negative")
    return value


class ReadTool(tools_base.BaseTool):
    """Line-numbered, paged reads of text files."""

    name = "read"

    async def run(self, spec: ToolSpec, args: Any):
        args = tools_base.require_dict_args(self.name, args)
        file_path = self.prj.resolve(tools_base.require_str_arg(self.name, args, "file_path"))
        read_settings = self.prj.settings.read

        if is_blocked_env_path(file_path):
            raise PermissionError(f"The user has blocked you from reading {file_path}")
        if is_image_extension(file_path):
            raise ValueError(f"Image reading is not supported: {file_path}")
        if is_binary_file(file_path):
            raise ValueError(f"Cannot read binary file: {file_path}")
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        if file_path.is_dir():
            raise IsADirectoryError(f"Path is a directory, not a file: {file_path}")

        offset = _int_arg(args, "offset", 0)
        limit = _int_arg(args, "limit", read_settings.default_limit)

        lines = file_path.read_text(encoding="utf-8", errors="replace").split("\n")
        window = lines[offset : offset + limit]
        numbered = [
            f"{offset + i + 1:05d}| {trim_line(line, read_settings.max_line_length)}"
            for i, line in enumerate(window)
        ]

        total_lines = len(lines)
        last_read_line = offset + len(numbered)
        output = "<file>\n" + "\n".join(numbered)
        if total_lines > last_read_line:
            output += (
                "\n\n(File has more lines. Use 'offset' parameter to read beyond "
                f"line {last_read_line})"
            )
        else:
            output += f"\n\n(End of file - total {total_lines} lines)"
        output += "\n</file>"
        return tools_base.ToolTextResponse(text=output)

    async def openapi_spec(self, spec: ToolSpec) -> Dict[str, Any]:
        limit = self.prj.settings.read.default_limit
        return {
            "name": self.name,
            "description": (
                "Read file contents as line-numbered output. "
                f"Default limit is {limit} lines; use offset and limit for large files. "
                "Long lines are truncated."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "file_path": {
                        "type": "string",
                        "description": "Path of the file to read, relative to the project root.",
                    },
                    "offset": {
                        "type": "integer",
                        "description": "The line number to start reading from (0-based).",
                    },
                    "limit": {
                        "type": "integer",
                        "description": f"The number of lines to read (defaults to {limit}).",
                    },
                },
                "required": ["file_path"],
                "additionalProperties": False,
            },
        }


tools_base.register_tool(ReadTool.name, ReadTool)
