from typing import Any, Dict, Optional

from chatify.errors import PatchError
from chatify.logger import logger
from chatify.patch import PATCH_INSTRUCTION, apply_patch, format_error, format_summary
from chatify.settings import ToolSpec
from chatify.tools import base as tools_base


class ApplyPatchTool(tools_base.BaseTool):
    """
    Apply a patch to the project's filesystem under base_path.
    Returns a summary of applied changes, or the error together with the
    changes that were already written before it.
    """

    name = "apply_patch"

    async def run(self, spec: ToolSpec, args: Any):
        text: Optional[str] = None
        if isinstance(args, str):
            text = args
        elif isinstance(args, dict):
            arg_text = args.get("text")
            if isinstance(arg_text, str):
                text = arg_text

        if not text or not text.strip():
            raise ValueError("ApplyPatchTool requires 'text' (patch content)")

        try:
            affected = apply_patch(text, self.prj.base_path)
        except PatchError as e:
            logger.info("tool.apply_patch.failed", error=e.msg)
            return tools_base.ToolTextResponse(text=format_error(e))

        return tools_base.ToolTextResponse(text=format_summary(affected))

    async def openapi_spec(self, spec: ToolSpec) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": (
                "Apply a patch to create, update, move or delete files in the current project. "
                "Returns a summary of changes or errors.\n\n"
                "Patch content must follow these instructions:\n" + PATCH_INSTRUCTION
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "text": {
                        "type": "string",
                        "description": "Patch content, including *** Begin Patch and *** End Patch markers.",
                    },
                },
                "required": ["text"],
                "additionalProperties": False,
            },
        }


tools_base.register_tool(ApplyPatchTool.name, ApplyPatchTool)
