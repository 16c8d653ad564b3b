from __future__ import annotations

import asyncio
from typing import Any, Dict, List

from chatify.logger import logger
from chatify.settings import ToolSpec
from chatify.tools import base as tools_base


class BatchTool(tools_base.BaseTool):
    """
    Run several independent tool calls concurrently and join their outputs.
    Callers must not batch calls that touch the same file.
    """

    name = "batch"

    async def _run_one(self, call: Any) -> str:
        if not isinstance(call, dict):
            return "Invalid tool call: expected an object with 'tool' and 'parameters'"
        tool_name = call.get("tool")
        params = call.get("parameters") or {}

        tool_cls = tools_base.get_tool(tool_name) if isinstance(tool_name, str) else None
        settings = self.prj.settings
        if (
            tool_cls is None
            or tool_name == self.name
            or not settings.is_tool_enabled(tool_name)
        ):
            return f"Unsupported tool: {tool_name}"

        tool = tool_cls(self.prj)
        try:
            resp = await tool.run(settings.tool_spec(tool_name), params)
        except Exception as e:
            logger.info("tool.batch.call_failed", tool=tool_name, error=str(e))
            return f"Error in {tool_name}: {e}"
        if resp is None or resp.text is None:
            return ""
        return resp.text

    async def run(self, spec: ToolSpec, args: Any):
        args = tools_base.require_dict_args(self.name, args)
        calls = args.get("tool_calls")
        if not isinstance(calls, list) or not calls:
            raise ValueError("batch requires a non-empty 'tool_calls' list")

        max_calls = int(spec.config.get("max_calls", self.prj.settings.batch.max_calls))
        selected = calls[:max_calls]
        results: List[str] = list(
            await asyncio.gather(*(self._run_one(call) for call in selected))
        )
        if len(calls) > max_calls:
            results.append(
                f"Skipped {len(calls) - max_calls} tool calls beyond the batch limit of {max_calls}."
            )
        return tools_base.ToolTextResponse(text="\n\n".join(results))

    async def openapi_spec(self, spec: ToolSpec) -> Dict[str, Any]:
        max_calls = int(spec.config.get("max_calls", self.prj.settings.batch.max_calls))
        return {
            "name": self.name,
            "description": (
                f"Run multiple tools at once: 1-{max_calls} calls per batch, all run in "
                "parallel. Use for independent operations only; do not batch calls "
                "whose results depend on each other."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "tool_calls": {
                        "type": "array",
                        "minItems": 1,
                        "maxItems": max_calls,
                        "items": {
                            "type": "object",
                            "properties": {
                                "tool": {
                                    "type": "string",
                                    "description": "Name of the tool to call",
                                },
                                "parameters": {
                                    "type": "object",
                                    "description": "Parameters for the tool",
                                },
                            },
                            "required": ["tool", "parameters"],
                        },
                    },
                },
                "required": ["tool_calls"],
                "additionalProperties": False,
            },
        }


tools_base.register_tool(BatchTool.name, BatchTool)
