from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional, Type

from pydantic import BaseModel, Field

from chatify.settings import ToolSpec

if TYPE_CHECKING:
    from chatify.project import Project


# Models
class ToolResponseType(str, Enum):
    text = "text"


class ToolTextResponse(BaseModel):
    type: ToolResponseType = Field(default=ToolResponseType.text)
    text: Optional[str] = None


# Global registry of tool name -> tool class
_registry: Dict[str, Type["BaseTool"]] = {}


def register_tool(name: str, tool: Type["BaseTool"]) -> None:
    """Registers a tool class."""
    if name in _registry:
        raise ValueError(f"Tool with name '{name}' already registered.")
    _registry[name] = tool


def unregister_tool(name: str) -> bool:
    """Unregister a tool by name. Returns True if removed, False if not present."""
    return _registry.pop(name, None) is not None


def get_tool(name: str) -> Optional[Type["BaseTool"]]:
    return _registry.get(name)


def get_all_tools() -> Dict[str, Type["BaseTool"]]:
    """Returns a copy of the tool registry."""
    return dict(_registry)


def require_dict_args(tool_name: str, args: Any) -> Dict[str, Any]:
    if not isinstance(args, dict):
        raise TypeError(f"{tool_name} expects arguments as an object")
    return args


def require_str_arg(tool_name: str, args: Dict[str, Any], key: str) -> str:
    value = args.get(key)
    if not isinstance(value, str) or not value:
        raise ValueError(f"{tool_name} requires '{key}' (non-empty string)")
    return value


class BaseTool(ABC):
    # Subclasses must set this to a unique string
    name: str

    def __init__(self, prj: "Project") -> None:
        self.prj = prj

    @abstractmethod
    async def run(self, spec: ToolSpec, args: Any) -> Optional[ToolTextResponse]:
        """
        Execute this tool within the context of the project.
        Args:
            spec: ToolSpec including name and optional config for this invocation.
            args: Parsed arguments (a dict), not a JSON string.
        Returns:
            ToolTextResponse with the text shown to the caller.
        """
        pass

    @abstractmethod
    async def openapi_spec(self, spec: ToolSpec) -> Dict[str, Any]:
        """
        Return this tool's definition in OpenAI 'function' tool format,
        using JSON Schema for parameters.
        """
        pass
