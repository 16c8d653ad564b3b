from __future__ import annotations

import re
from enum import Enum
from typing import Any, Dict, Final, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


# Variable replacement pattern.
# Supports:
#   - ${NAME}
#   - ${env:NAME}
# Ignores '$${NAME}' so it can be used to escape a literal '${NAME}'.
VAR_PATTERN = re.compile(
    r"(?<!\$)\$\{([A-Za-z_][A-Za-z0-9_]*(?::[A-Za-z_][A-Za-z0-9_]*)?)\}"
)

INCLUDE_KEY: Final[str] = "$include"

# Project-local directory holding config, semantic index, model cache and logs.
DATA_DIR_NAME: Final[str] = ".chatify"
CONFIG_FILE_NAME: Final[str] = "config.yaml"


class LogLevel(str, Enum):
    debug = "debug"
    info = "info"
    warning = "warning"
    error = "error"
    critical = "critical"


class LoggingSettings(BaseModel):
    # Default level for the chatify loggers if not overridden.
    default_level: LogLevel = LogLevel.info
    # Mapping of logger name -> level override (e.g., {"fastembed": "warning"})
    enabled_loggers: Dict[str, LogLevel] = Field(default_factory=dict)
    # Write log.txt into the project data directory.
    to_file: bool = False


class ToolSpec(BaseModel):
    """
    Per-tool configuration. May be given as a bare tool name in config files.
    """

    name: str
    enabled: bool = True
    config: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, v: Any) -> Any:
        if isinstance(v, str):
            return {"name": v}
        if isinstance(v, dict):
            name = v.get("name")
            if not isinstance(name, str) or not name:
                raise ValueError("Tool spec must include non-empty 'name'")
            return {
                "name": name,
                "enabled": v.get("enabled", True),
                "config": v.get("config", {}) or {},
            }
        return v


class IndexMode(str, Enum):
    changed = "changed"
    full = "full"


class SemanticSettings(BaseModel):
    # fastembed model name used for passages and queries.
    model_name: str = "sentence-transformers/all-MiniLM-L6-v2"
    db_filename: str = "semantic.sqlite"
    models_dirname: str = "models"
    # Files larger than this are never indexed.
    max_file_bytes: int = 1024 * 1024
    # Files producing more chunks than this are skipped entirely.
    max_chunks_per_file: int = 200
    embed_batch_size: int = 16
    max_chunk_chars: int = 6000
    # Refuse to index when the candidate set exceeds these limits (None = unlimited).
    max_targets: Optional[int] = None
    max_bytes: Optional[int] = None
    default_mode: IndexMode = IndexMode.changed
    text_extensions: List[str] = Field(
        default_factory=lambda: [
            ".md", ".mdx", ".txt", ".ts", ".tsx", ".js", ".jsx", ".json",
            ".yml", ".yaml", ".toml", ".py", ".go", ".rs", ".java", ".c",
            ".cpp", ".h", ".hpp", ".css", ".html", ".sh", ".bash", ".zsh",
        ]
    )

    @field_validator("text_extensions")
    @classmethod
    def _normalize_extensions(cls, v: List[str]) -> List[str]:
        out: List[str] = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext:
                continue
            out.append(ext if ext.startswith(".") else f".{ext}")
        return out


class ReadSettings(BaseModel):
    default_limit: int = 2000
    max_line_length: int = 2000


class BatchSettings(BaseModel):
    max_calls: int = 10


class TodoSettings(BaseModel):
    # Relative to the project root.
    filename: str = "todo.md"


class SearchSettings(BaseModel):
    default_limit: int = 5
    max_limit: int = 20
    snippet_chars: int = 400


class Settings(BaseModel):
    tools: List[ToolSpec] = Field(default_factory=list)
    semantic: SemanticSettings = Field(default_factory=SemanticSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    read: ReadSettings = Field(default_factory=ReadSettings)
    batch: BatchSettings = Field(default_factory=BatchSettings)
    todo: TodoSettings = Field(default_factory=TodoSettings)
    logging: Optional[LoggingSettings] = Field(default=None)

    def tool_spec(self, name: str) -> ToolSpec:
        """Configured spec for a tool, or a default enabled one."""
        for spec in self.tools:
            if spec.name == name:
                return spec
        return ToolSpec(name=name)

    def is_tool_enabled(self, name: str) -> bool:
        return self.tool_spec(name).enabled
