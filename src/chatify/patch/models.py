from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, NamedTuple, Optional, Union


class HunkType(str, Enum):
    ADD = "add"
    DELETE = "delete"
    UPDATE = "update"


@dataclass
class UpdateChunk:
    # Lines expected to exist contiguously in the target file.
    old_lines: List[str] = field(default_factory=list)
    # Lines substituted for old_lines.
    new_lines: List[str] = field(default_factory=list)
    # Single line located first; lower bound for the old_lines search.
    change_context: Optional[str] = None
    is_end_of_file: bool = False


@dataclass
class AddHunk:
    path: str
    # Full file text without a trailing newline.
    contents: str
    type: HunkType = field(default=HunkType.ADD, init=False)


@dataclass
class DeleteHunk:
    path: str
    type: HunkType = field(default=HunkType.DELETE, init=False)


@dataclass
class UpdateHunk:
    path: str
    move_path: Optional[str] = None
    chunks: List[UpdateChunk] = field(default_factory=list)
    type: HunkType = field(default=HunkType.UPDATE, init=False)


Hunk = Union[AddHunk, DeleteHunk, UpdateHunk]


@dataclass
class ParsedPatch:
    hunks: List[Hunk] = field(default_factory=list)


class Replacement(NamedTuple):
    start: int
    length: int
    new_lines: List[str]


@dataclass
class AffectedPaths:
    added: List[str] = field(default_factory=list)
    modified: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not (self.added or self.modified or self.deleted)
