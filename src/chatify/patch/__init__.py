from __future__ import annotations

import pathlib
from typing import List, Optional

from chatify.errors import PatchError
from .applier import apply_replacements, compute_replacements, derive_new_contents
from .fileops import FileSystemPatchFileOps, PatchFileOps
from .matcher import seek_sequence
from .models import (
    AddHunk,
    AffectedPaths,
    DeleteHunk,
    Hunk,
    HunkType,
    ParsedPatch,
    Replacement,
    UpdateChunk,
    UpdateHunk,
)
from .mutator import apply_hunks_to_files
from .parser import PATCH_INSTRUCTION, parse_patch

__all__ = [
    "AddHunk",
    "AffectedPaths",
    "DeleteHunk",
    "FileSystemPatchFileOps",
    "Hunk",
    "HunkType",
    "PATCH_INSTRUCTION",
    "ParsedPatch",
    "PatchFileOps",
    "Replacement",
    "UpdateChunk",
    "UpdateHunk",
    "apply_hunks_to_files",
    "apply_patch",
    "apply_replacements",
    "compute_replacements",
    "derive_new_contents",
    "format_error",
    "format_summary",
    "parse_patch",
    "seek_sequence",
]


def apply_patch(
    text: str,
    base_path: pathlib.Path,
    ops: Optional[PatchFileOps] = None,
) -> AffectedPaths:
    """
    Parse patch text and apply it under base_path.
    If ops is not provided, a file-backed implementation under base_path is used.
    """
    parsed = parse_patch(text)
    file_ops = ops or FileSystemPatchFileOps(base_path)
    return apply_hunks_to_files(parsed.hunks, file_ops)


def _summary_lines(affected: AffectedPaths) -> List[str]:
    lines: List[str] = []
    if affected.added:
        lines.append(f"Added: {', '.join(affected.added)}")
    if affected.modified:
        lines.append(f"Modified: {', '.join(affected.modified)}")
    if affected.deleted:
        lines.append(f"Deleted: {', '.join(affected.deleted)}")
    return lines


def format_summary(affected: AffectedPaths) -> str:
    lines = _summary_lines(affected)
    return "\n".join(lines) if lines else "No changes applied"


def format_error(err: PatchError) -> str:
    """Describe a failed patch, including hunks that were already written."""
    lines = [f"Patch application failed: {err.msg}"]
    if err.affected is None or err.affected.empty:
        lines.append("No changes were applied.")
    else:
        lines.append("Changes from earlier hunks were applied and remain on disk:")
        lines.extend(_summary_lines(err.affected))
        lines.append(
            "Regenerate the patch for the remaining hunks only. You might want to re-read the source files."
        )
    return "\n".join(lines)
