from __future__ import annotations

from typing import List, Optional, Sequence

from chatify.errors import ApplyError, ContextNotFoundError, OldLinesNotFoundError
from .matcher import seek_sequence
from .models import Replacement, UpdateChunk


def compute_replacements(
    original_lines: Sequence[str], path: str, chunks: Sequence[UpdateChunk]
) -> List[Replacement]:
    """
    Locate every chunk in original_lines and return the replacements sorted by
    start index. Chunks are matched in order with a forward-only cursor: each
    search starts where the previous match ended, or at the chunk's context
    line when one is given.
    """
    replacements: List[Replacement] = []
    line_index = 0

    for chunk in chunks:
        context_idx: Optional[int] = None
        if chunk.change_context:
            context_idx = seek_sequence(
                original_lines, [chunk.change_context], line_index
            )
            if context_idx is None:
                raise ContextNotFoundError(path, chunk.change_context)
            # The context line itself may be consumed again by old_lines.
            line_index = context_idx

        if not chunk.old_lines:
            if context_idx is not None:
                # Replaces the context line; new_lines must repeat it to keep it.
                replacements.append(Replacement(context_idx, 1, list(chunk.new_lines)))
            else:
                replacements.append(
                    Replacement(len(original_lines), 0, list(chunk.new_lines))
                )
            continue

        pattern = list(chunk.old_lines)
        new_slice = list(chunk.new_lines)
        found = seek_sequence(original_lines, pattern, line_index)

        # Tolerate a trailing blank line that the file does not have.
        if found is None and pattern[-1] == "":
            pattern = pattern[:-1]
            if new_slice and new_slice[-1] == "":
                new_slice = new_slice[:-1]
            found = seek_sequence(original_lines, pattern, line_index)

        if found is None:
            raise OldLinesNotFoundError(path, chunk.old_lines)

        replacements.append(Replacement(found, len(pattern), new_slice))
        line_index = found + len(pattern)

    replacements.sort(key=lambda r: r.start)
    _check_disjoint(original_lines, path, replacements)
    return replacements


def _check_disjoint(
    original_lines: Sequence[str], path: str, replacements: Sequence[Replacement]
) -> None:
    end = 0
    for start, length, _ in replacements:
        if start < end:
            text = "\n".join(original_lines[start:end])
            raise ApplyError(
                f"Overlapping changes in {path} at line {start + 1}:\n{text}",
                path=path,
                text=text,
            )
        end = max(end, start + length)


def apply_replacements(
    lines: Sequence[str], replacements: Sequence[Replacement]
) -> List[str]:
    """
    Build a new line list by copying the original spans between replacement
    boundaries. Replacements must be sorted by start index and disjoint.
    """
    result: List[str] = []
    cursor = 0
    for start, length, new_lines in replacements:
        if start > cursor:
            result.extend(lines[cursor:start])
        result.extend(new_lines)
        cursor = start + length
    result.extend(lines[cursor:])
    return result


def derive_new_contents(
    original: str, path: str, chunks: Sequence[UpdateChunk]
) -> str:
    """Apply update chunks to file text. The result ends with exactly one newline."""
    original_lines = original.split("\n")
    if original_lines and original_lines[-1] == "":
        original_lines.pop()

    replacements = compute_replacements(original_lines, path, chunks)
    new_lines = apply_replacements(original_lines, replacements)

    if not new_lines or new_lines[-1] != "":
        new_lines.append("")
    return "\n".join(new_lines)
