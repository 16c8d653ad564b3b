from __future__ import annotations

from typing import List, Optional, Tuple

from chatify.errors import ParseError
from .models import AddHunk, DeleteHunk, Hunk, ParsedPatch, UpdateChunk, UpdateHunk


PATCH_INSTRUCTION = r"""Apply a patch to create, update, move, or delete files.

FORMAT RULES:
- Start with: *** Begin Patch
- End with: *** End Patch
- Lines starting with "-" are REMOVED from the file
- Lines starting with "+" are ADDED to the file
- Lines starting with " " (space) are kept unchanged (context)
- @@ starts a change block; text after @@ is a single line used to LOCATE it
- Change blocks within one file must be ordered top-to-bottom

CREATE A NEW FILE:
*** Begin Patch
*** Add File: path/to/new.txt
+first line of new file
+second line of new file
*** End Patch

REPLACE A LINE (must include both - and +):
*** Begin Patch
*** Update File: path/to/file.txt
@@ function hello() {
-  return "old"
+  return "new"
*** End Patch

INSERT A NEW LINE (use space prefix for context, then +):
*** Begin Patch
*** Update File: path/to/file.txt
@@
 import os
+import sys
*** End Patch

RENAME AND EDIT A FILE:
*** Begin Patch
*** Update File: old/name.py
*** Move to: new/name.py
@@
-VALUE = 1
+VALUE = 2
*** End Patch

DELETE A FILE:
*** Begin Patch
*** Delete File: path/to/remove.txt
*** End Patch

IMPORTANT: To replace a line, you MUST use "-oldline" then "+newline". The @@ line only locates WHERE to make changes.
Hunks are applied in order; if one fails, earlier hunks stay applied."""


BEGIN_MARKER = "*** Begin Patch"
END_MARKER = "*** End Patch"
ADD_FILE_PREFIX = "*** Add File:"
DELETE_FILE_PREFIX = "*** Delete File:"
UPDATE_FILE_PREFIX = "*** Update File:"
MOVE_TO_PREFIX = "*** Move to:"
END_OF_FILE_MARKER = "*** End of File"
DIRECTIVE_PREFIX = "***"
CHUNK_PREFIX = "@@"
CONTEXT_PREFIX = " "
DELETE_PREFIX = "-"
ADD_PREFIX = "+"


def _header_path(line: str, prefix: str) -> Optional[str]:
    if not line.startswith(prefix):
        return None
    path = line[len(prefix) :].strip()
    return path or None


def _find_marker(lines: List[str], marker: str) -> Optional[int]:
    for i, line in enumerate(lines):
        if line.strip() == marker:
            return i
    return None


def _parse_add_contents(lines: List[str], start: int, end: int) -> Tuple[str, int]:
    added: List[str] = []
    i = start
    while i < end and not lines[i].startswith(DIRECTIVE_PREFIX):
        if lines[i].startswith(ADD_PREFIX):
            added.append(lines[i][len(ADD_PREFIX) :])
        i += 1
    return "\n".join(added), i


def _parse_update_chunks(
    lines: List[str], start: int, end: int
) -> Tuple[List[UpdateChunk], int]:
    chunks: List[UpdateChunk] = []
    i = start
    while i < end and not lines[i].startswith(DIRECTIVE_PREFIX):
        if not lines[i].startswith(CHUNK_PREFIX):
            i += 1
            continue

        context = lines[i][len(CHUNK_PREFIX) :].strip()
        chunk = UpdateChunk(change_context=context or None)
        i += 1
        while i < end and not lines[i].startswith(CHUNK_PREFIX):
            line = lines[i]
            if line == END_OF_FILE_MARKER:
                chunk.is_end_of_file = True
                i += 1
                break
            if line.startswith(DIRECTIVE_PREFIX):
                break
            if line.startswith(CONTEXT_PREFIX):
                text = line[len(CONTEXT_PREFIX) :]
                chunk.old_lines.append(text)
                chunk.new_lines.append(text)
            elif line.startswith(DELETE_PREFIX):
                chunk.old_lines.append(line[len(DELETE_PREFIX) :])
            elif line.startswith(ADD_PREFIX):
                chunk.new_lines.append(line[len(ADD_PREFIX) :])
            i += 1
        chunks.append(chunk)
    return chunks, i


def parse_patch(text: str) -> ParsedPatch:
    """
    Parse patch text into typed hunks.
    - Only lines strictly between the first *** Begin Patch and the first
      *** End Patch are considered; both must exist and Begin must come first.
    - Lines that are not file headers between hunks are skipped.
    Raises ParseError on a malformed envelope.
    """
    lines = text.split("\n")
    begin_idx = _find_marker(lines, BEGIN_MARKER)
    end_idx = _find_marker(lines, END_MARKER)

    if begin_idx is None or end_idx is None or begin_idx >= end_idx:
        raise ParseError("Invalid patch format: missing Begin/End markers")

    hunks: List[Hunk] = []
    i = begin_idx + 1
    while i < end_idx:
        line = lines[i]

        path = _header_path(line, ADD_FILE_PREFIX)
        if path is not None:
            contents, i = _parse_add_contents(lines, i + 1, end_idx)
            hunks.append(AddHunk(path=path, contents=contents))
            continue

        path = _header_path(line, DELETE_FILE_PREFIX)
        if path is not None:
            hunks.append(DeleteHunk(path=path))
            i += 1
            continue

        path = _header_path(line, UPDATE_FILE_PREFIX)
        if path is not None:
            i += 1
            move_path: Optional[str] = None
            if i < end_idx and lines[i].startswith(MOVE_TO_PREFIX):
                move_path = _header_path(lines[i], MOVE_TO_PREFIX)
                i += 1
            chunks, i = _parse_update_chunks(lines, i, end_idx)
            hunks.append(UpdateHunk(path=path, move_path=move_path, chunks=chunks))
            continue

        i += 1

    return ParsedPatch(hunks=hunks)
