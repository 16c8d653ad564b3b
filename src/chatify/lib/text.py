from __future__ import annotations

from typing import Final

from chatify.errors import AmbiguousMatchError, EditError, MatchNotFoundError

# Longest line returned verbatim by the read tool.
MAX_LINE_LENGTH: Final[int] = 2000


def trim_line(line: str, max_length: int = MAX_LINE_LENGTH) -> str:
    if len(line) <= max_length:
        return line
    return line[:max_length] + "..."


def replace_once(
    content: str, old: str, new: str, replace_all: bool = False
) -> str:
    """
    Replace old with new in content.
    - An empty old string replaces the whole content.
    - Unless replace_all is set, old must occur exactly once.
    """
    if old == new:
        raise EditError("old_string and new_string must be different")
    if old == "":
        return new

    first = content.find(old)
    if first == -1:
        raise MatchNotFoundError("old_string not found in content")
    if replace_all:
        return content.replace(old, new)
    if content.rfind(old) != first:
        raise AmbiguousMatchError(
            "Found multiple matches for old_string. Provide more surrounding lines in old_string to identify the correct match."
        )
    return content[:first] + new + content[first + len(old) :]
