from __future__ import annotations

from typing import Optional, Sequence


def seek_sequence(
    lines: Sequence[str], pattern: Sequence[str], start: int = 0
) -> Optional[int]:
    """
    Return the lowest index >= start at which pattern occurs as a contiguous,
    element-wise equal run of lines, or None. An empty pattern never matches.
    """
    pat_len = len(pattern)
    if pat_len == 0:
        return None
    first = pattern[0]
    last_start = len(lines) - pat_len
    for i in range(max(0, start), last_start + 1):
        if lines[i] != first:
            continue
        j = 1
        while j < pat_len and lines[i + j] == pattern[j]:
            j += 1
        if j == pat_len:
            return i
    return None
