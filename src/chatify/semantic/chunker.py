from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Tuple


MAX_CHUNK_CHARS = 6000
MARKDOWN_EXTENSIONS = {".md", ".mdx"}


@dataclass(frozen=True)
class Chunk:
    path: str
    # 1-based, inclusive
    start_line: int
    end_line: int
    content: str


# (start_line, end_line, lines)
_Span = Tuple[int, int, List[str]]


def _split_lines_greedy(lines: List[str], start_line: int, max_chars: int) -> List[_Span]:
    """Accumulate lines (length + 1 each) until the next one would overflow."""
    out: List[_Span] = []
    current: List[str] = []
    current_start = start_line
    current_len = 0
    for i, line in enumerate(lines):
        line_len = len(line) + 1
        if current_len > 0 and current_len + line_len > max_chars:
            out.append((current_start, current_start + len(current) - 1, current))
            current = []
            current_len = 0
        if not current:
            current_start = start_line + i
        current.append(line)
        current_len += line_len
    if current:
        out.append((current_start, current_start + len(current) - 1, current))
    return out


def _split_paragraphs(lines: List[str], start_line: int, max_chars: int) -> List[_Span]:
    # A paragraph ends with (and includes) a blank line.
    paragraphs: List[_Span] = []
    current: List[str] = []
    current_start = start_line
    for i, line in enumerate(lines):
        if not current:
            current_start = start_line + i
        current.append(line)
        if line.strip() == "":
            paragraphs.append((current_start, start_line + i, current))
            current = []
    if current:
        paragraphs.append((current_start, start_line + len(lines) - 1, current))

    out: List[_Span] = []
    acc: List[str] = []
    acc_start = start_line
    acc_len = 0
    for para_start, _para_end, para_lines in paragraphs:
        text_len = len("\n".join(para_lines))
        if acc_len > 0 and acc_len + text_len > max_chars:
            out.append((acc_start, acc_start + len(acc) - 1, acc))
            acc = []
            acc_len = 0

        if text_len > max_chars:
            if acc:
                out.append((acc_start, acc_start + len(acc) - 1, acc))
                acc = []
                acc_len = 0
            out.extend(_split_lines_greedy(para_lines, para_start, max_chars))
            continue

        if not acc:
            acc_start = para_start
        acc.extend(para_lines)
        acc_len += text_len

    if acc:
        out.append((acc_start, acc_start + len(acc) - 1, acc))
    return out


def _chunk_markdown(path: str, text: str, max_chars: int) -> List[Chunk]:
    lines = text.split("\n")
    chunks: List[Chunk] = []
    index = 0

    if lines[0] == "---":
        end = next((i for i in range(1, len(lines)) if lines[i] == "---"), -1)
        if end > 0:
            chunks.append(Chunk(path, 1, end + 1, "\n".join(lines[: end + 1])))
            index = end + 1

    def flush(section_start: int, section: List[str]) -> None:
        # section_start is 0-based
        if not section:
            return
        content = "\n".join(section)
        if len(content) <= max_chars:
            chunks.append(
                Chunk(path, section_start + 1, section_start + len(section), content)
            )
            return
        for start, end, span_lines in _split_paragraphs(
            section, section_start + 1, max_chars
        ):
            chunks.append(Chunk(path, start, end, "\n".join(span_lines)))

    section_start = index
    section: List[str] = []
    for i in range(index, len(lines)):
        line = lines[i]
        if line.startswith("#"):
            flush(section_start, section)
            section_start = i
            section = [line]
            continue
        section.append(line)
    flush(section_start, section)
    return chunks


def _chunk_text(path: str, text: str, max_chars: int) -> List[Chunk]:
    return [
        Chunk(path, start, end, "\n".join(span_lines))
        for start, end, span_lines in _split_lines_greedy(text.split("\n"), 1, max_chars)
    ]


def chunk_file(path: str, text: str, max_chars: int = MAX_CHUNK_CHARS) -> List[Chunk]:
    """
    Split a file's text into embeddable chunks.

    Markdown files are chunked by front matter, heading sections and
    paragraphs; everything else by greedily packing whole lines.
    """
    ext = os.path.splitext(path)[1].lower()
    if ext in MARKDOWN_EXTENSIONS:
        return _chunk_markdown(path, text, max_chars)
    return _chunk_text(path, text, max_chars)
