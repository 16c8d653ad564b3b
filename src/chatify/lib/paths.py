from __future__ import annotations

import os
from pathlib import Path
from typing import Final, FrozenSet, Union

from chatify.errors import PathOutsideRootError


IGNORE_DIRS: Final[FrozenSet[str]] = frozenset(
    {
        "node_modules",
        "__pycache__",
        ".git",
        ".chatify",
        "dist",
        "build",
        "out",
        "target",
        "vendor",
        ".next",
        ".turbo",
        ".idea",
        ".vscode",
        ".coverage",
        "coverage",
        ".cache",
        ".venv",
        "venv",
        ".mypy_cache",
        ".pytest_cache",
    }
)

BINARY_EXTENSIONS: Final[FrozenSet[str]] = frozenset(
    {
        ".zip", ".tar", ".gz", ".exe", ".dll", ".so", ".class", ".jar", ".war",
        ".7z", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx", ".odt",
        ".ods", ".odp", ".bin", ".dat", ".obj", ".o", ".a", ".lib", ".wasm",
        ".pyc", ".pyo", ".sqlite", ".db",
    }
)

IMAGE_EXTENSIONS: Final[FrozenSet[str]] = frozenset(
    {".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp"}
)

# Bytes sampled when sniffing for binary content.
BINARY_SNIFF_BYTES: Final[int] = 4096


def resolve_path(base_dir: Union[str, Path], input_path: Union[str, Path]) -> Path:
    """
    Resolve input_path against base_dir, following symlinks. The result must
    stay inside the resolved base_dir; PathOutsideRootError otherwise.
    Paths that do not exist yet resolve through their existing ancestors.
    """
    base = Path(base_dir).resolve()
    candidate = Path(os.path.expanduser(str(input_path)))
    if not candidate.is_absolute():
        candidate = base / candidate
    resolved = candidate.resolve(strict=False)
    if not resolved.is_relative_to(base):
        raise PathOutsideRootError(str(base), str(input_path))
    return resolved


def is_blocked_env_path(path: Union[str, Path]) -> bool:
    name = str(path)
    if name.endswith(".env.sample") or name.endswith(".env.example"):
        return False
    return ".env" in Path(name).name


def is_image_extension(path: Union[str, Path]) -> bool:
    return Path(path).suffix.lower() in IMAGE_EXTENSIONS


def is_binary_extension(path: Union[str, Path]) -> bool:
    return Path(path).suffix.lower() in BINARY_EXTENSIONS


def is_binary_file(path: Union[str, Path]) -> bool:
    """Extension check first, then a NUL / control-character sniff of the head."""
    if is_binary_extension(path):
        return True
    try:
        with open(path, "rb") as fh:
            head = fh.read(BINARY_SNIFF_BYTES)
    except OSError:
        return False
    if not head:
        return False
    if b"\x00" in head:
        return True
    non_printable = sum(1 for b in head if b < 9 or 13 < b < 32)
    return non_printable / len(head) > 0.3
