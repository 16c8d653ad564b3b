from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from chatify.patch.models import AffectedPaths


class PatchError(ValueError):
    """Any problem detected while parsing or applying a patch."""

    def __init__(self, msg: str) -> None:
        super().__init__(msg)
        self.msg = msg
        # Paths already committed to disk when the error was raised.
        self.affected: Optional["AffectedPaths"] = None


class ParseError(PatchError):
    """Patch envelope markers are missing or out of order."""


class ApplyError(PatchError):
    """A chunk could not be located in the current file content."""

    def __init__(self, msg: str, *, path: str, text: str) -> None:
        super().__init__(msg)
        self.path = path
        self.text = text


class ContextNotFoundError(ApplyError):
    def __init__(self, path: str, context: str) -> None:
        super().__init__(
            f"Failed to find context '{context}' in {path}",
            path=path,
            text=context,
        )


class OldLinesNotFoundError(ApplyError):
    def __init__(self, path: str, old_lines: List[str]) -> None:
        text = "\n".join(old_lines)
        super().__init__(
            f"Failed to find expected lines in {path}:\n{text}",
            path=path,
            text=text,
        )


class NotFoundError(PatchError):
    def __init__(self, path: str) -> None:
        super().__init__(f"File not found: {path}")
        self.path = path


class NoOpError(PatchError):
    def __init__(self, msg: str = "No files were modified.") -> None:
        super().__init__(msg)


class FileOperationError(PatchError):
    """A hunk failed while touching the filesystem. The original error is in `cause`."""

    def __init__(self, path: str, cause: Exception) -> None:
        super().__init__(f"Cannot apply changes to {path}: {cause}")
        self.path = path
        self.cause = cause


class EditError(ValueError):
    """Single-string replacement could not be performed."""


class MatchNotFoundError(EditError):
    pass


class AmbiguousMatchError(EditError):
    pass


class PathOutsideRootError(ValueError):
    def __init__(self, base_dir: str, path: str) -> None:
        super().__init__(f"Path must stay within {base_dir}: {path}")
        self.base_dir = base_dir
        self.path = path
