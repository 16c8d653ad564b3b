from __future__ import annotations

import posixpath
from typing import Sequence

from chatify.errors import FileOperationError, NoOpError, NotFoundError, PatchError
from chatify.logger import logger
from .applier import derive_new_contents
from .fileops import PatchFileOps
from .models import AffectedPaths, Hunk, HunkType


def _same_path(a: str, b: str) -> bool:
    return posixpath.normpath(a) == posixpath.normpath(b)


def _apply_hunk(hunk: Hunk, ops: PatchFileOps, affected: AffectedPaths) -> None:
    if hunk.type == HunkType.ADD:
        ops.write(hunk.path, hunk.contents)
        affected.added.append(hunk.path)
    elif hunk.type == HunkType.DELETE:
        ops.delete(hunk.path)
        affected.deleted.append(hunk.path)
    elif hunk.type == HunkType.UPDATE:
        if not ops.exists(hunk.path):
            raise NotFoundError(hunk.path)
        content = derive_new_contents(ops.read(hunk.path), hunk.path, hunk.chunks)
        # Moving a file onto itself is an in-place update.
        if hunk.move_path and not _same_path(hunk.move_path, hunk.path):
            ops.write(hunk.move_path, content)
            ops.delete(hunk.path)
            affected.modified.append(hunk.move_path)
        else:
            ops.write(hunk.path, content)
            affected.modified.append(hunk.path)
    else:
        raise PatchError(f"Unknown hunk type for {hunk.path}")


def _fail(err: PatchError, affected: AffectedPaths) -> None:
    err.affected = affected
    logger.warning(
        "patch.apply_failed",
        error=err.msg,
        added=affected.added,
        modified=affected.modified,
        deleted=affected.deleted,
    )


def apply_hunks_to_files(hunks: Sequence[Hunk], ops: PatchFileOps) -> AffectedPaths:
    """
    Apply hunks one by one, in document order, through ops.

    Not transactional: the first failing hunk stops the run and hunks before it
    stay on disk. The raised PatchError carries those paths in `affected`;
    filesystem and path errors are wrapped in FileOperationError for that.
    """
    if not hunks:
        raise NoOpError()

    affected = AffectedPaths()
    for hunk in hunks:
        try:
            _apply_hunk(hunk, ops, affected)
        except PatchError as e:
            _fail(e, affected)
            raise
        except (OSError, ValueError) as e:
            err = FileOperationError(hunk.path, e)
            _fail(err, affected)
            raise err from e

    logger.info(
        "patch.applied",
        added=affected.added,
        modified=affected.modified,
        deleted=affected.deleted,
    )
    return affected
