from pathlib import Path
from typing import Dict

import pytest

from chatify.errors import (
    FileOperationError,
    NoOpError,
    NotFoundError,
    OldLinesNotFoundError,
    PathOutsideRootError,
)
from chatify.patch import (
    AddHunk,
    DeleteHunk,
    FileSystemPatchFileOps,
    PatchFileOps,
    UpdateChunk,
    UpdateHunk,
    apply_hunks_to_files,
    apply_patch,
    format_error,
    format_summary,
)


class MemoryFileOps(PatchFileOps):
    def __init__(self, files: Dict[str, str]) -> None:
        self.files = dict(files)

    def exists(self, rel: str) -> bool:
        return rel in self.files

    def read(self, rel: str) -> str:
        if rel not in self.files:
            raise NotFoundError(rel)
        return self.files[rel]

    def write(self, rel: str, content: str) -> None:
        self.files[rel] = content

    def delete(self, rel: str) -> None:
        if rel not in self.files:
            raise NotFoundError(rel)
        del self.files[rel]


def test_empty_hunk_list_is_noop_error():
    with pytest.raises(NoOpError):
        apply_hunks_to_files([], MemoryFileOps({}))


def test_add_update_delete_in_memory():
    ops = MemoryFileOps({"f.txt": "pre\nold\npost\n", "gone.txt": "x"})
    hunks = [
        AddHunk(path="new.txt", contents="hello"),
        UpdateHunk(path="f.txt", chunks=[UpdateChunk(old_lines=["old"], new_lines=["new"])]),
        DeleteHunk(path="gone.txt"),
    ]
    affected = apply_hunks_to_files(hunks, ops)

    assert affected.added == ["new.txt"]
    assert affected.modified == ["f.txt"]
    assert affected.deleted == ["gone.txt"]
    # Add content is written verbatim, without a trailing newline
    assert ops.files["new.txt"] == "hello"
    assert ops.files["f.txt"] == "pre\nnew\npost\n"
    assert "gone.txt" not in ops.files


def test_update_sees_earlier_add_in_same_patch():
    ops = MemoryFileOps({})
    hunks = [
        AddHunk(path="a.txt", contents="one\ntwo"),
        UpdateHunk(path="a.txt", chunks=[UpdateChunk(old_lines=["two"], new_lines=["2"])]),
    ]
    affected = apply_hunks_to_files(hunks, ops)
    assert ops.files["a.txt"] == "one\n2\n"
    assert affected.added == ["a.txt"]
    assert affected.modified == ["a.txt"]


def test_update_with_move_records_modified_destination():
    ops = MemoryFileOps({"src/a.py": "A = 1\n"})
    hunk = UpdateHunk(
        path="src/a.py",
        move_path="lib/b.py",
        chunks=[UpdateChunk(old_lines=["A = 1"], new_lines=["A = 2"])],
    )
    affected = apply_hunks_to_files([hunk], ops)
    assert affected.modified == ["lib/b.py"]
    assert affected.added == []
    assert affected.deleted == []
    assert ops.files == {"lib/b.py": "A = 2\n"}


def test_delete_missing_keeps_earlier_hunks_and_reports_them():
    ops = MemoryFileOps({})
    hunks = [
        AddHunk(path="first.txt", contents="kept"),
        DeleteHunk(path="missing.txt"),
        AddHunk(path="never.txt", contents="no"),
    ]
    with pytest.raises(NotFoundError) as exc:
        apply_hunks_to_files(hunks, ops)

    assert exc.value.path == "missing.txt"
    assert exc.value.affected is not None
    assert exc.value.affected.added == ["first.txt"]
    assert ops.files == {"first.txt": "kept"}


def test_update_missing_file_raises_not_found():
    ops = MemoryFileOps({})
    hunk = UpdateHunk(path="nope.txt", chunks=[UpdateChunk(new_lines=["x"])])
    with pytest.raises(NotFoundError):
        apply_hunks_to_files([hunk], ops)


def test_apply_patch_on_filesystem(tmp_path: Path):
    (tmp_path / "f.txt").write_text("pre\nold\npost\n", encoding="utf-8")
    (tmp_path / "gone.txt").write_text("remove me", encoding="utf-8")
    (tmp_path / "mv").mkdir()
    (tmp_path / "mv" / "src.txt").write_text("keep\nchange\n", encoding="utf-8")

    patch_text = "\n".join(
        [
            "*** Begin Patch",
            "*** Update File: f.txt",
            "@@",
            " pre",
            "-old",
            "+new",
            " post",
            "*** Add File: nested/dir/new.txt",
            "+hello",
            "+world",
            "*** Delete File: gone.txt",
            "*** Update File: mv/src.txt",
            "*** Move to: moved/dst.txt",
            "@@ keep",
            "-change",
            "+changed",
            "*** End Patch",
        ]
    )
    ops = FileSystemPatchFileOps(tmp_path)
    affected = apply_patch(patch_text, tmp_path, ops)

    assert (tmp_path / "f.txt").read_text(encoding="utf-8") == "pre\nnew\npost\n"
    assert (tmp_path / "nested/dir/new.txt").read_text(encoding="utf-8") == "hello\nworld"
    assert not (tmp_path / "gone.txt").exists()
    assert not (tmp_path / "mv/src.txt").exists()
    assert (tmp_path / "moved/dst.txt").read_text(encoding="utf-8") == "keep\nchanged\n"

    assert format_summary(affected) == (
        "Added: nested/dir/new.txt\n"
        "Modified: f.txt, moved/dst.txt\n"
        "Deleted: gone.txt"
    )


def test_apply_patch_preserves_crlf_bytes(tmp_path: Path):
    (tmp_path / "w.txt").write_bytes(b"a\r\nb\r\n")
    patch_text = "*** Begin Patch\n*** Update File: w.txt\n@@\n-b\r\n+c\r\n*** End Patch"
    apply_patch(patch_text, tmp_path)
    assert (tmp_path / "w.txt").read_bytes() == b"a\r\nc\r\n"


def test_partial_failure_stays_on_disk(tmp_path: Path):
    (tmp_path / "f.txt").write_text("x\n", encoding="utf-8")
    patch_text = "\n".join(
        [
            "*** Begin Patch",
            "*** Add File: created.txt",
            "+data",
            "*** Update File: f.txt",
            "@@",
            "-not there",
            "+y",
            "*** End Patch",
        ]
    )
    with pytest.raises(OldLinesNotFoundError) as exc:
        apply_patch(patch_text, tmp_path)

    assert (tmp_path / "created.txt").read_text(encoding="utf-8") == "data"
    assert (tmp_path / "f.txt").read_text(encoding="utf-8") == "x\n"

    message = format_error(exc.value)
    assert message.startswith("Patch application failed: Failed to find expected lines in f.txt")
    assert "remain on disk" in message
    assert "Added: created.txt" in message


def test_format_error_without_applied_changes(tmp_path: Path):
    with pytest.raises(NotFoundError) as exc:
        apply_patch("*** Begin Patch\n*** Delete File: a\n*** End Patch", tmp_path)
    assert format_error(exc.value) == (
        "Patch application failed: File not found: a\nNo changes were applied."
    )


def test_format_summary_empty():
    from chatify.patch import AffectedPaths

    assert format_summary(AffectedPaths()) == "No changes applied"


def test_paths_outside_root_rejected(tmp_path: Path):
    base = tmp_path / "proj"
    base.mkdir()
    with pytest.raises(FileOperationError) as exc:
        apply_patch("*** Begin Patch\n*** Add File: ../evil.txt\n+x\n*** End Patch", base)
    assert isinstance(exc.value.cause, PathOutsideRootError)
    assert exc.value.path == "../evil.txt"
    assert not (tmp_path / "evil.txt").exists()


def test_symlinked_directory_cannot_escape_root(tmp_path: Path):
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "target.txt").write_text("keep\n", encoding="utf-8")
    base = tmp_path / "proj"
    base.mkdir()
    (base / "link").symlink_to(outside, target_is_directory=True)

    with pytest.raises(FileOperationError) as exc:
        apply_patch("*** Begin Patch\n*** Add File: link/evil.txt\n+pwned\n*** End Patch", base)
    assert isinstance(exc.value.cause, PathOutsideRootError)
    assert not (outside / "evil.txt").exists()

    with pytest.raises(FileOperationError):
        apply_patch(
            "*** Begin Patch\n*** Update File: link/target.txt\n@@\n-keep\n+changed\n*** End Patch",
            base,
        )
    assert (outside / "target.txt").read_text(encoding="utf-8") == "keep\n"


def test_symlink_inside_root_is_followed(tmp_path: Path):
    (tmp_path / "real").mkdir()
    (tmp_path / "alias").symlink_to(tmp_path / "real", target_is_directory=True)
    apply_patch("*** Begin Patch\n*** Add File: alias/a.txt\n+ok\n*** End Patch", tmp_path)
    assert (tmp_path / "real" / "a.txt").read_text(encoding="utf-8") == "ok"


def test_io_error_mid_patch_reports_earlier_hunks(tmp_path: Path):
    (tmp_path / "taken").mkdir()
    patch_text = "\n".join(
        [
            "*** Begin Patch",
            "*** Add File: ok.txt",
            "+fine",
            "*** Add File: taken",
            "+cannot write over a directory",
            "*** End Patch",
        ]
    )
    with pytest.raises(FileOperationError) as exc:
        apply_patch(patch_text, tmp_path)

    assert isinstance(exc.value.cause, OSError)
    assert exc.value.affected is not None
    assert exc.value.affected.added == ["ok.txt"]
    assert "Added: ok.txt" in format_error(exc.value)


def test_undecodable_file_is_reported_as_patch_error(tmp_path: Path):
    (tmp_path / "latin.txt").write_bytes(b"caf\xe9\n")
    patch_text = "*** Begin Patch\n*** Update File: latin.txt\n@@\n-x\n+y\n*** End Patch"
    with pytest.raises(FileOperationError) as exc:
        apply_patch(patch_text, tmp_path)
    assert isinstance(exc.value.cause, UnicodeDecodeError)
    assert format_error(exc.value).startswith(
        "Patch application failed: Cannot apply changes to latin.txt:"
    )


@pytest.mark.parametrize("move_path", ["a.txt", "./a.txt"])
def test_move_to_same_path_updates_in_place(move_path: str):
    ops = MemoryFileOps({"a.txt": "one\n"})
    hunk = UpdateHunk(
        path="a.txt",
        move_path=move_path,
        chunks=[UpdateChunk(old_lines=["one"], new_lines=["two"])],
    )
    affected = apply_hunks_to_files([hunk], ops)
    assert ops.files == {"a.txt": "two\n"}
    assert affected.modified == ["a.txt"]
    assert affected.deleted == []


def test_move_to_self_on_disk_keeps_file(tmp_path: Path):
    (tmp_path / "m.txt").write_text("v1\n", encoding="utf-8")
    patch_text = "\n".join(
        [
            "*** Begin Patch",
            "*** Update File: m.txt",
            "*** Move to: m.txt",
            "@@",
            "-v1",
            "+v2",
            "*** End Patch",
        ]
    )
    apply_patch(patch_text, tmp_path)
    assert (tmp_path / "m.txt").read_text(encoding="utf-8") == "v2\n"
