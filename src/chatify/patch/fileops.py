from __future__ import annotations

import pathlib
from abc import ABC, abstractmethod

from chatify.errors import NotFoundError
from chatify.lib.paths import resolve_path


class PatchFileOps(ABC):
    """
    File operations used by the patch mutator. Paths are patch-relative;
    implementations own their resolution.
    """

    @abstractmethod
    def exists(self, rel: str) -> bool: ...

    @abstractmethod
    def read(self, rel: str) -> str: ...

    @abstractmethod
    def write(self, rel: str, content: str) -> None: ...

    @abstractmethod
    def delete(self, rel: str) -> None: ...


class FileSystemPatchFileOps(PatchFileOps):
    """
    File-backed implementation. Every path goes through resolve_path, so
    nothing outside base_path is touched; content is read and written
    without newline translation.
    """

    def __init__(self, base_path: pathlib.Path):
        self._base_path = pathlib.Path(base_path)

    def _resolve(self, rel: str) -> pathlib.Path:
        return resolve_path(self._base_path, rel)

    def exists(self, rel: str) -> bool:
        return self._resolve(rel).is_file()

    def read(self, rel: str) -> str:
        path = self._resolve(rel)
        if not path.is_file():
            raise NotFoundError(rel)
        with path.open("rt", encoding="utf-8", newline="") as fh:
            return fh.read()

    def write(self, rel: str, content: str) -> None:
        path = self._resolve(rel)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("wt", encoding="utf-8", newline="") as fh:
            fh.write(content)

    def delete(self, rel: str) -> None:
        path = self._resolve(rel)
        if not path.is_file():
            raise NotFoundError(rel)
        path.unlink()
