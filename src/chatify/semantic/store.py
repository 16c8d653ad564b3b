from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Iterator, NamedTuple, Optional, Sequence

import numpy as np

from .chunker import Chunk
from .embedder import decode_embedding, encode_embedding


_SCHEMA = (
    "CREATE TABLE IF NOT EXISTS files (path TEXT PRIMARY KEY, mtime INTEGER)",
    "CREATE TABLE IF NOT EXISTS chunks (id INTEGER PRIMARY KEY, path TEXT, "
    "start_line INTEGER, end_line INTEGER, content TEXT, embedding BLOB)",
)


class StoredChunk(NamedTuple):
    path: str
    start_line: int
    end_line: int
    content: str
    embedding: np.ndarray


class SemanticStore:
    """SQLite-backed chunk and embedding store for one project."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        # Autocommit; transactions are opened explicitly in replace_file.
        self._conn = sqlite3.connect(str(db_path), isolation_level=None)
        self._conn.execute("PRAGMA journal_mode = WAL")
        self._conn.execute("PRAGMA synchronous = NORMAL")
        for stmt in _SCHEMA:
            self._conn.execute(stmt)

    def __enter__(self) -> "SemanticStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._conn.close()

    def get_mtime(self, path: str) -> Optional[int]:
        row = self._conn.execute(
            "SELECT mtime FROM files WHERE path = ?", (path,)
        ).fetchone()
        return None if row is None else row[0]

    def delete_chunks(self, path: str) -> None:
        self._conn.execute("DELETE FROM chunks WHERE path = ?", (path,))

    def replace_file(
        self, path: str, mtime: int, chunks: Sequence[Chunk], embeddings: Sequence[np.ndarray]
    ) -> None:
        """Insert a file's chunks and record its mtime in a single transaction."""
        if len(chunks) != len(embeddings):
            raise ValueError(
                f"Got {len(embeddings)} embeddings for {len(chunks)} chunks of {path}"
            )
        self._conn.execute("BEGIN")
        try:
            self._conn.executemany(
                "INSERT INTO chunks (path, start_line, end_line, content, embedding) "
                "VALUES (?, ?, ?, ?, ?)",
                [
                    (c.path, c.start_line, c.end_line, c.content, encode_embedding(e))
                    for c, e in zip(chunks, embeddings)
                ],
            )
            self._conn.execute(
                "INSERT OR REPLACE INTO files (path, mtime) VALUES (?, ?)",
                (path, mtime),
            )
        except sqlite3.Error:
            self._conn.execute("ROLLBACK")
            raise
        self._conn.execute("COMMIT")

    def clear(self) -> None:
        self._conn.execute("DELETE FROM chunks")
        self._conn.execute("DELETE FROM files")

    def count_chunks(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM chunks").fetchone()[0]

    def iter_chunks(self) -> Iterator[StoredChunk]:
        cur = self._conn.execute(
            "SELECT path, start_line, end_line, content, embedding FROM chunks"
        )
        for path, start_line, end_line, content, blob in cur:
            yield StoredChunk(path, start_line, end_line, content, decode_embedding(blob))
