from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, NamedTuple, Optional

from chatify.lib.paths import IGNORE_DIRS
from chatify.logger import logger
from chatify.settings.models import DATA_DIR_NAME, IndexMode, SemanticSettings
from .chunker import chunk_file
from .embedder import Embedder, cosine_similarity, get_embedder
from .store import SemanticStore


SKIP_TOO_MANY_FILES = "too-many-files"
SKIP_TOO_LARGE = "too-large"


@dataclass
class IndexProgress:
    total: int
    processed: int
    indexed: int
    skipped: int
    chunks: int
    current_path: Optional[str] = None


ProgressCallback = Callable[[IndexProgress], None]


@dataclass
class IndexOptions:
    mode: IndexMode = IndexMode.changed
    on_progress: Optional[ProgressCallback] = None
    # Refuse to index when the candidate set exceeds these (None = no limit).
    max_targets: Optional[int] = None
    max_bytes: Optional[int] = None


@dataclass
class IndexResult:
    total: int = 0
    processed: int = 0
    indexed: int = 0
    skipped: int = 0
    chunks: int = 0
    mode: IndexMode = IndexMode.changed
    skipped_reason: Optional[str] = None


class ScoredChunk(NamedTuple):
    path: str
    start_line: int
    end_line: int
    content: str
    score: float


@dataclass
class _Target:
    path: Path
    mtime: int
    size: int


@dataclass
class _Collected:
    targets: List[_Target] = field(default_factory=list)
    skipped: int = 0
    total_bytes: int = 0


def semantic_data_dir(root: Path) -> Path:
    return root / DATA_DIR_NAME


def semantic_db_path(root: Path, settings: Optional[SemanticSettings] = None) -> Path:
    settings = settings or SemanticSettings()
    return semantic_data_dir(root) / settings.db_filename


def semantic_models_dir(root: Path, settings: Optional[SemanticSettings] = None) -> Path:
    settings = settings or SemanticSettings()
    return semantic_data_dir(root) / settings.models_dirname


def _mtime_ms(st: os.stat_result) -> int:
    return st.st_mtime_ns // 1_000_000


def _is_text_path(path: Path, settings: SemanticSettings) -> bool:
    ext = path.suffix.lower()
    # Files without an extension are assumed to be text.
    return not ext or ext in settings.text_extensions


def _walk_files(root: Path) -> List[Path]:
    out: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
        dirnames[:] = sorted(d for d in dirnames if d not in IGNORE_DIRS)
        for name in sorted(filenames):
            p = Path(dirpath) / name
            if p.is_file() and not p.is_symlink():
                out.append(p)
    return out


def collect_targets(
    root: Path, mode: IndexMode, store: SemanticStore, settings: SemanticSettings
) -> _Collected:
    """Files that need (re)indexing, plus the count of unchanged ones."""
    collected = _Collected()
    for path in _walk_files(root):
        if not _is_text_path(path, settings):
            continue
        st = path.stat()
        if st.st_size > settings.max_file_bytes:
            continue
        mtime = _mtime_ms(st)
        if mode == IndexMode.changed and store.get_mtime(str(path)) == mtime:
            collected.skipped += 1
            continue
        collected.targets.append(_Target(path, mtime, st.st_size))
        collected.total_bytes += st.st_size
    return collected


def ensure_semantic_index(
    root: Path,
    options: Optional[IndexOptions] = None,
    embedder: Optional[Embedder] = None,
    settings: Optional[SemanticSettings] = None,
) -> IndexResult:
    """
    Bring the project's semantic index up to date.

    In `changed` mode files whose stored mtime matches are left alone; `full`
    mode wipes the index first. Each file's chunks are replaced atomically.
    """
    options = options or IndexOptions()
    settings = settings or SemanticSettings()
    root = Path(root).resolve()
    mode = IndexMode(options.mode)
    semantic_data_dir(root).mkdir(parents=True, exist_ok=True)

    with SemanticStore(semantic_db_path(root, settings)) as store:
        if mode == IndexMode.full:
            store.clear()

        collected = collect_targets(root, mode, store, settings)
        targets = collected.targets
        result = IndexResult(
            total=len(targets), skipped=collected.skipped, mode=mode
        )

        def report(current_path: Optional[str] = None) -> None:
            if options.on_progress is None:
                return
            options.on_progress(
                IndexProgress(
                    total=result.total,
                    processed=result.processed,
                    indexed=result.indexed,
                    skipped=result.skipped,
                    chunks=result.chunks,
                    current_path=current_path,
                )
            )

        if not targets:
            report()
            return result

        max_targets = options.max_targets
        if max_targets is None:
            max_targets = settings.max_targets
        if max_targets is not None and len(targets) > max_targets:
            result.skipped_reason = SKIP_TOO_MANY_FILES
            report(f"skip:{SKIP_TOO_MANY_FILES}")
            logger.warning("semantic.index_refused", reason=SKIP_TOO_MANY_FILES, total=len(targets))
            return result

        max_bytes = options.max_bytes
        if max_bytes is None:
            max_bytes = settings.max_bytes
        if max_bytes is not None and collected.total_bytes > max_bytes:
            result.skipped_reason = SKIP_TOO_LARGE
            report(f"skip:{SKIP_TOO_LARGE}")
            logger.warning("semantic.index_refused", reason=SKIP_TOO_LARGE, bytes=collected.total_bytes)
            return result

        if embedder is None:
            embedder = get_embedder(semantic_models_dir(root, settings), settings.model_name)
        report()

        for target in targets:
            abs_path = str(target.path)
            report(abs_path)
            text = target.path.read_text(encoding="utf-8", errors="replace")
            result.processed += 1

            if not text.strip() or "\x00" in text:
                continue

            chunks = chunk_file(abs_path, text, settings.max_chunk_chars)
            if not chunks or len(chunks) > settings.max_chunks_per_file:
                logger.debug("semantic.file_skipped", path=abs_path, chunks=len(chunks))
                continue

            store.delete_chunks(abs_path)
            embeddings = embedder.embed_passages(
                [c.content for c in chunks], settings.embed_batch_size
            )
            store.replace_file(abs_path, target.mtime, chunks, embeddings)

            result.indexed += 1
            result.chunks += len(chunks)
            report(abs_path)

    logger.info(
        "semantic.indexed",
        root=str(root),
        mode=mode.value,
        total=result.total,
        indexed=result.indexed,
        chunks=result.chunks,
    )
    return result


def semantic_index_exists(root: Path, settings: Optional[SemanticSettings] = None) -> bool:
    return semantic_db_path(Path(root).resolve(), settings).is_file()


def semantic_search(
    root: Path,
    query: str,
    limit: int,
    embedder: Optional[Embedder] = None,
    settings: Optional[SemanticSettings] = None,
) -> List[ScoredChunk]:
    """Score every stored chunk against the query and return the best `limit`."""
    settings = settings or SemanticSettings()
    root = Path(root).resolve()
    if not semantic_index_exists(root, settings):
        return []
    if embedder is None:
        embedder = get_embedder(semantic_models_dir(root, settings), settings.model_name)

    query_vec = embedder.embed_query(query)
    scored: List[ScoredChunk] = []
    with SemanticStore(semantic_db_path(root, settings)) as store:
        for row in store.iter_chunks():
            score = cosine_similarity(query_vec, row.embedding)
            scored.append(
                ScoredChunk(row.path, row.start_line, row.end_line, row.content, score)
            )
    scored.sort(key=lambda c: c.score, reverse=True)
    return scored[: max(limit, 0)]
