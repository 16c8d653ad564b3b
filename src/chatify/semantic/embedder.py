from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, List, Optional, Sequence

import numpy as np

from chatify.logger import logger


DEFAULT_MODEL_NAME = "sentence-transformers/all-MiniLM-L6-v2"


class Embedder(ABC):
    """Turns text into float32 vectors. Passages and queries may be embedded differently."""

    @abstractmethod
    def embed_passages(self, texts: Sequence[str], batch_size: int) -> List[np.ndarray]:
        ...

    @abstractmethod
    def embed_query(self, text: str) -> np.ndarray:
        ...


class FastEmbedEmbedder(Embedder):
    def __init__(self, cache_dir: Path, model_name: str = DEFAULT_MODEL_NAME) -> None:
        self.cache_dir = cache_dir
        self.model_name = model_name
        self._model: Any = None

    def _ensure_model(self) -> Any:
        if self._model is not None:
            return self._model

        from fastembed import TextEmbedding

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self._model = TextEmbedding(
            model_name=self.model_name, cache_dir=str(self.cache_dir)
        )
        logger.info(
            "semantic.model_loaded",
            model=self.model_name,
            cache_dir=str(self.cache_dir),
        )
        return self._model

    def embed_passages(self, texts: Sequence[str], batch_size: int) -> List[np.ndarray]:
        model = self._ensure_model()
        return [
            np.asarray(v, dtype=np.float32)
            for v in model.passage_embed(list(texts), batch_size=batch_size)
        ]

    def embed_query(self, text: str) -> np.ndarray:
        model = self._ensure_model()
        vecs = list(model.query_embed(text))
        return np.asarray(vecs[0], dtype=np.float32)


_embedder: Optional[Embedder] = None
_embedder_lock = threading.Lock()


def get_embedder(cache_dir: Path, model_name: str = DEFAULT_MODEL_NAME) -> Embedder:
    """
    Process-wide embedder, created on first use. Later calls return the same
    instance regardless of their arguments.
    """
    global _embedder
    with _embedder_lock:
        if _embedder is None:
            _embedder = FastEmbedEmbedder(cache_dir, model_name)
        return _embedder


def encode_embedding(vec: np.ndarray) -> bytes:
    return np.asarray(vec, dtype="<f4").tobytes()


def decode_embedding(blob: bytes) -> np.ndarray:
    return np.frombuffer(blob, dtype="<f4")


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    norm_a = float(np.dot(a, a))
    norm_b = float(np.dot(b, b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return float(np.dot(a, b)) / (norm_a ** 0.5 * norm_b ** 0.5)
