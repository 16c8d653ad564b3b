from .chunker import MAX_CHUNK_CHARS, Chunk, chunk_file
from .embedder import (
    Embedder,
    FastEmbedEmbedder,
    cosine_similarity,
    decode_embedding,
    encode_embedding,
    get_embedder,
)
from .index import (
    IndexOptions,
    IndexProgress,
    IndexResult,
    ScoredChunk,
    ensure_semantic_index,
    semantic_db_path,
    semantic_index_exists,
    semantic_search,
)
from .store import SemanticStore

__all__ = [
    "MAX_CHUNK_CHARS",
    "Chunk",
    "Embedder",
    "FastEmbedEmbedder",
    "IndexOptions",
    "IndexProgress",
    "IndexResult",
    "ScoredChunk",
    "SemanticStore",
    "chunk_file",
    "cosine_similarity",
    "decode_embedding",
    "encode_embedding",
    "ensure_semantic_index",
    "get_embedder",
    "semantic_db_path",
    "semantic_index_exists",
    "semantic_search",
]
