from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Dict, List

from chatify.semantic import (
    IndexOptions,
    IndexResult,
    ScoredChunk,
    ensure_semantic_index,
    semantic_index_exists,
    semantic_search,
)
from chatify.settings import IndexMode, ToolSpec
from chatify.tools import base as tools_base


def format_index_result(result: IndexResult) -> str:
    if result.skipped_reason == "too-many-files":
        return (
            f"Semantic indexing skipped: {result.total} files exceed the configured file limit."
        )
    if result.skipped_reason == "too-large":
        return "Semantic indexing skipped: files exceed the configured size limit."
    return (
        f"Semantic index updated ({result.mode.value}): "
        f"indexed {result.indexed} of {result.total} files, {result.chunks} chunks; "
        f"{result.skipped} unchanged."
    )


def format_search_results(root: Path, results: List[ScoredChunk], snippet_chars: int) -> str:
    if not results:
        return "No semantic matches found."
    blocks: List[str] = []
    for i, item in enumerate(results, start=1):
        try:
            rel = Path(item.path).relative_to(root).as_posix()
        except ValueError:
            rel = item.path
        blocks.append(
            "\n".join(
                [
                    f"{i}. {rel}:{item.start_line}-{item.end_line}",
                    f"score: {item.score:.3f}",
                    item.content.strip()[:snippet_chars],
                ]
            )
        )
    return "\n\n".join(blocks)


class SemanticIndexTool(tools_base.BaseTool):
    """Build or refresh the local embedding index of the project."""

    name = "semantic_index"

    async def run(self, spec: ToolSpec, args: Any):
        args = args if isinstance(args, dict) else {}
        semantic = self.prj.settings.semantic
        raw_mode = args.get("mode") or spec.config.get("mode") or semantic.default_mode
        try:
            mode = IndexMode(raw_mode)
        except ValueError as e:
            raise ValueError("semantic_index 'mode' must be 'changed' or 'full'") from e

        result = await asyncio.to_thread(
            ensure_semantic_index,
            self.prj.base_path,
            IndexOptions(mode=mode),
            self.prj.embedder,
            semantic,
        )
        return tools_base.ToolTextResponse(text=format_index_result(result))

    async def openapi_spec(self, spec: ToolSpec) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": (
                "Build or update the semantic index used by semantic_search. "
                "'changed' re-embeds only files modified since the last run; "
                "'full' rebuilds the index from scratch."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "mode": {
                        "type": "string",
                        "enum": [m.value for m in IndexMode],
                        "default": self.prj.settings.semantic.default_mode.value,
                    },
                },
                "additionalProperties": False,
            },
        }


class SemanticSearchTool(tools_base.BaseTool):
    """Natural-language search over the project's semantic index."""

    name = "semantic_search"

    async def run(self, spec: ToolSpec, args: Any):
        args = tools_base.require_dict_args(self.name, args)
        raw_query = args.get("query")
        query = raw_query.strip() if isinstance(raw_query, str) else ""
        if not query:
            raise ValueError("Query cannot be empty")

        settings = self.prj.settings
        if not semantic_index_exists(self.prj.base_path, settings.semantic):
            return tools_base.ToolTextResponse(
                text="Semantic index not found. Run semantic_index first."
            )

        raw_limit = args.get("limit")
        limit = settings.search.default_limit if raw_limit is None else int(raw_limit)
        limit = max(1, min(limit, settings.search.max_limit))

        results = await asyncio.to_thread(
            semantic_search,
            self.prj.base_path,
            query,
            limit,
            self.prj.embedder,
            settings.semantic,
        )
        return tools_base.ToolTextResponse(
            text=format_search_results(
                self.prj.base_path.resolve(), results, settings.search.snippet_chars
            )
        )

    async def openapi_spec(self, spec: ToolSpec) -> Dict[str, Any]:
        search = self.prj.settings.search
        return {
            "name": self.name,
            "description": (
                "Semantic search over project files using local embeddings. "
                "Best for natural language queries (\"where is auth handled\"). "
                "Returns file, line range, score and a snippet per match."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Natural language search query.",
                    },
                    "limit": {
                        "type": "integer",
                        "description": (
                            f"Number of results (default {search.default_limit}, "
                            f"max {search.max_limit})."
                        ),
                    },
                },
                "required": ["query"],
                "additionalProperties": False,
            },
        }


tools_base.register_tool(SemanticIndexTool.name, SemanticIndexTool)
tools_base.register_tool(SemanticSearchTool.name, SemanticSearchTool)
