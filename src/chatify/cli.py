from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from chatify.errors import PatchError
from chatify.logger import init_log_manager, logger
from chatify.patch import apply_patch, format_error, format_summary
from chatify.project import Project, init_project
from chatify.semantic import (
    IndexOptions,
    IndexProgress,
    ensure_semantic_index,
    semantic_index_exists,
    semantic_search,
)
from chatify.settings import IndexMode
from chatify.tools.semantic_tool import format_index_result, format_search_results


@click.group()
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Directory to start looking for the project from.",
)
@click.pass_context
def main(ctx: click.Context, root: Path) -> None:
    """Patch application and semantic search for a project tree."""
    init_log_manager(max_entries=1000)
    ctx.obj = init_project(root)


@main.command("apply")
@click.argument("patch_file", type=click.File("r", encoding="utf-8"))
@click.pass_obj
def apply_cmd(project: Project, patch_file) -> None:
    """Apply PATCH_FILE ('-' for stdin) under the project root."""
    text = patch_file.read()
    try:
        affected = apply_patch(text, project.base_path)
    except PatchError as e:
        click.echo(format_error(e), err=True)
        sys.exit(1)
    click.echo(format_summary(affected))


@main.command("index")
@click.option("--full", is_flag=True, help="Rebuild the index from scratch.")
@click.pass_obj
def index_cmd(project: Project, full: bool) -> None:
    """Build or refresh the semantic index."""
    semantic = project.settings.semantic
    mode = IndexMode.full if full else semantic.default_mode

    def on_progress(progress: IndexProgress) -> None:
        if progress.current_path is not None:
            logger.debug(
                "semantic.progress",
                processed=progress.processed,
                total=progress.total,
                path=progress.current_path,
            )

    result = ensure_semantic_index(
        project.base_path,
        IndexOptions(mode=mode, on_progress=on_progress),
        project.embedder,
        semantic,
    )
    click.echo(format_index_result(result))


@main.command("search")
@click.argument("query")
@click.option("--limit", type=int, default=None, help="Number of results.")
@click.pass_obj
def search_cmd(project: Project, query: str, limit: Optional[int]) -> None:
    """Semantic search for QUERY over the indexed project."""
    settings = project.settings
    query = query.strip()
    if not query:
        raise click.BadParameter("Query cannot be empty", param_hint="QUERY")
    if not semantic_index_exists(project.base_path, settings.semantic):
        click.echo("Semantic index not found. Run 'chatify index' first.", err=True)
        sys.exit(1)

    if limit is None:
        limit = settings.search.default_limit
    limit = max(1, min(limit, settings.search.max_limit))
    results = semantic_search(
        project.base_path, query, limit, project.embedder, settings.semantic
    )
    click.echo(format_search_results(project.base_path, results, settings.search.snippet_chars))


if __name__ == "__main__":
    main()
