"""
CLI interface for agent memory.

Usage:
    agent-memory ingest notes.md --tags project,design
    agent-memory recall "how do we deploy"
    agent-memory recommend "review the login handler"
"""

import asyncio
import json
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

import typer
from typing_extensions import Annotated

from . import __version__
from .config import Config
from .errors import AgentMemoryError
from .memory.base import MEMORY_TYPES
from .memory.chunking import IngestionOptions
from .memory_manager import MemoryManager, RecallFilters, RecallOptions, build_memory_manager

T = TypeVar("T")

app = typer.Typer(
    name="agent-memory",
    help="Persistent work memory for software agents.",
    no_args_is_help=True,
    rich_markup_mode=None,
)

_state: dict = {"store": None}


def _settings() -> Config:
    settings = Config()
    if _state["store"] is not None:
        settings.memory.storage_path = str(_state["store"])
    return settings


def _run(action: Callable[[MemoryManager], Awaitable[T]]) -> T:
    """Build a manager, run one async action against it, map errors to exit codes."""

    async def runner() -> T:
        manager = build_memory_manager(_settings())
        try:
            await manager.initialize()
            return await action(manager)
        finally:
            await manager.close()

    try:
        return asyncio.run(runner())
    except AgentMemoryError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


def _split_tags(tags: Optional[str]) -> list[str]:
    if not tags:
        return []
    return [t.strip() for t in tags.split(",") if t.strip()]


# Common Options
# -----------------------------------------------------------------------------

LimitOption = Annotated[
    int,
    typer.Option(
        "--limit", "-l",
        help="Maximum results to return",
    )
]


@app.callback()
def main_callback(
    store: Annotated[Optional[Path], typer.Option(
        "--store", "-s",
        envvar="AGENT_MEMORY_PATH",
        help="Path to the store directory (default: .agent-memory)",
    )] = None,
):
    """Persistent work memory for software agents."""
    _state["store"] = store
    _settings().setup_logging()


@app.command()
def init():
    """Initialize the memory store in the current directory."""

    async def action(manager: MemoryManager) -> int:
        return await manager.vector_store.count()

    count = _run(action)
    typer.echo(f"Agent memory {__version__} initialized")
    typer.echo(f"Storage location: {_settings().memory.storage_path} ({count} memories)")


@app.command()
def ingest(
    file: Annotated[Path, typer.Argument(help="File to ingest")],
    tags: Annotated[Optional[str], typer.Option(
        "--tags", "-t",
        help="Comma-separated tags",
    )] = None,
    source: Annotated[Optional[str], typer.Option(
        "--source", "-s",
        help="Source identifier (default: the file path)",
    )] = None,
    chunk_size: Annotated[Optional[int], typer.Option(
        "--chunk-size",
        help="Target chunk size in characters",
    )] = None,
):
    """Ingest a file into memory."""
    options = IngestionOptions(
        tags=_split_tags(tags),
        source=source or str(file),
        chunk_size=chunk_size,
    )

    async def action(manager: MemoryManager) -> list[str]:
        return await manager.ingest(file, options)

    memory_ids = _run(action)
    typer.echo(f"Ingested {len(memory_ids)} chunks from {file}")
    typer.echo(f"Memory IDs: {','.join(memory_ids)}")


@app.command()
def recall(
    query: Annotated[str, typer.Argument(help="Search query text")],
    limit: LimitOption = 5,
    threshold: Annotated[Optional[float], typer.Option(
        "--threshold", "-t",
        help="Minimum similarity (0-1)",
    )] = None,
    memory_type: Annotated[Optional[str], typer.Option(
        "--type",
        help=f"Only memories of this type ({', '.join(MEMORY_TYPES)})",
    )] = None,
    tag: Annotated[Optional[list[str]], typer.Option(
        "--tag",
        help="Only memories with this tag (repeatable, any match)",
    )] = None,
    source: Annotated[Optional[str], typer.Option(
        "--source",
        help="Only memories from this source",
    )] = None,
):
    """Recall memories related to a query."""
    if memory_type and memory_type not in MEMORY_TYPES:
        typer.echo(f"Error: Unknown memory type: {memory_type}", err=True)
        raise typer.Exit(1)

    filters = None
    if memory_type or tag or source:
        filters = RecallFilters(type=memory_type, tags=tag or [], source=source)
    options = RecallOptions(limit=limit, threshold=threshold, filters=filters)

    async def action(manager: MemoryManager):
        return await manager.recall(query, options)

    results = _run(action)
    typer.echo(f"Found {len(results)} memories:\n")
    for index, result in enumerate(results, start=1):
        entry = result.entry
        preview = entry.content[:200] + ("..." if len(entry.content) > 200 else "")
        typer.echo(f"[{index}] Similarity: {result.similarity * 100:.1f}%")
        typer.echo(f"Source: {entry.metadata.source or 'unknown'}")
        typer.echo(f"Type: {entry.metadata.type}")
        typer.echo(preview)
        typer.echo("")


@app.command()
def skills():
    """List all available skills."""
    manager = build_memory_manager(_settings())
    registered = manager.get_skills()

    typer.echo(f"Available Skills ({len(registered)}):\n")
    for index, skill in enumerate(registered, start=1):
        typer.echo(f"[{index}] {skill.name}")
        typer.echo(f"    ID: {skill.id}")
        typer.echo(f"    Description: {skill.description}")
        typer.echo("")


@app.command()
def execute(
    skill_id: Annotated[str, typer.Argument(help="ID of the skill to run")],
    query: Annotated[str, typer.Argument(help="Query to run the skill with")],
):
    """Execute a skill with a query."""

    async def action(manager: MemoryManager):
        return await manager.execute_skill(skill_id, query)

    result = _run(action)
    if not result.success:
        typer.echo("Skill execution failed!")
        typer.echo(f"Error: {result.error}")
        raise typer.Exit(1)

    typer.echo("Skill executed successfully!\n")
    if result.output is None:
        return
    if result.output.content_type == "application/json":
        typer.echo(json.dumps(result.output.as_json(), indent=2))
    else:
        typer.echo(result.output.as_text())


@app.command()
def recommend(
    query: Annotated[str, typer.Argument(help="Query to find skills for")],
    limit: LimitOption = 3,
):
    """Get skill recommendations for a query."""

    async def action(manager: MemoryManager):
        return await manager.recommend_skills(query, limit)

    recommendations = _run(action)
    typer.echo(f"Top {len(recommendations)} Recommendations:\n")
    for index, rec in enumerate(recommendations, start=1):
        typer.echo(f"[{index}] {rec.skill.name}")
        typer.echo(f"    Confidence: {rec.confidence * 100:.1f}%")
        typer.echo(f"    Reason: {rec.reason}")
        if rec.historical_success_rate is not None:
            typer.echo(f"    Historical Success: {rec.historical_success_rate * 100:.1f}%")
        typer.echo("")


@app.command()
def stats():
    """Show memory statistics."""

    async def action(manager: MemoryManager):
        return await manager.get_stats()

    memory_stats = _run(action)
    typer.echo(f"Total Memories: {memory_stats.total_count}")
    typer.echo("Memory Types:")
    for memory_type, count in sorted(memory_stats.counts_by_type.items()):
        typer.echo(f"  {memory_type}: {count}")
    if memory_stats.oldest_timestamp:
        typer.echo(f"Oldest Memory: {memory_stats.oldest_timestamp:%Y-%m-%d %H:%M:%S}")
    if memory_stats.newest_timestamp:
        typer.echo(f"Newest Memory: {memory_stats.newest_timestamp:%Y-%m-%d %H:%M:%S}")
    typer.echo(f"Storage Size: {memory_stats.storage_size} bytes")


@app.command()
def clear(
    yes: Annotated[bool, typer.Option(
        "--yes", "-y",
        help="Skip the confirmation prompt",
    )] = False,
):
    """Clear all memories and skill history (irreversible!)."""
    if not yes and not typer.confirm(
        "Are you sure you want to clear all memories? This cannot be undone.",
        default=False,
    ):
        typer.echo("Cancelled.")
        return

    async def action(manager: MemoryManager) -> None:
        await manager.clear()

    _run(action)
    typer.echo("All memories cleared!")


# -----------------------------------------------------------------------------

def main():
    try:
        app()
    except KeyboardInterrupt:
        raise SystemExit(130)  # Standard exit code for Ctrl+C


if __name__ == "__main__":
    main()
