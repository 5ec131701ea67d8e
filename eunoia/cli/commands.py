"""CLI commands for eunoia."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from eunoia import __app_name__, __version__
from eunoia.auth.session import LocalAuthBackend
from eunoia.config.loader import get_config_path, load_config, save_config
from eunoia.config.schema import Config
from eunoia.errors import EunoiaError, SyncError
from eunoia.journal.local_store import LocalJournalStore
from eunoia.journal.service import JournalService
from eunoia.nuggets.generator import NuggetGenerator
from eunoia.nuggets.pool import NuggetPool
from eunoia.providers.litellm_provider import make_provider
from eunoia.remote.file_store import FileDocumentStore
from eunoia.sync.manager import SyncManager
from eunoia.utils.helpers import get_data_path

app = typer.Typer(
    name=__app_name__,
    help="Eunoia journaling backend",
    no_args_is_help=True,
)

console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"{__app_name__} v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(None, "--version", "-v", callback=_version_callback, is_eager=True),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logs"),
) -> None:
    """Eunoia journaling backend."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


def _pool(config: Config, model: str) -> NuggetPool:
    try:
        provider = make_provider(config, model)
    except EunoiaError as e:
        console.print(f"[red]{e.message}[/]")
        raise typer.Exit(code=2)
    generator = NuggetGenerator(
        provider,
        model=config.get_model(model),
        temperature=config.nuggets.temperature,
        max_tokens=config.nuggets.max_tokens,
    )
    return NuggetPool(
        FileDocumentStore(config.remote_path),
        generator,
        nuggets_per_category=config.nuggets.nuggets_per_category,
    )


@app.command("init-config")
def init_config(
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file path"),
) -> None:
    """Write a default config file."""
    path = config_path or get_config_path()
    if path.exists():
        console.print(f"[yellow]Config already exists at {path}[/]")
        raise typer.Exit()
    save_config(Config(), path)
    console.print(f"[green]✓[/] Created config at {path}")


@app.command()
def serve(
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file path"),
    host: str = typer.Option(None, "--host", help="Bind address"),
    port: int = typer.Option(None, "--port", "-p", help="Port"),
) -> None:
    """Run the nugget functions over HTTP."""
    import uvicorn

    from eunoia.functions.app import create_app

    config = load_config(config_path)
    accounts = LocalAuthBackend(get_data_path() / "accounts.json")
    fastapi_app = create_app(config, FileDocumentStore(config.remote_path), verify_token=accounts.verify_token)

    bind_host = host or config.functions.host
    bind_port = port or config.functions.port
    console.print(f"Serving functions on http://{bind_host}:{bind_port}")
    uvicorn.run(fastapi_app, host=bind_host, port=bind_port)


@app.command("init-pool")
def init_pool(
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file path"),
    model: str = typer.Option("openai", "--model", "-m", help="openai or deepseek"),
    missing_only: bool = typer.Option(False, "--missing-only", help="Seed only empty categories"),
) -> None:
    """Seed the shared nugget pool."""
    config = load_config(config_path)
    pool = _pool(config, model)
    if missing_only:
        results = asyncio.run(pool.initialize_missing_categories())
    else:
        results = asyncio.run(pool.initialize_pool())
    if not results:
        console.print("Pool already initialized, nothing to do.")
        return
    for category, count in results.items():
        console.print(f"  {category}: {count}")
    console.print(f"[green]✓[/] Generated {sum(results.values())} nuggets")


@app.command()
def stats(
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file path"),
) -> None:
    """Show nugget counts per category."""
    config = load_config(config_path)
    pool = NuggetPool(FileDocumentStore(config.remote_path))
    counts = asyncio.run(pool.statistics())

    table = Table(title="Nugget pool")
    table.add_column("Category", style="cyan")
    table.add_column("Nuggets", justify="right")
    for category, count in counts.items():
        table.add_row(category, str(count))
    console.print(table)


@app.command("migrate-nuggets")
def migrate_nuggets(
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file path"),
) -> None:
    """Move legacy per-user nuggets into the shared pool."""
    config = load_config(config_path)
    pool = NuggetPool(FileDocumentStore(config.remote_path))
    migrated = asyncio.run(pool.migrate_legacy())
    console.print(f"[green]✓[/] Migrated {migrated} nuggets")


@app.command()
def sync(
    user_id: str = typer.Argument(..., help="User whose journal to sync"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file path"),
) -> None:
    """Run one sync pass for a user's journal."""
    config = load_config(config_path)
    journal = JournalService(
        LocalJournalStore(config.workspace_path),
        FileDocumentStore(config.remote_path),
        max_retries=config.sync.max_retries,
        backoff_base_s=config.sync.backoff_base_s,
        tz=config.timezone,
    )
    manager = SyncManager(
        journal,
        user_id,
        interval_s=config.sync.auto_sync_interval_s,
        push_retry_delay_s=config.sync.push_retry_delay_s,
    )
    try:
        report = asyncio.run(manager.sync_once())
        if report.failed:
            raise SyncError()
    except EunoiaError as e:
        console.print(f"[red]{e.message}[/]")
        raise typer.Exit(code=1)

    console.print(
        f"[green]✓[/] {len(report.uploaded)} uploaded, {len(report.deleted)} deleted, "
        f"{report.pulled} entries"
    )


if __name__ == "__main__":
    app()
