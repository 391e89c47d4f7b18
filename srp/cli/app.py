from __future__ import annotations

import os
from pathlib import Path
from typing import NoReturn

import typer

from srp import __version__
from srp.core.config import load_config
from srp.core.errors import ErrorCode
from srp.core.result import Err
from srp.output.console import ConsoleProtocol, RichConsole, Style
from srp.sentry.http import RealHttpClient
from srp.services.prune import prune_releases

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    rich_markup_mode="rich",
)


def _load_dotenv(console: ConsoleProtocol, env_file: Path | None) -> None:
    """Seed the environment from a .env file. Existing variables win."""
    from dotenv import find_dotenv, load_dotenv

    if env_file is not None:
        if not env_file.exists():
            console.error(f".env file not found: {env_file}")
            raise typer.Exit(code=int(ErrorCode.RUN_FAILED))
        load_dotenv(env_file, override=False)
        return

    # Search from the working directory, not from this module.
    found = find_dotenv(usecwd=True)
    if found:
        load_dotenv(found, override=False)


def _fail(console: ConsoleProtocol, message: str, hint: str | None = None) -> NoReturn:
    console.error(message)
    if hint:
        console.print(f"hint: {hint}", Style.DIM)
    raise typer.Exit(code=int(ErrorCode.RUN_FAILED))


@app.command()
def prune(
    dry_run: str | None = typer.Argument(
        None,
        metavar="[DRY_RUN]",
        help="Any value runs in dry-run mode: list what would be deleted, delete nothing.",
        show_default=False,
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
    ),
    no_dotenv: bool = typer.Option(False, "--no-dotenv", help="Skip loading .env file."),
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    """Delete Sentry releases older than SENTRY_DAYS_TO_KEEP days.

    Settings are read from SENTRY_* environment variables.
    """
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=int(ErrorCode.OK))

    console = RichConsole()

    if not no_dotenv:
        _load_dotenv(console, env_file)

    loaded = load_config(os.environ)
    if isinstance(loaded, Err):
        _fail(
            console,
            loaded.error.message,
            "Required: SENTRY_BASE_URL, SENTRY_TOKEN, SENTRY_ORGANIZATION, SENTRY_DAYS_TO_KEEP"
            " (or pass --env-file).",
        )
    config = loaded.value

    http = RealHttpClient(timeout=config.timeout_seconds, user_agent=f"srp/{__version__}")
    result = prune_releases(config=config, http=http, console=console, dry_run=bool(dry_run))
    if isinstance(result, Err):
        _fail(console, result.error.message, result.error.hint)


def main() -> None:
    app()
