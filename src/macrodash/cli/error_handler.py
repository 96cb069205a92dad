"""Uniform error reporting for CLI commands."""

from __future__ import annotations

from typing import Any, NoReturn

import structlog
import typer
from rich.console import Console

from macrodash.domain.exceptions import InsufficientHistoryError, MacroDashError

logger = structlog.get_logger(__name__)
console = Console(stderr=True)


def handle_cli_error(error: Exception, context: dict[str, Any] | None = None) -> NoReturn:
    """Print a readable message and exit non-zero."""
    context = context or {}
    if isinstance(error, InsufficientHistoryError):
        console.print(f"[bold red]✗ Not enough price history:[/bold red] {error}")
        console.print("[dim]Check provider connectivity or lower MACRODASH_BTC_HISTORY_FLOOR_DATE.[/dim]")
    elif isinstance(error, MacroDashError):
        console.print(f"[bold red]✗ {type(error).__name__}:[/bold red] {error}")
    else:
        logger.error("Unexpected CLI error", error=str(error), exc_info=True, **context)
        console.print(f"[bold red]✗ Unexpected error:[/bold red] {error}")
    raise typer.Exit(code=1)
