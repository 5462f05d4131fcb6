"""Offline decoding of saved task contexts."""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from iomrpc.cli.shared import client_utils
from iomrpc.spite.handler import SpiteError, parse_task_context
from iomrpc.utils.exceptions import ConfigError


def register_decode_commands(app: typer.Typer, console: Console) -> None:
    """Register decode command."""

    @app.command("decode")
    def decode(
        path: Path = typer.Argument(..., help="TaskContext JSON file"),
    ) -> None:
        """Decode a saved task context and print its output."""
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            client_utils.fail(console, ConfigError(f"Failed to read task context: {e}", path=str(path)))
            return

        try:
            parsed = parse_task_context(data)
        except SpiteError as e:
            client_utils.fail(console, e)
            return

        if parsed.output:
            console.print(parsed.output, markup=False, highlight=False)
        if parsed.error:
            console.print(f"[yellow]{escape(parsed.error)}[/yellow]")
        if not parsed.output and not parsed.error:
            console.print("[dim](no output)[/dim]")
