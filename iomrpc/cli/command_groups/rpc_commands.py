"""RPC command group: list registered methods and perform single calls."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Mapping

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from iomrpc.cli.shared import client_utils
from iomrpc.cli.shared.logging_utils import configure_cli_logging
from iomrpc.config.loader import load_config
from iomrpc.rpc.options import CallOptions
from iomrpc.rpc.services import LISTENER_SERVICE, OPERATOR_SERVICE, to_rpc_name
from iomrpc.session.scope import SYNC_PREFIX, SessionScope
from iomrpc.spite.handler import parse_task_context
from iomrpc.spite.models import TaskContext
from iomrpc.utils.exceptions import IomRpcError


def register_rpc_commands(app: typer.Typer, console: Console) -> None:
    """Register methods and call commands."""

    @app.command("methods")
    def methods(
        service: str = typer.Option(None, "--service", "-s", help="Only show one service: operator or listener"),
        config_path: Path = typer.Option(None, "--config", "-c", help="Config file with extra method names"),
    ) -> None:
        """List registered remote methods."""
        try:
            config = load_config(config_path)
        except IomRpcError as e:
            client_utils.fail(console, e)
            return
        descriptors = [
            OPERATOR_SERVICE.extended(config.methods.operator),
            LISTENER_SERVICE.extended(config.methods.listener),
        ]
        if service:
            descriptors = [d for d in descriptors if d.name == service]
            if not descriptors:
                console.print(f"[red]Unknown service: {service}[/red]")
                raise typer.Exit(1)

        table = Table(title="Remote Methods")
        table.add_column("Method", style="cyan")
        table.add_column("Service")
        table.add_column("RPC")
        for descriptor in descriptors:
            for method in descriptor.methods:
                table.add_row(method, descriptor.service, to_rpc_name(method))
        console.print(table)

    @app.command("call")
    def call(
        method: str = typer.Argument(..., help="Method name, e.g. get_sessions or sync_<method>"),
        params: str = typer.Argument("{}", help="Request as a JSON object"),
        auth: Path = typer.Option(None, "--auth", "-a", help="Operator auth file (native transport)"),
        url: str = typer.Option(None, "--url", "-u", help="Base URL (web transport)"),
        config_path: Path = typer.Option(None, "--config", "-c", help="Config file path"),
        session: str = typer.Option(None, "--session", "-s", help="Scope the call to this session id"),
        timeout: int = typer.Option(None, "--timeout", "-t", help="Call timeout in milliseconds"),
        header: list[str] = typer.Option(None, "--header", "-H", help="Extra header key=value (repeatable)"),
        debug: bool = typer.Option(False, "--debug", help="Print debug logs to stderr"),
        logs: bool = typer.Option(False, "--logs", help="Write logs to ~/.iomrpc/logs"),
    ) -> None:
        """Perform one remote call and print the result."""
        configure_cli_logging("call", debug=debug, logs=logs)
        request = client_utils.parse_params(params)
        options = CallOptions(headers=client_utils.parse_headers(header), timeout_ms=timeout)

        async def run() -> Any:
            client = client_utils.build_client(auth, url, config_path)
            async with client:
                if session:
                    return await SessionScope(client, session).call(method, request, options)
                return await client.call(method, request, options)

        try:
            result = asyncio.run(run())
            parsed = parse_task_context(result) if method.startswith(SYNC_PREFIX) and _carries_spite(result) else None
        except IomRpcError as e:
            client_utils.fail(console, e)
            return

        if parsed is None:
            console.print_json(json.dumps(client_utils.to_jsonable(result), default=str))
            return
        if parsed.output:
            console.print(parsed.output, markup=False, highlight=False)
        if parsed.error:
            console.print(f"[yellow]{escape(parsed.error)}[/yellow]")


def _carries_spite(result: Any) -> bool:
    # a sync_ call returns the bare handle when the waiter is not registered
    if isinstance(result, TaskContext):
        return True
    return isinstance(result, Mapping) and "spite" in result
