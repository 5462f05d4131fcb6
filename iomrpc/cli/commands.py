"""CLI commands for iomrpc.

The CLI is a thin shell over RpcClient: ``methods`` lists the registered
catalog, ``call`` performs one request, ``decode`` reads a saved task context.
"""

import typer
from rich.console import Console

from iomrpc import __version__
from iomrpc.cli.command_groups.decode_command import register_decode_commands
from iomrpc.cli.command_groups.rpc_commands import register_rpc_commands

app = typer.Typer(
    name="iomrpc",
    help="iomrpc - operator and listener RPC client",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"iomrpc v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """iomrpc - operator and listener RPC client."""
    pass


register_rpc_commands(app, console)
register_decode_commands(app, console)


if __name__ == "__main__":
    app()
