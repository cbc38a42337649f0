"""Command-line interface for running the AddToWallet node outside a workflow."""

import asyncio
import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from addtowallet import __version__
from addtowallet.config import settings
from addtowallet.credentials import ADD_TO_WALLET_API, check_credential
from addtowallet.logger import setup_logger
from addtowallet.workflows.engine.errors import EngineError
from addtowallet.workflows.engine.executor import NodeExecutor
from addtowallet.workflows.engine.nodes.registry import NodeRegistry

console = Console()
logger = logging.getLogger(__name__)


def _load_json(path: Path):
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"{path} is not valid JSON: {e}")


def _credential_data(base_url, api_key):
    return {
        "base_url": base_url or settings.BASE_URL,
        "api_key": api_key or settings.API_KEY or "",
    }


@click.group()
@click.version_option(version=__version__)
@click.option("--log-level", default=None, help="Override ADDTOWALLET_LOG_LEVEL.")
def main(log_level):
    """
    AddToWallet node for Fuse workflows.

    Create digital wallet passes from JSON items, list the registered
    nodes and check API credentials.
    """
    setup_logger(log_level or settings.LOG_LEVEL)


@main.command("list")
def list_nodes():
    """List the registered node packages."""
    nodes = NodeRegistry.list_nodes()

    table = Table(title="Node packages")
    table.add_column("ID", style="bold blue")
    table.add_column("Name")
    table.add_column("Version")
    table.add_column("Credentials")
    for node_id, info in nodes.items():
        table.add_row(node_id, info["name"], str(info["version"]), ", ".join(info["credentials"]))

    console.print(table)


@main.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--params", "params_file", required=True,
              type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="JSON file with the node parameters.")
@click.option("--node", "node_id", default="addtowallet.pass", show_default=True)
@click.option("--continue-on-fail", is_flag=True, help="Record failed items instead of aborting.")
@click.option("--base-url", default=None, help="Override ADDTOWALLET_BASE_URL.")
@click.option("--api-key", default=None, help="Override ADDTOWALLET_API_KEY.")
def run(input_file, params_file, node_id, continue_on_fail, base_url, api_key):
    """Run a node over the items in INPUT_FILE (a JSON list)."""
    items = _load_json(input_file)
    if isinstance(items, dict):
        items = [items]
    parameters = _load_json(params_file)

    credentials = {ADD_TO_WALLET_API.name: _credential_data(base_url, api_key)}

    try:
        output = asyncio.run(
            NodeExecutor.run(
                node_id,
                items,
                parameters,
                credentials=credentials,
                continue_on_fail=continue_on_fail,
            )
        )
    except EngineError as e:
        console.print(f"[bold red]✗ {e}[/bold red]")
        sys.exit(1)

    console.print_json(data=[item.to_output() for item in output])


@main.command("test-credential")
@click.option("--base-url", default=None, help="Override ADDTOWALLET_BASE_URL.")
@click.option("--api-key", default=None, help="Override ADDTOWALLET_API_KEY.")
def test_credential_command(base_url, api_key):
    """Check the API key against the AddToWallet credits endpoint."""
    result = asyncio.run(check_credential(ADD_TO_WALLET_API, _credential_data(base_url, api_key)))

    if result["status"] == "OK":
        console.print(f"[green]✓ {result['message']}[/green]")
    else:
        console.print(f"[bold red]✗ {result['message']}[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
