#!/usr/bin/env python3
"""
Shield Proofs CLI

Command-line interface for preparing shield circuit inputs: witness vectors,
commitment sister paths and root checks. Output is JSON by default so the
commands compose with scripts; --format table renders a summary instead.
"""

import json
import logging
import sys
from dataclasses import replace
from typing import Any, Dict, List, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .codec.conversions import convert_base
from .codec.hex_helpers import ensure0x, strip0x
from .config import TreeConfig
from .exceptions import WitnessError
from .hashing import checked_hash_concat, concatenate_then_hash, hash_concat
from .main import generate_path_witness, generate_vectors_from_file
from .merkle.path import path_from_hashes
from .merkle.tree import MemoryTree
from .merkle.verify import reconcile_root

# Configure rich console
console = Console()
logger = logging.getLogger(__name__)

BASES = {"bin": 2, "dec": 10, "hex": 16}


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def format_result(result_dict: Dict[str, Any]) -> str:
    """Format a result for JSON output."""
    return json.dumps(result_dict, indent=2)


def print_path_table(output: Dict[str, Any]):
    """Print a sister path as a rich table."""
    table = Table(title="Sister Path")
    table.add_column("Level", style="cyan")
    table.add_column("Tree Index", style="cyan")
    table.add_column("Side", style="yellow")
    table.add_column("Node Hash", style="green")

    for level, entry in enumerate(output["siblings"]):
        side = {0: "left", 1: "right"}.get(entry["side"], "root")
        table.add_row(str(level), str(entry["tree_index"]), side, entry["node_hash"])

    console.print(table)
    console.print(f"[cyan]Positions:[/cyan] {output['positions']}")
    console.print(f"[cyan]Root:[/cyan] {output['root']}")
    console.print(f"[cyan]Witness values:[/cyan] {len(output['vector'])}")


def _get_config(ctx) -> TreeConfig:
    if ctx.obj.get("config") is None:
        try:
            ctx.obj["config"] = TreeConfig.from_env()
        except WitnessError as e:
            raise click.ClickException(f"Invalid tree configuration: {e}")
    return ctx.obj["config"]


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx, verbose: bool):
    """
    Shield Proofs CLI - Prepare witnesses for the shield contract's circuits.

    Encode values as circuit witness vectors, resolve a commitment's sister
    path through the on-chain commitment tree and check paths against roots.
    """
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("elements_file", type=click.Path(exists=True))
@click.option("--format", "format_output", type=click.Choice(["json", "table"]), default="json")
def vectors(elements_file: str, format_output: str):
    """
    Encode a JSON list of elements into a witness vector.

    ELEMENTS_FILE: JSON list of {"value": "0x..", "encoding": "bits|bytes|field|scalar"}
    objects, optionally with packing_size, packets and allow_truncation.
    """
    try:
        vector = generate_vectors_from_file(elements_file)
    except (WitnessError, OSError, json.JSONDecodeError) as e:
        logger.error(f"Error encoding witness vector: {e}")
        raise click.ClickException(str(e))

    if format_output == "table":
        table = Table(title="Witness Vector")
        table.add_column("Position", style="cyan")
        table.add_column("Value", style="green")
        for i, value in enumerate(vector):
            table.add_row(str(i), value)
        console.print(table)
    else:
        print(format_result({"vector": vector, "length": len(vector)}))


@cli.command()
@click.argument("commitment", type=str)
@click.argument("z_count", type=int)
@click.option("--tree-file", type=click.Path(exists=True), help="JSON file of leaves to build the tree from")
@click.option("--rpc-url", envvar="SHIELD_RPC_URL", help="Ethereum JSON-RPC endpoint")
@click.option("--contract", envvar="SHIELD_CONTRACT_ADDRESS", help="Shield contract address")
@click.option("--format", "format_output", type=click.Choice(["json", "table"]), default="json")
@click.pass_context
def path(
    ctx,
    commitment: str,
    z_count: int,
    tree_file: Optional[str],
    rpc_url: Optional[str],
    contract: Optional[str],
    format_output: str,
):
    """
    Resolve the sister path of a commitment.

    COMMITMENT: The commitment as 0x-prefixed hex

    Z_COUNT: Insertion count of the commitment

    The tree is read from the shield contract unless --tree-file is given,
    in which case it is rebuilt locally from a list of leaves.
    """
    config = _get_config(ctx)
    try:
        if tree_file:
            tree = MemoryTree.from_file(tree_file, config)
            accessor, config = tree, tree.config
        else:
            from .api.tree_client import ShieldContractClient
            accessor = ShieldContractClient(rpc_url=rpc_url, contract_address=contract)

        result = generate_path_witness(commitment, z_count, accessor, config)
    except (WitnessError, ValueError, OSError) as e:
        logger.error(f"Error resolving sister path: {e}")
        raise click.ClickException(str(e))

    from .api.witness_service import WitnessService
    output = WitnessService.format_path_result(result)

    if format_output == "table":
        print_path_table(output)
    else:
        print(format_result(output))


@cli.command("check-root")
@click.argument("commitment", type=str)
@click.argument("path_file", type=click.Path(exists=True))
@click.argument("root", type=str)
@click.pass_context
def check_root(ctx, commitment: str, path_file: str, root: str):
    """
    Check a commitment and its sister path against a root.

    PATH_FILE: JSON object with "path" (leaf to root, root last) and
    "positions", such as the output of the path command.
    """
    config = _get_config(ctx)
    try:
        with open(path_file, "r") as f:
            data = json.load(f)
        if not isinstance(data, dict) or "path" not in data or "positions" not in data:
            raise click.ClickException(f"{path_file} must hold an object with 'path' and 'positions'")

        depth = data.get("metadata", {}).get("merkle_depth")
        if depth and int(depth) != config.merkle_depth:
            config = replace(config, merkle_depth=int(depth))

        path_result = path_from_hashes(data["path"], data["positions"], config)
        recomputed = reconcile_root(commitment, path_result, root, config)
    except (WitnessError, OSError, json.JSONDecodeError) as e:
        logger.error(f"Root check failed: {e}")
        raise click.ClickException(str(e))

    console.print(f"[green]Root {recomputed} reconciled[/green]")


@cli.command("hash")
@click.argument("items", nargs=-1, required=True)
@click.option("--recursive", is_flag=True, help="Fold inputs longer than one hashing round")
@click.option("--node", is_flag=True, help="Untruncated digest, as used for tree nodes")
@click.option("--hash-length", type=int, help="Bytes to keep (defaults to MERKLE_HASH_LENGTH)")
@click.pass_context
def hash_cmd(ctx, items: List[str], recursive: bool, node: bool, hash_length: Optional[int]):
    """Hash the byte-wise concatenation of hex ITEMS."""
    config = _get_config(ctx)
    length = hash_length or config.merkle_hash_length
    try:
        if recursive:
            digest = checked_hash_concat(*items, hash_length=length)
        elif node:
            digest = concatenate_then_hash(*items)
        else:
            digest = hash_concat(*items, hash_length=length)
    except WitnessError as e:
        raise click.ClickException(str(e))
    print(digest)


@cli.command()
@click.argument("value", type=str)
@click.option("--from", "from_base", type=click.Choice(sorted(BASES)), default="hex", help="Base of VALUE")
@click.option("--to", "to_base", type=click.Choice(sorted(BASES)), default="dec", help="Base to convert to")
def convert(value: str, from_base: str, to_base: str):
    """Convert VALUE between binary, decimal and hex."""
    try:
        digits = strip0x(value) if from_base == "hex" else value
        converted = convert_base(digits, BASES[from_base], BASES[to_base])
    except WitnessError as e:
        raise click.ClickException(str(e))
    print(ensure0x(converted) if to_base == "hex" else converted)


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=8000, type=int, help="Port to bind to")
@click.option("--dev", is_flag=True, help="Enable development mode with auto-reload")
@click.pass_context
def serve(ctx, host: str, port: int, dev: bool):
    """Start the REST API server."""
    from .api.rest_api import run_server

    try:
        console.print(
            Panel(
                f"Starting Shield Proofs API Server\n\n"
                f"Server: http://{host}:{port}\n"
                f"Docs: http://{host}:{port}/docs\n"
                f"Health: http://{host}:{port}/health\n\n"
                f"Press Ctrl+C to stop",
                title="API Server",
                border_style="green",
            )
        )

        run_server(host=host, port=port, dev=dev)

    except KeyboardInterrupt:
        console.print("\n[yellow]Server stopped by user[/yellow]")
    except Exception as e:
        console.print(f"[red]Server error: {e}[/red]", style="bold")
        if ctx.obj.get("verbose"):
            console.print_exception()
        sys.exit(1)


@cli.command()
@click.pass_context
def health(ctx):
    """Check the configuration and the shield contract connection."""
    console.print("[cyan]Checking system health...[/cyan]")

    table = Table(title="System Health Check")
    table.add_column("Component", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Details")

    healthy = True
    try:
        config = TreeConfig.from_env()
        table.add_row(
            "Tree Config",
            "Valid",
            f"depth {config.merkle_depth}, nodes {config.merkle_hash_length} bytes, packing {config.packing_size}",
        )
    except WitnessError as e:
        healthy = False
        table.add_row("Tree Config", "Invalid", str(e))

    try:
        from .api.tree_client import ShieldContractClient
        client = ShieldContractClient()
        rpc_status = client.health_check()
        healthy = healthy and rpc_status
        table.add_row("Shield RPC", "Healthy" if rpc_status else "Unhealthy", client.rpc_url)
    except ValueError as e:
        healthy = False
        table.add_row("Shield RPC", "Not configured", str(e))

    console.print(table)
    if not healthy:
        sys.exit(1)


if __name__ == "__main__":
    cli()
