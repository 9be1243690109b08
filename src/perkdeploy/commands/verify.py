"""
Verify - submit a deployed contract to the network's block explorer.

Safe to re-run: verification never sends a chain transaction.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import click

from ..workflow import DeploymentRunner
from . import CliContext, fail, resolve_constructor_args


@click.command()
@click.argument("address")
@click.option("--network", required=True, envvar="PERKDEPLOY_NETWORK", help="Network the contract lives on")
@click.option(
    "--constructor-args-path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Constructor arguments file (.json or .py)",
)
@click.option("--contract", default=None, help="Contract name (default: deployment.contract)")
@click.pass_obj
def verify(
    obj: CliContext,
    address: str,
    network: str,
    constructor_args_path: Optional[Path],
    contract: Optional[str],
) -> None:
    """Verify a deployed contract at ADDRESS."""
    try:
        config = obj.load_config()
        args = resolve_constructor_args(config, constructor_args_path)

        click.echo(f"  Address: {address}")
        click.echo(f"  Network: {network}")
        click.echo("")

        runner = DeploymentRunner(config)
        result = asyncio.run(runner.verify(address, args, network, contract_name=contract))
    except Exception as exc:
        fail(exc)
        return

    if result.status == "already_verified":
        click.secho("Contract already verified", fg="green")
    else:
        click.secho("Successfully verified contract", fg="green")
    click.echo(f"  {result.explorer_url}")
    if result.sourcify_status:
        click.echo(f"  Sourcify: {result.sourcify_status} match")
