"""
Deploy - run the deployment workflow for the configured contract.

Takes no positional arguments: the contract, network and constructor
arguments come from the config's ``deployment`` section, the environment
(``PERKDEPLOY_NETWORK``) or the options below.

Flow:
1. Compile through the configured command (``--compile``)
2. Deploy the contract
3. Verify it on the network's explorer (``--verify``)
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import click

from ..errors import ConfigError, DeployToolError
from ..wallet import find_private_key
from ..workflow import DeploymentResult, DeploymentRunner, WorkflowState
from . import CliContext, fail, resolve_constructor_args


@click.command()
@click.option("--network", envvar="PERKDEPLOY_NETWORK", default=None, help="Target network name")
@click.option("--contract", default=None, help="Contract name (default: deployment.contract)")
@click.option(
    "--constructor-args-path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Constructor arguments file (.json or .py)",
)
@click.option("--compile", "compile_first", is_flag=True, help="Run the compile command first")
@click.option("--verify", "verify_after", is_flag=True, help="Verify on the explorer after deploying")
@click.pass_obj
def deploy(
    obj: CliContext,
    network: Optional[str],
    contract: Optional[str],
    constructor_args_path: Optional[Path],
    compile_first: bool,
    verify_after: bool,
) -> None:
    """Deploy the configured contract to a network."""
    try:
        config = obj.load_config()
        deployment = config.deployment
        contract = contract or (deployment.contract if deployment else None)
        network = network or (deployment.network if deployment else None)
        if not contract:
            raise ConfigError("No contract selected: pass --contract or set deployment.contract")
        if not network:
            raise ConfigError("No network selected: pass --network or set PERKDEPLOY_NETWORK")
        args = resolve_constructor_args(config, constructor_args_path)

        click.echo(f"  Contract: {contract}")
        click.echo(f"  Network:  {network}")
        click.echo(f"  Args:     {args}")
        click.echo("")

        runner = DeploymentRunner(config, private_key=find_private_key())
        state = asyncio.run(
            runner.run(contract, args, network, compile=compile_first, verify=verify_after)
        )
    except DeployToolError as exc:
        reached = exc.completed_state
        if isinstance(reached, WorkflowState) and reached.deployment is not None:
            _echo_deployment(reached.deployment)
            click.echo(
                "  Deployment succeeded; retry verification with:\n"
                f"    perkdeploy verify --network {reached.network.name} {reached.deployment.address}"
            )
        fail(exc)
        return
    except Exception as exc:
        fail(exc)
        return

    _echo_deployment(state.deployment)

    if state.verification is not None:
        click.secho(f"Verified ({state.verification.status}): {state.verification.explorer_url}", fg="green")


def _echo_deployment(result: DeploymentResult) -> None:
    click.secho(f"{result.contract_name} deployed at {result.address}", fg="green")
    click.echo(f"  TX:       {result.tx_hash}")
    click.echo(f"  Block:    {result.block_number}")
    click.echo(f"  Deployer: {result.deployer}")
