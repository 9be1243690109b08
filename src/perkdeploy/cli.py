"""
perkdeploy CLI

Command-line interface for deploying and verifying compiled Solidity
contracts across the networks declared in ``deploy.config.json``.

Commands:
  deploy    - Deploy the configured contract (compile / verify optional)
  verify    - Verify a deployed contract on the network's explorer
  networks  - List configured networks and explorer mappings
  whoami    - Show the deployer address
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import click

from .commands import CliContext, configure_logging, fail
from .settings.credentials import load_env_file
from .settings.models import DEFAULT_CONFIG_FILENAME
from .wallet import get_address, load_private_key


# ============ Constants ============

VERSION = "1.0.0"


# ============ Main CLI Group ============


class PerkdeployGroup(click.Group):
    """Usage errors exit with status 1 like every other failure."""

    def make_context(self, *args, **kwargs):
        try:
            return super().make_context(*args, **kwargs)
        except click.UsageError as exc:
            exc.exit_code = 1
            raise

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except click.UsageError as exc:
            exc.exit_code = 1
            raise


@click.group(cls=PerkdeployGroup)
@click.version_option(version=VERSION, prog_name="perkdeploy")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    envvar="PERKDEPLOY_CONFIG",
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    help="Project config file",
)
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: Path, verbose: bool) -> None:
    """perkdeploy - deploy and verify contracts."""
    load_env_file()
    configure_logging(verbose)
    ctx.obj = CliContext(config_path=config_path, verbose=verbose)


# ============ Top-level Commands ============

from .commands.deploy import deploy
from .commands.verify import verify

cli.add_command(deploy)
cli.add_command(verify)


@cli.command()
@click.pass_obj
def networks(obj: CliContext) -> None:
    """List configured networks."""
    try:
        config = obj.load_config()
    except Exception as exc:
        fail(exc)
        return

    for name, profile in config.networks.items():
        chain = profile.chain_id if profile.chain_id is not None else "auto"
        click.echo(
            click.style(f"  {name:<16}", fg="bright_white", bold=True)
            + click.style(f" chainId={chain:<10} ", dim=True)
            + profile.url
        )
        explorer = profile.explorer
        if explorer is None:
            click.echo(click.style("                   explorer: none", dim=True))
            continue
        key_state = "unset"
        if explorer.api_key_env and os.environ.get(explorer.api_key_env):
            key_state = "set"
        click.echo(
            click.style("                   explorer: ", dim=True)
            + f"{explorer.browser_url} ({explorer.family}, "
            + f"{explorer.api_key_env or 'no key variable'} {key_state})"
        )


@cli.command()
def whoami() -> None:
    """Show the deployer address."""
    try:
        pk = load_private_key()
        address = get_address(pk)
        click.echo(f"Address: {address}")
    except ValueError:
        click.echo("No deployer key found.")
        click.echo("Set PRIVATE_KEY in the environment or in ./.env")
        sys.exit(1)


# ============ Entry Points ============


def main() -> None:
    """perkdeploy CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
