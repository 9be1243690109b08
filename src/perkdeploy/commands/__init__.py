"""
Commands - implementations of the perkdeploy CLI.

- deploy:   Deploy the configured contract (optionally compile first / verify after)
- verify:   Submit a deployed address for explorer verification
- networks: List configured network profiles
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import click

from ..settings.arguments import load_constructor_args
from ..settings.models import ProjectConfig

logger = logging.getLogger("perkdeploy")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class CliContext:
    config_path: Path
    verbose: bool = False

    def load_config(self) -> ProjectConfig:
        return ProjectConfig.from_path(self.config_path)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )


def fail(exc: BaseException) -> None:
    """Report an error and exit with status 1."""
    logger.debug("command failed", exc_info=exc)
    click.secho(f"ERROR: {type(exc).__name__}: {exc}", fg="red")
    errors = getattr(exc, "errors", None)
    for line in errors or []:
        click.echo(f"  - {line}")
    sys.exit(1)


def resolve_constructor_args(config: ProjectConfig, args_path: Optional[Path]) -> list[Any]:
    """Explicit file first, then the config's ``deployment`` section."""
    if args_path is not None:
        return load_constructor_args(args_path)
    deployment = config.deployment
    if deployment is not None:
        if deployment.constructor_args is not None:
            return list(deployment.constructor_args)
        if deployment.constructor_args_path is not None:
            return load_constructor_args(deployment.constructor_args_path)
    return []
