"""
Delegated compilation and compiler-settings checks.

Compiling is the external toolchain's job (``npx hardhat compile``,
``forge build --build-info``, ...).  This module only spawns that command
and compares the settings recorded in build info with the configured
ones, since an explorer can only match bytecode built with identical
settings.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional, Sequence

from .chain.artifacts import BuildInfo
from .errors import CompilationError, VerificationRejectedError
from .settings.models import CompilerSettings

logger = logging.getLogger(__name__)


async def run_compile(command: Sequence[str], cwd: Optional[Path] = None) -> str:
    """
    Run the external compile command.

    Returns:
        Captured stdout

    Raises:
        CompilationError: If the command is missing or exits non-zero
    """
    if not command:
        raise CompilationError("No compile command configured")

    logger.info("compiling: %s", " ".join(command))
    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            cwd=str(cwd) if cwd else None,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as exc:
        raise CompilationError(f"Compile command not found: {command[0]}") from exc

    stdout, stderr = await process.communicate()
    if process.returncode != 0:
        tail = stderr.decode("utf-8", errors="replace").strip()[-2000:]
        raise CompilationError(f"Compile command exited with {process.returncode}: {tail}")
    return stdout.decode("utf-8", errors="replace")


def settings_drift(settings: CompilerSettings, build_info: BuildInfo) -> list[str]:
    """List every difference between configured and recorded settings."""
    recorded = build_info.settings
    optimizer = recorded.get("optimizer", {})
    drift = []

    if build_info.solc_version and build_info.solc_version != settings.version:
        drift.append(f"compiler version {build_info.solc_version} != {settings.version}")
    if bool(optimizer.get("enabled", False)) != settings.optimizer_enabled:
        drift.append(
            f"optimizer enabled {optimizer.get('enabled', False)} != {settings.optimizer_enabled}"
        )
    if settings.optimizer_enabled and optimizer.get("runs", 200) != settings.optimizer_runs:
        drift.append(f"optimizer runs {optimizer.get('runs', 200)} != {settings.optimizer_runs}")
    evm_version = recorded.get("evmVersion")
    if evm_version and evm_version != settings.evm_version:
        drift.append(f"evmVersion {evm_version} != {settings.evm_version}")
    return drift


def ensure_settings_match(settings: CompilerSettings, build_info: BuildInfo) -> None:
    drift = settings_drift(settings, build_info)
    if drift:
        raise VerificationRejectedError(
            f"Build info {build_info.path.name} does not match the configured compiler settings: "
            + "; ".join(drift)
        )
