"""
Explorer credential providers.

The runner never reads API keys from the process environment itself; it
asks an injected provider.  A missing key is an empty string, which the
verifier rejects before calling the explorer.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional, Protocol

from dotenv import load_dotenv


class CredentialProvider(Protocol):
    def api_key(self, network: str) -> str:
        ...


class StaticCredentialProvider:
    """Fixed ``{network: api_key}`` mapping."""

    def __init__(self, keys: Optional[Mapping[str, str]] = None) -> None:
        self._keys = dict(keys or {})

    def api_key(self, network: str) -> str:
        return self._keys.get(network, "")


class EnvCredentialProvider:
    """Resolve ``network -> env var name -> value``.

    Args:
        key_envs: network name to environment variable name
        environ: environment mapping (default: ``os.environ`` at lookup time)
    """

    def __init__(
        self,
        key_envs: Mapping[str, str],
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._key_envs = dict(key_envs)
        self._environ = environ

    def api_key(self, network: str) -> str:
        env_name = self._key_envs.get(network)
        if not env_name:
            return ""
        environ = self._environ if self._environ is not None else os.environ
        return environ.get(env_name, "") or ""


def load_env_file(env_path: Optional[Path] = None) -> bool:
    """Load ``.env`` from the working directory (or ``env_path``).

    Existing environment variables win over values in the file.
    """
    env_path = env_path or Path.cwd() / ".env"
    if not env_path.exists():
        return False
    return load_dotenv(env_path, override=False)
