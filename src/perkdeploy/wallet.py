"""
Deployer key handling.

The deployer is a single ECDSA/secp256k1 key read from ``PRIVATE_KEY``
(the environment, or a ``.env`` file in the working directory).  Without
a key, deployments fall back to the node's unlocked accounts, which only
local development nodes provide.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from eth_account import Account
from eth_account.signers.local import LocalAccount

PRIVATE_KEY_ENV = "PRIVATE_KEY"


def load_private_key(env_path: Optional[Path] = None) -> str:
    """
    Load the deployer private key from a .env file or the environment.

    Args:
        env_path: Path to .env file (default: ./.env)

    Returns:
        0x-prefixed hex private key

    Raises:
        ValueError: If PRIVATE_KEY is not set
    """
    env_path = env_path or Path.cwd() / ".env"

    if env_path.exists():
        load_dotenv(env_path, override=False)

    private_key = os.environ.get(PRIVATE_KEY_ENV)
    if not private_key:
        raise ValueError(f"{PRIVATE_KEY_ENV} not found. Set it in the environment or in {env_path}")

    if not private_key.startswith("0x"):
        private_key = "0x" + private_key

    return private_key


def find_private_key(env_path: Optional[Path] = None) -> Optional[str]:
    """Like :func:`load_private_key`, but ``None`` when no key is configured."""
    try:
        return load_private_key(env_path)
    except ValueError:
        return None


def get_account(private_key: Optional[str] = None) -> LocalAccount:
    if private_key is None:
        private_key = load_private_key()
    return Account.from_key(private_key)


def get_address(private_key: Optional[str] = None) -> str:
    """Checksummed address for a private key (loaded from .env when omitted)."""
    return get_account(private_key).address
