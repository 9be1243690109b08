"""
Transaction Builder - Build, sign, and send contract-creation transactions.

Uses eth-account for local signing and the async JSON-RPC client for
submission.  When no deployer key is configured, the node's first
unlocked account sends the transaction instead (local dev nodes only).
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address, to_hex

from ..errors import ConfigError, RpcError, TransactionRevertedError
from .rpc import RpcClient

logger = logging.getLogger(__name__)


async def deploy_contract(
    rpc: RpcClient,
    deploy_data: str,
    chain_id: int,
    account: Optional[LocalAccount] = None,
    gas_limit: Optional[int] = None,
    timeout: float = 180,
    poll_interval: float = 2.0,
) -> dict[str, Any]:
    """
    Deploy a contract to the chain.

    Builds a creation transaction (no ``to``), signs, sends, and extracts
    the deployed contract address from the receipt.

    Args:
        rpc: Open RPC client for the target network
        deploy_data: 0x-prefixed creation bytecode with encoded constructor args
        chain_id: Chain ID used for EIP-155 signing
        account: Local signer; None uses the node's unlocked account
        gas_limit: Gas limit (default: eth_estimateGas)
        timeout: Receipt wait timeout
        poll_interval: Receipt polling interval

    Returns:
        Dict with tx_hash, deployer, receipt, status, contract_address

    Raises:
        TransactionRevertedError: If the chain rejects the deployment
    """
    if account is not None:
        deployer = account.address
    else:
        unlocked = await rpc.accounts()
        if not unlocked:
            raise ConfigError(
                "No PRIVATE_KEY configured and the node exposes no unlocked accounts"
            )
        deployer = to_checksum_address(unlocked[0])

    call: dict[str, Any] = {"from": deployer, "data": deploy_data, "value": "0x0"}

    if gas_limit is None:
        try:
            gas_limit = await rpc.estimate_gas(call)
        except RpcError as exc:
            raise TransactionRevertedError(f"Deployment would revert: {exc}") from exc
    logger.debug("deploying from %s with gas limit %d", deployer, gas_limit)

    tx: dict[str, Any] = {}
    if account is not None:
        tx = {
            "data": deploy_data,
            "value": 0,
            "nonce": await rpc.get_nonce(deployer),
            "gas": gas_limit,
            "gasPrice": await rpc.get_gas_price(),
            "chainId": chain_id,
        }

    try:
        if account is not None:
            signed = account.sign_transaction(tx)
            tx_hash = await rpc.send_raw_transaction(to_hex(signed.raw_transaction))
        else:
            tx_hash = await rpc.send_transaction(dict(call, gas=hex(gas_limit)))
    except RpcError as exc:
        raise TransactionRevertedError(f"Deployment rejected by the node: {exc}") from exc

    logger.info("deployment transaction sent: %s", tx_hash)

    receipt = await rpc.wait_for_receipt(tx_hash, timeout=timeout, poll_interval=poll_interval)
    status = int(receipt.get("status", "0x0"), 16)
    if status != 1:
        raise TransactionRevertedError(f"Deployment transaction {tx_hash} reverted", tx_hash=tx_hash)

    contract_address = receipt.get("contractAddress")
    if not contract_address:
        raise TransactionRevertedError(
            f"Receipt for {tx_hash} has no contract address", tx_hash=tx_hash
        )

    return {
        "tx_hash": tx_hash,
        "deployer": deployer,
        "receipt": receipt,
        "status": status,
        "contract_address": to_checksum_address(contract_address),
        "block_number": int(receipt.get("blockNumber", "0x0"), 16),
    }
