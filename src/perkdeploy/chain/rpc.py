"""
Async JSON-RPC client.

Lightweight alternative to web3.py: httpx for HTTP, plain dicts for
payloads.  Every transport-level failure surfaces as
NetworkUnavailableError; JSON-RPC ``error`` objects surface as RpcError.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
from typing import Any, Optional

import httpx

from ..errors import NetworkUnavailableError, RpcError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class RpcClient:
    """
    JSON-RPC client bound to exactly one endpoint.

    Use as an async context manager::

        async with RpcClient(profile.url) as rpc:
            chain_id = await rpc.chain_id()
    """

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._ids = itertools.count(1)

    async def __aenter__(self) -> "RpcClient":
        self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def call(self, method: str, params: Optional[list] = None) -> Any:
        """
        Make a JSON-RPC call.

        Args:
            method: RPC method name (e.g., "eth_call")
            params: RPC parameters

        Returns:
            Result field from the RPC response

        Raises:
            NetworkUnavailableError: If the endpoint cannot be reached
            RpcError: If the node answers with an error object
        """
        if self._client is None:
            raise RuntimeError("RpcClient must be used inside 'async with'")

        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or [],
            "id": next(self._ids),
        }
        logger.debug("rpc %s -> %s %s", self.url, method, payload["params"])

        try:
            response = await self._client.post(self.url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise NetworkUnavailableError(
                f"RPC endpoint {self.url} returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.TransportError as exc:
            raise NetworkUnavailableError(f"RPC endpoint {self.url} unreachable: {exc}") from exc
        except ValueError as exc:
            raise NetworkUnavailableError(f"RPC endpoint {self.url} returned invalid JSON") from exc

        if "error" in data and data["error"] is not None:
            error = data["error"]
            if isinstance(error, dict):
                raise RpcError(
                    f"RPC error: {error.get('message', error)}",
                    code=error.get("code"),
                    data=error.get("data"),
                )
            raise RpcError(f"RPC error: {error}")

        return data.get("result")

    async def chain_id(self) -> int:
        return int(await self.call("eth_chainId"), 16)

    async def accounts(self) -> list[str]:
        return list(await self.call("eth_accounts") or [])

    async def get_nonce(self, address: str) -> int:
        result = await self.call("eth_getTransactionCount", [address, "pending"])
        return int(result, 16)

    async def get_gas_price(self) -> int:
        return int(await self.call("eth_gasPrice"), 16)

    async def estimate_gas(self, tx: dict[str, Any]) -> int:
        return int(await self.call("eth_estimateGas", [tx]), 16)

    async def send_raw_transaction(self, raw_tx: str) -> str:
        """Send a signed raw transaction.  Returns the 0x transaction hash."""
        return await self.call("eth_sendRawTransaction", [raw_tx])

    async def send_transaction(self, tx: dict[str, Any]) -> str:
        """Send a transaction signed by one of the node's unlocked accounts."""
        return await self.call("eth_sendTransaction", [tx])

    async def get_receipt(self, tx_hash: str) -> Optional[dict[str, Any]]:
        return await self.call("eth_getTransactionReceipt", [tx_hash])

    async def wait_for_receipt(
        self,
        tx_hash: str,
        timeout: float = 120,
        poll_interval: float = 2.0,
    ) -> dict[str, Any]:
        """
        Wait for a transaction receipt.

        Raises:
            NetworkUnavailableError: If no receipt appears within ``timeout``
        """
        deadline = time.monotonic() + timeout
        while True:
            receipt = await self.get_receipt(tx_hash)
            if receipt is not None:
                return receipt
            if time.monotonic() >= deadline:
                raise NetworkUnavailableError(
                    f"Transaction {tx_hash} not confirmed within {timeout}s"
                )
            await asyncio.sleep(poll_interval)
