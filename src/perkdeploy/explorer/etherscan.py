"""
Etherscan-compatible source verification.

Submits the standard-JSON compiler input with ``action=verifysourcecode``
and polls ``action=checkverifystatus`` until the explorer answers.  The
same protocol is spoken by the Etherscan V2 family and by custom chains
such as OKLink's Polygon Amoy explorer.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from ..chain.artifacts import BuildInfo, ContractArtifact
from ..errors import NetworkUnavailableError, VerificationRejectedError
from ..settings.models import ExplorerProfile
from .chains import FAMILY_OKLINK

logger = logging.getLogger(__name__)

PENDING_MARKERS = ("pending in queue", "in progress")
ALREADY_VERIFIED_MARKERS = ("already verified",)
STATUS_VERIFIED = "verified"
STATUS_ALREADY_VERIFIED = "already_verified"


@dataclass(frozen=True)
class ExplorerVerification:
    guid: Optional[str]
    status: str
    message: str


async def request_json(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    **kwargs: Any,
) -> Any:
    """HTTP request returning decoded JSON, mapped onto the error taxonomy."""
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.TransportError as exc:
        raise NetworkUnavailableError(f"Explorer {url} unreachable: {exc}") from exc

    if response.status_code >= 500:
        raise NetworkUnavailableError(f"Explorer {url} returned HTTP {response.status_code}")
    try:
        data = response.json()
    except ValueError as exc:
        raise VerificationRejectedError(
            f"Explorer {url} returned HTTP {response.status_code} with a non-JSON body"
        ) from exc
    if response.status_code >= 400:
        message = data.get("error") or data.get("message") if isinstance(data, dict) else data
        raise VerificationRejectedError(
            f"Explorer {url} rejected the request (HTTP {response.status_code}): {message}"
        )
    return data


class EtherscanVerifier:
    def __init__(
        self,
        explorer: ExplorerProfile,
        api_key: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        poll_interval: float = 3.0,
        max_polls: int = 20,
        timeout: float = 30.0,
    ) -> None:
        self.explorer = explorer
        self._api_key = api_key
        self._transport = transport
        self._poll_interval = poll_interval
        self._max_polls = max_polls
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        if self.explorer.family == FAMILY_OKLINK:
            return {"Ok-Access-Key": self._api_key}
        return {}

    def _query(self) -> dict[str, str]:
        if self.explorer.sends_chain_id:
            return {"chainid": str(self.explorer.chain_id)}
        return {}

    async def verify(
        self,
        address: str,
        artifact: ContractArtifact,
        build_info: BuildInfo,
        encoded_args: bytes,
    ) -> ExplorerVerification:
        """
        Submit a verification request and wait for the verdict.

        Raises:
            VerificationRejectedError: If the explorer refuses or fails to match
            NetworkUnavailableError: If the explorer cannot be reached
        """
        form = {
            "apikey": self._api_key,
            "module": "contract",
            "action": "verifysourcecode",
            "contractaddress": address,
            "sourceCode": json.dumps(build_info.input),
            "codeformat": "solidity-standard-json-input",
            "contractname": artifact.fully_qualified_name,
            "compilerversion": f"v{build_info.solc_long_version}",
            # sic: the explorer API spells it this way
            "constructorArguements": encoded_args.hex(),
        }

        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport, headers=self._headers()
        ) as client:
            data = await request_json(
                client, "POST", self.explorer.api_url, params=self._query(), data=form
            )
            status, result = _status_and_result(data)
            logger.debug("verifysourcecode for %s: status=%s result=%s", address, status, result)

            if status != "1":
                if _matches(result, ALREADY_VERIFIED_MARKERS):
                    return ExplorerVerification(None, STATUS_ALREADY_VERIFIED, result)
                raise VerificationRejectedError(f"Explorer rejected verification of {address}: {result}")

            guid = result
            for _ in range(self._max_polls):
                await asyncio.sleep(self._poll_interval)
                data = await request_json(
                    client,
                    "GET",
                    self.explorer.api_url,
                    params={
                        **self._query(),
                        "apikey": self._api_key,
                        "module": "contract",
                        "action": "checkverifystatus",
                        "guid": guid,
                    },
                )
                status, result = _status_and_result(data)
                logger.debug("checkverifystatus %s: status=%s result=%s", guid, status, result)

                if _matches(result, PENDING_MARKERS):
                    continue
                if _matches(result, ALREADY_VERIFIED_MARKERS):
                    return ExplorerVerification(guid, STATUS_ALREADY_VERIFIED, result)
                if status == "1":
                    return ExplorerVerification(guid, STATUS_VERIFIED, result)
                raise VerificationRejectedError(f"Explorer could not verify {address}: {result}")

        raise VerificationRejectedError(
            f"Verification of {address} still pending after {self._max_polls} checks (guid {guid}); "
            "run verify again later"
        )


def _status_and_result(data: Any) -> tuple[str, str]:
    if not isinstance(data, dict):
        raise VerificationRejectedError(f"Unexpected explorer response: {data!r}")
    status = str(data.get("status") or "").strip()
    result = data.get("result")
    if result is None:
        result = data.get("message", "")
    return status, str(result)


def _matches(text: str, markers: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in markers)
