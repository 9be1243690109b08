"""
Sourcify verification.

Sourcify matches deployed bytecode against the compiler metadata plus
the exact source files; no API key is involved.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from ..chain.artifacts import BuildInfo, ContractArtifact
from ..errors import VerificationRejectedError
from .etherscan import request_json

logger = logging.getLogger(__name__)

MATCH_STATUSES = ("perfect", "partial")


class SourcifyVerifier:
    def __init__(
        self,
        api_url: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 60.0,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self._transport = transport
        self._timeout = timeout

    async def verify(
        self,
        address: str,
        chain_id: int,
        artifact: ContractArtifact,
        build_info: BuildInfo,
    ) -> str:
        """
        Submit metadata and sources; return the match status.

        Raises:
            VerificationRejectedError: If Sourcify finds no match
        """
        metadata = build_info.metadata(artifact.source_name, artifact.contract_name)
        if not metadata:
            raise VerificationRejectedError(
                f"No compiler metadata for {artifact.fully_qualified_name} in {build_info.path.name}"
            )

        files = {"metadata.json": metadata, **build_info.source_contents()}
        payload = {"address": address, "chain": str(chain_id), "files": files}

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            data = await request_json(client, "POST", f"{self.api_url}/verify", json=payload)

        results = data.get("result") if isinstance(data, dict) else None
        if not results:
            raise VerificationRejectedError(f"Sourcify returned no result for {address}: {data!r}")

        status = str(results[0].get("status") or "")
        logger.debug("sourcify %s on chain %s: %s", address, chain_id, status)
        if status not in MATCH_STATUSES:
            raise VerificationRejectedError(
                f"Sourcify could not match {address}: {results[0].get('message') or status or 'no match'}"
            )
        return status
