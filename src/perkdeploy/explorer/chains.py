"""
Block-explorer endpoints known out of the box.

Etherscan and its sister sites (Polygonscan, ...) share the unified V2
API: one endpoint, with the target chain selected by ``chainid``.
Anything else is declared per project as a custom chain.
"""

from __future__ import annotations

from dataclasses import dataclass

ETHERSCAN_V2_API_URL = "https://api.etherscan.io/v2/api"

FAMILY_ETHERSCAN = "etherscan"
FAMILY_OKLINK = "oklink"
FAMILY_CUSTOM = "custom"


@dataclass(frozen=True)
class ChainDescriptor:
    network: str
    chain_id: int
    api_url: str
    browser_url: str
    family: str = FAMILY_ETHERSCAN


BUILTIN_CHAINS: dict[str, ChainDescriptor] = {
    chain.network: chain
    for chain in (
        ChainDescriptor("mainnet", 1, ETHERSCAN_V2_API_URL, "https://etherscan.io"),
        ChainDescriptor("sepolia", 11155111, ETHERSCAN_V2_API_URL, "https://sepolia.etherscan.io"),
        ChainDescriptor("holesky", 17000, ETHERSCAN_V2_API_URL, "https://holesky.etherscan.io"),
        ChainDescriptor("polygon", 137, ETHERSCAN_V2_API_URL, "https://polygonscan.com"),
        ChainDescriptor("polygonMumbai", 80001, ETHERSCAN_V2_API_URL, "https://mumbai.polygonscan.com"),
        ChainDescriptor("polygonAmoy", 80002, ETHERSCAN_V2_API_URL, "https://amoy.polygonscan.com"),
        ChainDescriptor("base", 8453, ETHERSCAN_V2_API_URL, "https://basescan.org"),
        ChainDescriptor("baseSepolia", 84532, ETHERSCAN_V2_API_URL, "https://sepolia.basescan.org"),
    )
}


def guess_family(api_url: str) -> str:
    """Classify a custom explorer URL."""
    lowered = api_url.lower()
    if "oklink.com" in lowered:
        return FAMILY_OKLINK
    if "etherscan.io" in lowered:
        return FAMILY_ETHERSCAN
    return FAMILY_CUSTOM
