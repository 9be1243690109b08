"""Shared pytest fixtures: fake artifacts, a fake JSON-RPC node and fake explorers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional
from urllib.parse import parse_qs

import httpx
import pytest

from perkdeploy.settings.credentials import StaticCredentialProvider
from perkdeploy.settings.models import ProjectConfig

# Hardhat's first default account.
DEPLOYER_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
DEPLOYER_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

PERK_SOURCE = "contracts/PerkToken.sol"
PERK_ABI = [
    {
        "type": "constructor",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "name_", "type": "string", "internalType": "string"},
            {"name": "symbol_", "type": "string", "internalType": "string"},
            {"name": "initialSupply", "type": "uint256", "internalType": "uint256"},
        ],
    },
    {
        "type": "function",
        "name": "totalSupply",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
]
PERK_BYTECODE = "0x608060405234801561001057600080fd5b50"


class FakeNode:
    """Minimal JSON-RPC node recording every call it receives."""

    CONTRACT_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
    TX_HASH = "0x" + "ab" * 32

    def __init__(
        self,
        chain_id: int = 31337,
        receipt_status: int = 1,
        estimate_error: Optional[str] = None,
        send_error: Optional[str] = None,
        pending_polls: int = 0,
        gas_price_error: Optional[str] = None,
        accounts: tuple[str, ...] = (DEPLOYER_ADDRESS.lower(),),
    ) -> None:
        self.chain_id = chain_id
        self.receipt_status = receipt_status
        self.estimate_error = estimate_error
        self.send_error = send_error
        self.pending_polls = pending_polls
        self.gas_price_error = gas_price_error
        self.accounts = list(accounts)
        self.calls: list[tuple[str, str, list[Any]]] = []

    @property
    def methods(self) -> list[str]:
        return [method for _, method, _ in self.calls]

    @property
    def sent_transactions(self) -> int:
        return sum(m in ("eth_sendRawTransaction", "eth_sendTransaction") for m in self.methods)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        method, params = payload["method"], payload["params"]
        self.calls.append((str(request.url), method, params))

        try:
            result = self._dispatch(method, params)
        except _RpcFailure as exc:
            return httpx.Response(
                200,
                json={"jsonrpc": "2.0", "id": payload["id"], "error": {"code": exc.code, "message": exc.message}},
            )
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], "result": result})

    def _dispatch(self, method: str, params: list[Any]) -> Any:
        if method == "eth_chainId":
            return hex(self.chain_id)
        if method == "eth_accounts":
            return self.accounts
        if method == "eth_estimateGas":
            if self.estimate_error:
                raise _RpcFailure(3, self.estimate_error)
            return hex(1_500_000)
        if method == "eth_getTransactionCount":
            return "0x0"
        if method == "eth_gasPrice":
            if self.gas_price_error:
                raise _RpcFailure(-32603, self.gas_price_error)
            return hex(1_000_000_000)
        if method in ("eth_sendRawTransaction", "eth_sendTransaction"):
            if self.send_error:
                raise _RpcFailure(-32000, self.send_error)
            return self.TX_HASH
        if method == "eth_getTransactionReceipt":
            if self.pending_polls > 0:
                self.pending_polls -= 1
                return None
            return {
                "transactionHash": self.TX_HASH,
                "status": hex(self.receipt_status),
                "contractAddress": self.CONTRACT_ADDRESS.lower() if self.receipt_status else None,
                "blockNumber": "0x1",
            }
        raise _RpcFailure(-32601, f"method {method} not found")


class _RpcFailure(Exception):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class FakeExplorer:
    """Etherscan-style verification API."""

    def __init__(
        self,
        submit: Optional[dict[str, Any]] = None,
        statuses: Optional[list[dict[str, Any]]] = None,
        http_status: int = 200,
    ) -> None:
        self.submit = submit or {"status": "1", "message": "OK", "result": "guid-1234"}
        self.statuses = list(statuses or [{"status": "1", "message": "OK", "result": "Pass - Verified"}])
        self.http_status = http_status
        self.submissions: list[dict[str, str]] = []
        self.status_checks: list[dict[str, str]] = []
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "POST":
            form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
            form.update(dict(request.url.params))
            self.submissions.append(form)
            return httpx.Response(self.http_status, json=self.submit)
        self.status_checks.append(dict(request.url.params))
        body = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        return httpx.Response(200, json=body)


class FakeSourcify:
    def __init__(self, status: str = "perfect", http_status: int = 200) -> None:
        self.status = status
        self.http_status = http_status
        self.payloads: list[dict[str, Any]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.payloads.append(payload)
        if self.http_status >= 400:
            return httpx.Response(self.http_status, json={"error": "no match found"})
        return httpx.Response(
            200,
            json={"result": [{"address": payload["address"], "chainId": payload["chain"], "status": self.status}]},
        )


def route(handlers: dict[str, Callable[[httpx.Request], httpx.Response]]) -> httpx.MockTransport:
    """Dispatch by host; unknown hosts behave like a refused connection."""

    def handler(request: httpx.Request) -> httpx.Response:
        target = handlers.get(request.url.host)
        if target is None:
            raise httpx.ConnectError(f"connection refused: {request.url.host}", request=request)
        return target(request)

    return httpx.MockTransport(handler)


def write_artifacts(
    root: Path,
    optimizer_runs: int = 15000,
    solc_version: str = "0.8.21",
) -> Path:
    """Lay out a Hardhat-style artifacts directory with one contract."""
    contract_dir = root / PERK_SOURCE
    contract_dir.mkdir(parents=True)
    build_dir = root / "build-info"
    build_dir.mkdir(parents=True)

    (contract_dir / "PerkToken.json").write_text(
        json.dumps(
            {
                "_format": "hh-sol-artifact-1",
                "contractName": "PerkToken",
                "sourceName": PERK_SOURCE,
                "abi": PERK_ABI,
                "bytecode": PERK_BYTECODE,
                "deployedBytecode": "0x6080604052",
            }
        ),
        encoding="utf-8",
    )
    (contract_dir / "PerkToken.dbg.json").write_text(
        json.dumps({"_format": "hh-sol-dbg-1", "buildInfo": "../../build-info/abc123.json"}),
        encoding="utf-8",
    )
    metadata = {"language": "Solidity", "settings": {"compilationTarget": {PERK_SOURCE: "PerkToken"}}}
    (build_dir / "abc123.json").write_text(
        json.dumps(
            {
                "solcVersion": solc_version,
                "solcLongVersion": f"{solc_version}+commit.d9974bed",
                "input": {
                    "language": "Solidity",
                    "sources": {PERK_SOURCE: {"content": "// SPDX-License-Identifier: MIT\ncontract PerkToken {}\n"}},
                    "settings": {"optimizer": {"enabled": True, "runs": optimizer_runs}, "evmVersion": "paris"},
                },
                "output": {"contracts": {PERK_SOURCE: {"PerkToken": {"metadata": json.dumps(metadata)}}}},
            }
        ),
        encoding="utf-8",
    )
    return root


def config_payload() -> dict[str, Any]:
    return {
        "solidity": {
            "version": "0.8.21",
            "settings": {"optimizer": {"enabled": True, "runs": 15000}, "evmVersion": "paris"},
        },
        "networks": {
            "localhost": {"url": "http://127.0.0.1:8545", "chainId": 31337},
            "sepolia": {"url": "https://rpc.sepolia.org"},
            "polygonAmoy": {"url": "https://rpc-amoy.polygon.technology", "chainId": 80002},
        },
        "etherscan": {
            "apiKey": {
                "sepolia": "ETHERSCAN_API_KEY",
                "polygonAmoy": "OKLINK_API_KEY",
            },
            "customChains": [
                {
                    "network": "polygonAmoy",
                    "chainId": 80002,
                    "urls": {
                        "apiURL": "https://www.oklink.com/api/explorer/v1/contract/verify/async/api/polygonAmoy",
                        "browserURL": "https://www.oklink.com/polygonAmoy",
                    },
                }
            ],
        },
        "paths": {"artifacts": "artifacts"},
        "deployment": {"contract": "PerkToken", "network": "localhost"},
    }


@pytest.fixture()
def artifacts_dir(tmp_path: Path) -> Path:
    return write_artifacts(tmp_path / "artifacts")


@pytest.fixture()
def project_config(tmp_path: Path, artifacts_dir: Path) -> ProjectConfig:
    return ProjectConfig.from_dict(config_payload(), base_dir=tmp_path)


@pytest.fixture()
def credentials() -> StaticCredentialProvider:
    return StaticCredentialProvider({"sepolia": "ETHERSCAN-KEY", "polygonAmoy": "OKLINK-KEY"})


@pytest.fixture()
def fake_node() -> FakeNode:
    return FakeNode()


@pytest.fixture()
def fake_explorer() -> FakeExplorer:
    return FakeExplorer()


@pytest.fixture()
def make_node() -> type[FakeNode]:
    return FakeNode


@pytest.fixture()
def make_explorer() -> type[FakeExplorer]:
    return FakeExplorer


@pytest.fixture()
def make_sourcify() -> type[FakeSourcify]:
    return FakeSourcify


@pytest.fixture()
def router() -> Callable[..., httpx.MockTransport]:
    return route


@pytest.fixture()
def config_factory(tmp_path: Path, artifacts_dir: Path) -> Callable[..., ProjectConfig]:
    """Build a ProjectConfig from the default payload with overrides applied."""

    def factory(**overrides: Any) -> ProjectConfig:
        payload = config_payload()
        payload.update(overrides)
        return ProjectConfig.from_dict(payload, base_dir=tmp_path)

    return factory


@pytest.fixture()
def artifacts_writer() -> Callable[..., Path]:
    return write_artifacts


@pytest.fixture()
def config_file(tmp_path: Path, artifacts_dir: Path) -> Path:
    """A deploy.config.json on disk next to the fake artifacts."""
    payload = config_payload()
    payload["deployment"]["constructorArgs"] = ["BIZPERKTEST", "BIZPERKTEST", "10000000000000"]
    path = tmp_path / "deploy.config.json"
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path
