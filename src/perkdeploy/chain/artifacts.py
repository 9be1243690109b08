"""
Artifact Loader - Reads compiler output produced by the external toolchain.

Both layouts are understood:

* Hardhat: ``artifacts/contracts/Foo.sol/Foo.json`` with a sibling
  ``Foo.dbg.json`` pointing at ``artifacts/build-info/<id>.json``
* Foundry: ``out/Foo.sol/Foo.json`` (``bytecode.object``) with
  ``out/build-info/<id>.json`` when built with ``--build-info``

The artifacts are treated as read-only input; nothing here compiles.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from ..errors import ArtifactNotFoundError

BUILD_INFO_DIR = "build-info"


@dataclass(frozen=True)
class ContractArtifact:
    contract_name: str
    source_name: str
    abi: list[dict[str, Any]]
    bytecode: str
    path: Path

    @property
    def fully_qualified_name(self) -> str:
        return f"{self.source_name}:{self.contract_name}"

    def constructor(self) -> Optional[dict[str, Any]]:
        for entry in self.abi:
            if entry.get("type") == "constructor":
                return entry
        return None


@dataclass(frozen=True)
class BuildInfo:
    solc_version: str
    solc_long_version: str
    input: dict[str, Any]
    output: dict[str, Any]
    path: Path

    @property
    def settings(self) -> dict[str, Any]:
        return self.input.get("settings", {})

    def contract_output(self, source_name: str, contract_name: str) -> Optional[dict[str, Any]]:
        return self.output.get("contracts", {}).get(source_name, {}).get(contract_name)

    def metadata(self, source_name: str, contract_name: str) -> Optional[str]:
        contract = self.contract_output(source_name, contract_name) or {}
        metadata = contract.get("metadata")
        if isinstance(metadata, dict):
            return json.dumps(metadata)
        return metadata

    def source_contents(self) -> dict[str, str]:
        return {
            name: source["content"]
            for name, source in self.input.get("sources", {}).items()
            if "content" in source
        }


class ArtifactStore:
    """Lookup of contract artifacts under one artifacts directory."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def find_artifact_path(self, contract: str) -> Path:
        """
        Locate the artifact JSON for a contract.

        Args:
            contract: Contract name ("Foo") or fully qualified name
                      ("contracts/Foo.sol:Foo")

        Raises:
            ArtifactNotFoundError: If no artifact (or more than one) matches
        """
        if not self.root.is_dir():
            raise ArtifactNotFoundError(
                f"Artifacts directory not found: {self.root}. Compile the contracts first."
            )

        if ":" in contract:
            source_name, contract_name = contract.rsplit(":", 1)
            for candidate in (
                self.root / source_name / f"{contract_name}.json",
                self.root / Path(source_name).name / f"{contract_name}.json",
            ):
                if candidate.is_file():
                    return candidate
            raise ArtifactNotFoundError(f"Artifact not found for {contract} under {self.root}")

        matches = [
            path
            for path in sorted(self.root.rglob(f"{contract}.json"))
            if BUILD_INFO_DIR not in path.relative_to(self.root).parts
        ]
        if not matches:
            raise ArtifactNotFoundError(
                f"Artifact not found for {contract} under {self.root}. Compile the contracts first."
            )
        if len(matches) > 1:
            names = ", ".join(str(p.relative_to(self.root)) for p in matches)
            raise ArtifactNotFoundError(
                f"Contract name {contract} is ambiguous ({names}); use the fully qualified name"
            )
        return matches[0]

    def load(self, contract: str) -> ContractArtifact:
        path = self.find_artifact_path(contract)
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

        contract_name = data.get("contractName") or path.stem
        bytecode = _hex_object(data.get("bytecode"))
        if not bytecode or bytecode == "0x":
            raise ArtifactNotFoundError(
                f"No bytecode in artifact for {contract_name} (abstract contract or interface?)"
            )

        return ContractArtifact(
            contract_name=contract_name,
            source_name=data.get("sourceName") or _source_from_metadata(data, contract_name) or path.parent.name,
            abi=data.get("abi", []),
            bytecode=bytecode,
            path=path,
        )

    def build_info(self, artifact: ContractArtifact) -> BuildInfo:
        """Find the compiler input/output that produced ``artifact``."""
        debug_file = artifact.path.with_name(f"{artifact.contract_name}.dbg.json")
        if debug_file.is_file():
            with debug_file.open("r", encoding="utf-8") as f:
                pointer = json.load(f).get("buildInfo")
            if pointer:
                candidate = (debug_file.parent / pointer).resolve()
                if candidate.is_file():
                    return _read_build_info(candidate)

        build_dir = self.root / BUILD_INFO_DIR
        if build_dir.is_dir():
            for candidate in sorted(build_dir.glob("*.json")):
                info = _read_build_info(candidate)
                if info.contract_output(artifact.source_name, artifact.contract_name) is not None:
                    return info

        raise ArtifactNotFoundError(
            f"Build info not found for {artifact.fully_qualified_name}. "
            "Recompile with build info enabled."
        )


def _hex_object(value: Any) -> str:
    if isinstance(value, dict):
        value = value.get("object", "")
    if not value:
        return ""
    value = str(value)
    return value if value.startswith("0x") else "0x" + value


def _source_from_metadata(data: dict[str, Any], contract_name: str) -> Optional[str]:
    metadata = data.get("metadata")
    if isinstance(metadata, str):
        try:
            metadata = json.loads(metadata)
        except json.JSONDecodeError:
            return None
    if not isinstance(metadata, dict):
        return None
    targets = metadata.get("settings", {}).get("compilationTarget", {})
    for source_name, name in targets.items():
        if name == contract_name:
            return source_name
    return None


def _read_build_info(path: Path) -> BuildInfo:
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    long_version = data.get("solcLongVersion") or data.get("solcVersion", "")
    return BuildInfo(
        solc_version=data.get("solcVersion") or long_version.split("+", 1)[0],
        solc_long_version=long_version,
        input=data.get("input", {}),
        output=data.get("output", {}),
        path=path,
    )
