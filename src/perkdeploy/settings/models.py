"""
Immutable project configuration.

A ``ProjectConfig`` is built once, either from ``deploy.config.json`` or
directly in code, and handed to the workflow runner.  Nothing here reads
the environment; secrets come from a credential provider.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional

from ..errors import ConfigError, UnsupportedNetworkError
from ..explorer.chains import BUILTIN_CHAINS, FAMILY_ETHERSCAN, guess_family
from .schemas import PROJECT_SCHEMA, SchemaRegistry, load_json

DEFAULT_CONFIG_FILENAME = "deploy.config.json"
DEFAULT_SOURCIFY_URL = "https://sourcify.dev/server"


@dataclass(frozen=True)
class ExplorerProfile:
    family: str
    api_url: str
    browser_url: str
    chain_id: int
    api_key_env: Optional[str] = None

    @property
    def sends_chain_id(self) -> bool:
        """Etherscan V2 selects the chain with a ``chainid`` parameter."""
        return self.family == FAMILY_ETHERSCAN

    def address_url(self, address: str) -> str:
        return f"{self.browser_url.rstrip('/')}/address/{address}#code"


@dataclass(frozen=True)
class NetworkProfile:
    name: str
    url: str
    chain_id: Optional[int] = None
    explorer: Optional[ExplorerProfile] = None

    def __post_init__(self) -> None:
        if not self.url:
            raise ConfigError(f"Network '{self.name}' has no RPC endpoint")


@dataclass(frozen=True)
class CompilerSettings:
    version: str = "0.8.21"
    optimizer_enabled: bool = True
    optimizer_runs: int = 15000
    evm_version: str = "paris"

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CompilerSettings":
        settings = payload.get("settings", {})
        optimizer = settings.get("optimizer", {})
        return cls(
            version=payload["version"],
            optimizer_enabled=optimizer.get("enabled", False),
            optimizer_runs=optimizer.get("runs", 200),
            evm_version=settings.get("evmVersion", cls.evm_version),
        )


@dataclass(frozen=True)
class DeploymentSpec:
    """Which contract (and constructor arguments) a plain ``deploy`` targets."""

    contract: str
    network: Optional[str] = None
    constructor_args: Optional[tuple[Any, ...]] = None
    constructor_args_path: Optional[Path] = None


class NetworkRegistry(Mapping[str, NetworkProfile]):
    """Read-only mapping of network name to profile.

    Lookups are exact: there is no default network to fall back to.
    """

    def __init__(self, profiles: Mapping[str, NetworkProfile]) -> None:
        self._profiles = MappingProxyType(dict(profiles))

    def __getitem__(self, name: str) -> NetworkProfile:
        return self._profiles[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._profiles)

    def __len__(self) -> int:
        return len(self._profiles)

    def __repr__(self) -> str:
        return f"NetworkRegistry({list(self._profiles)!r})"

    def resolve(self, name: str) -> NetworkProfile:
        try:
            return self._profiles[name]
        except KeyError:
            known = ", ".join(sorted(self._profiles)) or "<none>"
            raise UnsupportedNetworkError(
                f"Network '{name}' is not configured (known networks: {known})"
            ) from None

    def api_key_envs(self) -> dict[str, str]:
        return {
            name: profile.explorer.api_key_env
            for name, profile in self._profiles.items()
            if profile.explorer is not None and profile.explorer.api_key_env
        }


@dataclass(frozen=True)
class ProjectConfig:
    networks: NetworkRegistry
    compiler: CompilerSettings = field(default_factory=CompilerSettings)
    artifacts_dir: Path = Path("artifacts")
    deployment: Optional[DeploymentSpec] = None
    compile_command: tuple[str, ...] = ()
    sourcify_enabled: bool = False
    sourcify_url: str = DEFAULT_SOURCIFY_URL

    @classmethod
    def from_dict(
        cls,
        payload: dict[str, Any],
        base_dir: Optional[Path] = None,
        registry: Optional[SchemaRegistry] = None,
    ) -> "ProjectConfig":
        registry = registry or SchemaRegistry.default()
        registry.validate_instance(payload, PROJECT_SCHEMA)
        base_dir = base_dir or Path.cwd()

        etherscan = payload.get("etherscan", {})
        api_keys: dict[str, str] = etherscan.get("apiKey", {})
        custom_chains = {entry["network"]: entry for entry in etherscan.get("customChains", [])}

        profiles: dict[str, NetworkProfile] = {}
        for name, net in payload["networks"].items():
            profiles[name] = NetworkProfile(
                name=name,
                url=net["url"],
                chain_id=net.get("chainId"),
                explorer=_explorer_for(name, custom_chains, api_keys),
            )

        solidity = payload.get("solidity")
        compiler = CompilerSettings.from_dict(solidity) if solidity else CompilerSettings()

        deployment = None
        if "deployment" in payload:
            dep = payload["deployment"]
            args_path = dep.get("constructorArgsPath")
            args = dep.get("constructorArgs")
            deployment = DeploymentSpec(
                contract=dep["contract"],
                network=dep.get("network"),
                constructor_args=tuple(args) if args is not None else None,
                constructor_args_path=(base_dir / args_path) if args_path else None,
            )

        sourcify = payload.get("sourcify", {})
        return cls(
            networks=NetworkRegistry(profiles),
            compiler=compiler,
            artifacts_dir=base_dir / payload.get("paths", {}).get("artifacts", "artifacts"),
            deployment=deployment,
            compile_command=tuple(payload.get("compileCommand", ())),
            sourcify_enabled=sourcify.get("enabled", False),
            sourcify_url=sourcify.get("apiUrl", DEFAULT_SOURCIFY_URL),
        )

    @classmethod
    def from_path(cls, path: Path, registry: Optional[SchemaRegistry] = None) -> "ProjectConfig":
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        payload = load_json(path)
        if not isinstance(payload, dict):
            raise ConfigError(f"Config file must contain a JSON object: {path}")
        return cls.from_dict(payload, base_dir=path.resolve().parent, registry=registry)


def _explorer_for(
    network: str,
    custom_chains: dict[str, dict[str, Any]],
    api_keys: dict[str, str],
) -> Optional[ExplorerProfile]:
    """Custom chains take precedence over the built-in table."""
    key_env = api_keys.get(network)
    custom = custom_chains.get(network)
    if custom is not None:
        urls = custom["urls"]
        return ExplorerProfile(
            family=custom.get("family") or guess_family(urls["apiURL"]),
            api_url=urls["apiURL"],
            browser_url=urls["browserURL"],
            chain_id=custom["chainId"],
            api_key_env=key_env,
        )
    builtin = BUILTIN_CHAINS.get(network)
    if builtin is not None:
        return ExplorerProfile(
            family=builtin.family,
            api_url=builtin.api_url,
            browser_url=builtin.browser_url,
            chain_id=builtin.chain_id,
            api_key_env=key_env,
        )
    return None
