"""
Deployment workflow runner.

Flow for one invocation:
1. (optional) run the external compile command
2. deploy the contract to the selected network
3. (optional) submit the deployed address for source verification

Steps run strictly in order as one asyncio task; each step receives the
state produced by the previous one and the first failure stops the run.
Nothing is retried: a failed deployment must not be re-submitted
automatically, while a failed verification can be re-run by the caller.
A failing step's error carries the state reached so far as
``completed_state``, so a deployment made before a failed verification
is still reported.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Optional, Sequence, Union

import httpx
from eth_utils import is_hex_address, to_checksum_address

from .chain.abi import deployment_data, encode_constructor_args
from .chain.artifacts import ArtifactStore
from .chain.rpc import RpcClient
from .chain.tx import deploy_contract
from .compiler import ensure_settings_match, run_compile
from .errors import ConfigError, DeployToolError, UnsupportedNetworkError, VerificationRejectedError
from .explorer.etherscan import EtherscanVerifier
from .explorer.sourcify import SourcifyVerifier
from .settings.credentials import CredentialProvider, EnvCredentialProvider
from .settings.models import NetworkProfile, ProjectConfig
from .wallet import get_account

logger = logging.getLogger(__name__)

NetworkRef = Union[NetworkProfile, str]


@dataclass(frozen=True)
class DeploymentResult:
    contract_name: str
    network: str
    address: str
    tx_hash: str
    block_number: int
    deployer: str


@dataclass(frozen=True)
class VerificationResult:
    address: str
    network: str
    explorer_url: str
    guid: Optional[str]
    status: str
    sourcify_status: Optional[str] = None


@dataclass(frozen=True)
class WorkflowState:
    contract_name: str
    constructor_args: tuple[Any, ...]
    network: NetworkProfile
    deployment: Optional[DeploymentResult] = None
    verification: Optional[VerificationResult] = None


Step = Callable[[WorkflowState], Awaitable[WorkflowState]]


class Pipeline:
    """Ordered list of named async steps."""

    def __init__(self, steps: Sequence[tuple[str, Step]]) -> None:
        self.steps = list(steps)

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.steps]

    async def run(self, state: WorkflowState) -> WorkflowState:
        for name, step in self.steps:
            logger.info("step %s (%s on %s)", name, state.contract_name, state.network.name)
            try:
                state = await step(state)
            except DeployToolError as exc:
                exc.completed_state = state
                raise
        return state


class DeploymentRunner:
    """
    Deploy and verify contracts described by a ``ProjectConfig``.

    Args:
        config: Immutable project configuration
        credentials: Explorer API key provider (default: environment variables
                     named in the config's ``etherscan.apiKey`` section)
        private_key: Deployer key; None sends through the node's unlocked account
        transport: httpx transport for both RPC and explorer traffic (tests)
        poll_interval: Receipt / verification status polling interval in seconds
        timeout: Receipt wait timeout in seconds
    """

    def __init__(
        self,
        config: ProjectConfig,
        credentials: Optional[CredentialProvider] = None,
        private_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        poll_interval: float = 2.0,
        timeout: float = 180.0,
    ) -> None:
        self.config = config
        self.credentials = credentials or EnvCredentialProvider(config.networks.api_key_envs())
        self.private_key = private_key
        self.transport = transport
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.artifacts = ArtifactStore(config.artifacts_dir)

    def resolve_network(self, network: NetworkRef) -> NetworkProfile:
        if isinstance(network, NetworkProfile):
            return network
        return self.config.networks.resolve(network)

    async def deploy(
        self,
        contract_name: str,
        constructor_args: Sequence[Any],
        network: NetworkRef,
    ) -> DeploymentResult:
        """
        Deploy ``contract_name`` with ``constructor_args`` to ``network``.

        Arguments are validated against the artifact ABI before the RPC
        endpoint is contacted.

        Raises:
            ArgumentMismatchError: Argument count/types disagree with the constructor
            NetworkUnavailableError: The RPC endpoint cannot be reached
            TransactionRevertedError: The chain rejected the deployment
        """
        profile = self.resolve_network(network)
        artifact = self.artifacts.load(contract_name)
        data = deployment_data(artifact, constructor_args)
        account = get_account(self.private_key) if self.private_key else None

        logger.info("deploying %s to %s (%s)", artifact.contract_name, profile.name, profile.url)
        async with RpcClient(profile.url, transport=self.transport) as rpc:
            chain_id = await rpc.chain_id()
            if profile.chain_id is not None and profile.chain_id != chain_id:
                raise ConfigError(
                    f"Network '{profile.name}' is configured with chainId {profile.chain_id} "
                    f"but {profile.url} reports {chain_id}"
                )
            outcome = await deploy_contract(
                rpc,
                data,
                chain_id,
                account=account,
                timeout=self.timeout,
                poll_interval=self.poll_interval,
            )

        result = DeploymentResult(
            contract_name=artifact.contract_name,
            network=profile.name,
            address=outcome["contract_address"],
            tx_hash=outcome["tx_hash"],
            block_number=outcome["block_number"],
            deployer=outcome["deployer"],
        )
        logger.info("%s deployed at %s (tx %s)", result.contract_name, result.address, result.tx_hash)
        return result

    async def verify(
        self,
        address: str,
        constructor_args: Sequence[Any],
        network: NetworkRef,
        contract_name: Optional[str] = None,
    ) -> VerificationResult:
        """
        Submit a deployed contract for source verification.

        Never sends a chain transaction, so it is safe to call again after
        a failure.

        Raises:
            UnsupportedNetworkError: Unknown network or no explorer mapping for it
            VerificationRejectedError: Missing credential, settings drift, or explorer refusal
        """
        profile = self.resolve_network(network)
        explorer = profile.explorer
        if explorer is None:
            raise UnsupportedNetworkError(f"No block explorer configured for network '{profile.name}'")

        api_key = self.credentials.api_key(profile.name)
        if not api_key:
            hint = f" (set {explorer.api_key_env})" if explorer.api_key_env else ""
            raise VerificationRejectedError(
                f"No explorer API key for network '{profile.name}'{hint}"
            )

        if not is_hex_address(address):
            raise VerificationRejectedError(f"Not a contract address: {address!r}")
        address = to_checksum_address(address)

        contract_name = contract_name or self._default_contract()
        artifact = self.artifacts.load(contract_name)
        build_info = self.artifacts.build_info(artifact)
        ensure_settings_match(self.config.compiler, build_info)
        encoded_args = encode_constructor_args(artifact, constructor_args)

        logger.info("verifying %s at %s on %s", artifact.contract_name, address, profile.name)
        verifier = EtherscanVerifier(
            explorer,
            api_key,
            transport=self.transport,
            poll_interval=self.poll_interval,
        )
        outcome = await verifier.verify(address, artifact, build_info, encoded_args)

        sourcify_status = None
        if self.config.sourcify_enabled:
            sourcify = SourcifyVerifier(self.config.sourcify_url, transport=self.transport)
            sourcify_status = await sourcify.verify(
                address, profile.chain_id or explorer.chain_id, artifact, build_info
            )

        return VerificationResult(
            address=address,
            network=profile.name,
            explorer_url=explorer.address_url(address),
            guid=outcome.guid,
            status=outcome.status,
            sourcify_status=sourcify_status,
        )

    def pipeline(self, compile: bool = False, verify: bool = False) -> Pipeline:
        steps: list[tuple[str, Step]] = []
        if compile:
            steps.append(("compile", self._compile_step))
        steps.append(("deploy", self._deploy_step))
        if verify:
            steps.append(("verify", self._verify_step))
        return Pipeline(steps)

    async def run(
        self,
        contract_name: str,
        constructor_args: Sequence[Any],
        network: NetworkRef,
        compile: bool = False,
        verify: bool = False,
    ) -> WorkflowState:
        state = WorkflowState(
            contract_name=contract_name,
            constructor_args=tuple(constructor_args),
            network=self.resolve_network(network),
        )
        return await self.pipeline(compile=compile, verify=verify).run(state)

    async def _compile_step(self, state: WorkflowState) -> WorkflowState:
        await run_compile(self.config.compile_command)
        return state

    async def _deploy_step(self, state: WorkflowState) -> WorkflowState:
        result = await self.deploy(state.contract_name, state.constructor_args, state.network)
        return replace(state, deployment=result)

    async def _verify_step(self, state: WorkflowState) -> WorkflowState:
        result = await self.verify(
            state.deployment.address,
            state.constructor_args,
            state.network,
            contract_name=state.contract_name,
        )
        return replace(state, verification=result)

    def _default_contract(self) -> str:
        if self.config.deployment is None:
            raise ConfigError("No contract given and no 'deployment.contract' in the config")
        return self.config.deployment.contract
