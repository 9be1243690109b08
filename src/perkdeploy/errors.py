"""
Error taxonomy for the deployment workflow.

Deploy-time errors are fatal to the invocation and must never be retried
automatically: re-submitting a creation transaction can leave duplicate
contracts on chain.  Verify-time errors do not touch chain state, so the
caller may simply run verification again.
"""

from __future__ import annotations


class DeployToolError(RuntimeError):
    exit_code: int = 1
    # Workflow state reached before the failing step; set by the pipeline.
    completed_state: object = None


class ConfigError(DeployToolError):
    """Invalid project config or constructor-argument file."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class ArtifactNotFoundError(DeployToolError):
    """Compiled artifact or build-info missing for a contract."""


class CompilationError(DeployToolError):
    """The delegated compile command failed."""


# ---- deploy-time ----


class DeploymentError(DeployToolError):
    """Base for errors raised while deploying."""


class ArgumentMismatchError(DeploymentError, ValueError):
    """Constructor arguments disagree with the constructor signature."""


class NetworkUnavailableError(DeploymentError):
    """The RPC endpoint (or explorer endpoint) cannot be reached."""


class TransactionRevertedError(DeploymentError):
    """The chain rejected the contract-creation transaction."""

    def __init__(self, message: str, tx_hash: str | None = None) -> None:
        super().__init__(message)
        self.tx_hash = tx_hash


# ---- verify-time ----


class VerificationError(DeployToolError):
    """Base for errors raised while verifying."""


class VerificationRejectedError(VerificationError):
    """The explorer could not (or refused to) match the deployed bytecode."""


class UnsupportedNetworkError(VerificationError):
    """No profile or no explorer mapping exists for the requested network."""


class RpcError(DeployToolError):
    """JSON-RPC level error returned by the node."""

    def __init__(self, message: str, code: int | None = None, data: object = None) -> None:
        super().__init__(message)
        self.code = code
        self.data = data
