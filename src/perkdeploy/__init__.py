__all__ = [
    # Workflow
    "DeploymentRunner",
    "DeploymentResult",
    "VerificationResult",
    "Pipeline",
    "WorkflowState",
    # Configuration
    "ProjectConfig",
    "NetworkProfile",
    "NetworkRegistry",
    "ExplorerProfile",
    "CompilerSettings",
    "DeploymentSpec",
    "CredentialProvider",
    "EnvCredentialProvider",
    "StaticCredentialProvider",
    "load_constructor_args",
    # Errors
    "DeployToolError",
    "ConfigError",
    "ArtifactNotFoundError",
    "CompilationError",
    "ArgumentMismatchError",
    "NetworkUnavailableError",
    "TransactionRevertedError",
    "VerificationRejectedError",
    "UnsupportedNetworkError",
]

from .errors import (
    ArgumentMismatchError,
    ArtifactNotFoundError,
    CompilationError,
    ConfigError,
    DeployToolError,
    NetworkUnavailableError,
    TransactionRevertedError,
    UnsupportedNetworkError,
    VerificationRejectedError,
)
from .settings import (
    CompilerSettings,
    CredentialProvider,
    DeploymentSpec,
    EnvCredentialProvider,
    ExplorerProfile,
    NetworkProfile,
    NetworkRegistry,
    ProjectConfig,
    StaticCredentialProvider,
    load_constructor_args,
)
from .workflow import (
    DeploymentResult,
    DeploymentRunner,
    Pipeline,
    VerificationResult,
    WorkflowState,
)
