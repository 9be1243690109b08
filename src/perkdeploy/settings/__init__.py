"""
Settings - project configuration, credentials and argument files.
"""

from .arguments import load_constructor_args
from .credentials import (
    CredentialProvider,
    EnvCredentialProvider,
    StaticCredentialProvider,
    load_env_file,
)
from .models import (
    DEFAULT_CONFIG_FILENAME,
    CompilerSettings,
    DeploymentSpec,
    ExplorerProfile,
    NetworkProfile,
    NetworkRegistry,
    ProjectConfig,
)
from .schemas import SchemaRegistry, SchemaValidationError
