__version__ = "0.1.0"

from .command_executor import CommandExecutor
from .dependency_resolver import DependencyResolver, ResolvedDependency
from .exceptions import (
    CircularDependencyError,
    ConfigNotFoundError,
    ConfigParseError,
    ConfigSchemaError,
    ConfigValidationError,
    DevliftError,
    ExternalProcessError,
    InvalidChoiceError,
    InvalidRepositoryError,
    LocalDependencyNotFoundError,
    MissingFieldError,
)
from .execution_engine import ExecutionEngine, detect_package_manager
from .git_client import GitClient, clone_path, is_valid_git_url
from .load_config import config_exists, find_config_file, load_config, parse_config
from .local_subprocess_executor import LocalSubprocessExecutor
from .logging_config import disable_logging, setup_logging
from .mock_executor import MockExecutor
from .project_setup import SetupReport, infer_config, setup_project
from .prompter import Prompter, RichPrompter, ScriptedPrompter
from .settings import DevliftSettings, load_settings
from .setup_config import (
    ChoiceStep,
    DatabaseStep,
    DockerComposeStep,
    DockerStep,
    EnvironmentConfig,
    EnvironmentVariable,
    MessageAction,
    OpenAction,
    PackageManagerStep,
    PostSetupChoice,
    PostSetupChoiceAction,
    ProjectDependency,
    ServiceStep,
    SetupConfig,
    ShellStep,
    StepChoice,
    StepType,
)
from .step_graph import topological_order
from .step_result import StepResult, StepState
from .validator import validate_config

__all__ = [
    # Version
    "__version__",
    # Core Components
    "DependencyResolver",
    "ExecutionEngine",
    "ResolvedDependency",
    "SetupReport",
    "StepResult",
    "StepState",
    "infer_config",
    "setup_project",
    # Configuration
    "ChoiceStep",
    "DatabaseStep",
    "DevliftSettings",
    "DockerComposeStep",
    "DockerStep",
    "EnvironmentConfig",
    "EnvironmentVariable",
    "MessageAction",
    "OpenAction",
    "PackageManagerStep",
    "PostSetupChoice",
    "PostSetupChoiceAction",
    "ProjectDependency",
    "ServiceStep",
    "SetupConfig",
    "ShellStep",
    "StepChoice",
    "StepType",
    "config_exists",
    "find_config_file",
    "load_config",
    "load_settings",
    "parse_config",
    "validate_config",
    # Utilities
    "clone_path",
    "detect_package_manager",
    "disable_logging",
    "is_valid_git_url",
    "setup_logging",
    "topological_order",
    # Collaborators
    "CommandExecutor",
    "GitClient",
    "LocalSubprocessExecutor",
    "MockExecutor",
    "Prompter",
    "RichPrompter",
    "ScriptedPrompter",
    # Exceptions
    "CircularDependencyError",
    "ConfigNotFoundError",
    "ConfigParseError",
    "ConfigSchemaError",
    "ConfigValidationError",
    "DevliftError",
    "ExternalProcessError",
    "InvalidChoiceError",
    "InvalidRepositoryError",
    "LocalDependencyNotFoundError",
    "MissingFieldError",
]
