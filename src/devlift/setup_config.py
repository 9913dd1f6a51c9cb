from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar

from .exceptions import ConfigValidationError

logger = logging.getLogger(__name__)

SUPPORTED_VERSION = "1"
DEFAULT_REF = "main"
DEFAULT_COMPOSE_FILE = "docker-compose.yml"


class StepType(str, Enum):
    """Kinds of setup step a configuration may declare."""

    SHELL = "shell"
    PACKAGE_MANAGER = "package-manager"
    DOCKER_COMPOSE = "docker-compose"
    DOCKER = "docker"
    DATABASE = "database"
    SERVICE = "service"
    CHOICE = "choice"


class PostSetupType(str, Enum):
    """Kinds of action that may run after setup completes."""

    MESSAGE = "message"
    OPEN = "open"
    CHOICE = "choice"


# ─────────────────────────────────────────────────────────────────────────────
# Setup steps
# ─────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class SetupStep:
    """
    Base of the setup step variants.

    Concrete steps are one of the subclasses below; the engine matches on the
    subclass, never on a type string.
    """

    step_type: ClassVar[StepType | None] = None

    name: str
    """Unique among siblings. Used as the node id in the step graph."""

    depends_on: tuple[str, ...] = ()
    """Names of sibling steps that must finish before this one starts."""

    def __post_init__(self) -> None:
        if not self.name or not str(self.name).strip():
            logger.warning("Invalid config: Step name cannot be empty")
            raise ConfigValidationError("Step name cannot be empty")
        # Accept any iterable from programmatic callers but store a tuple
        object.__setattr__(self, "depends_on", tuple(self.depends_on))

    @property
    def type(self) -> str:
        return self.step_type.value if self.step_type else "unknown"

    @property
    def label(self) -> str:
        """Human-readable kind, e.g. "Docker Compose"."""
        return STEP_LABELS.get(self.step_type, "Setup") if self.step_type else "Setup"


@dataclass(frozen=True)
class CommandStep(SetupStep):
    """A step that runs a single command."""

    command: str | None = None
    """Command line to run. Required for every non-choice step."""


@dataclass(frozen=True)
class ShellStep(CommandStep):
    step_type: ClassVar[StepType | None] = StepType.SHELL


@dataclass(frozen=True)
class PackageManagerStep(CommandStep):
    """Runs ``<manager> <command>``; the manager is detected when not given."""

    step_type: ClassVar[StepType | None] = StepType.PACKAGE_MANAGER

    manager: str | None = None


@dataclass(frozen=True)
class DockerComposeStep(CommandStep):
    """Runs ``docker compose <command>``."""

    step_type: ClassVar[StepType | None] = StepType.DOCKER_COMPOSE

    file: str = DEFAULT_COMPOSE_FILE
    """Compose file expected in the project directory (warning only if missing)."""


@dataclass(frozen=True)
class DockerStep(CommandStep):
    """Runs ``docker <command>``."""

    step_type: ClassVar[StepType | None] = StepType.DOCKER


@dataclass(frozen=True)
class DatabaseStep(CommandStep):
    step_type: ClassVar[StepType | None] = StepType.DATABASE


@dataclass(frozen=True)
class ServiceStep(CommandStep):
    step_type: ClassVar[StepType | None] = StepType.SERVICE


@dataclass(frozen=True)
class StepChoice:
    """One branch of a choice step."""

    name: str
    """Label shown to the user."""

    value: str
    """Value matched against pre-specified choices."""

    actions: tuple[SetupStep, ...] = ()
    """Steps executed, in order, when this branch is selected."""

    def __post_init__(self) -> None:
        object.__setattr__(self, "actions", tuple(self.actions))


@dataclass(frozen=True)
class ChoiceStep(SetupStep):
    """Presents mutually exclusive branches, each expanding into its own steps."""

    step_type: ClassVar[StepType | None] = StepType.CHOICE

    prompt: str | None = None
    choices: tuple[StepChoice, ...] = ()

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "choices", tuple(self.choices))

    @property
    def values(self) -> list[str]:
        return [c.value for c in self.choices]

    def get_choice(self, value: str) -> StepChoice | None:
        for choice in self.choices:
            if choice.value == value:
                return choice
        return None


STEP_CLASSES: dict[StepType, type[SetupStep]] = {
    StepType.SHELL: ShellStep,
    StepType.PACKAGE_MANAGER: PackageManagerStep,
    StepType.DOCKER_COMPOSE: DockerComposeStep,
    StepType.DOCKER: DockerStep,
    StepType.DATABASE: DatabaseStep,
    StepType.SERVICE: ServiceStep,
    StepType.CHOICE: ChoiceStep,
}

# Human-readable step kind, used in messages
STEP_LABELS: dict[StepType, str] = {
    StepType.SHELL: "Shell",
    StepType.PACKAGE_MANAGER: "Package manager",
    StepType.DOCKER_COMPOSE: "Docker Compose",
    StepType.DOCKER: "Docker",
    StepType.DATABASE: "Database",
    StepType.SERVICE: "Service",
    StepType.CHOICE: "Choice",
}


# ─────────────────────────────────────────────────────────────────────────────
# Post-setup actions
# ─────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class PostSetupAction:
    """Base of the post-setup action variants."""

    action_type: ClassVar[PostSetupType | None] = None

    @property
    def type(self) -> str:
        return self.action_type.value if self.action_type else "unknown"


@dataclass(frozen=True)
class MessageAction(PostSetupAction):
    action_type: ClassVar[PostSetupType | None] = PostSetupType.MESSAGE

    content: str | None = None


@dataclass(frozen=True)
class OpenAction(PostSetupAction):
    """Opens the project in an editor or a URL in the browser."""

    action_type: ClassVar[PostSetupType | None] = PostSetupType.OPEN

    target: str | None = None
    """Either "editor" or "browser"."""

    path: str | None = None
    """Directory for the editor (relative to the project) or URL for the browser."""


@dataclass(frozen=True)
class PostSetupChoice:
    name: str
    value: str
    actions: tuple[PostSetupAction, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "actions", tuple(self.actions))


@dataclass(frozen=True)
class PostSetupChoiceAction(PostSetupAction):
    action_type: ClassVar[PostSetupType | None] = PostSetupType.CHOICE

    DEFAULT_KEY: ClassVar[str] = "post-setup"

    name: str | None = None
    """Key used for pre-specified choices. Unnamed actions use "post-setup"."""

    prompt: str | None = None
    choices: tuple[PostSetupChoice, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "choices", tuple(self.choices))

    @property
    def key(self) -> str:
        return self.name or self.DEFAULT_KEY

    @property
    def values(self) -> list[str]:
        return [c.value for c in self.choices]

    def get_choice(self, value: str) -> PostSetupChoice | None:
        for choice in self.choices:
            if choice.value == value:
                return choice
        return None


POST_SETUP_CLASSES: dict[PostSetupType, type[PostSetupAction]] = {
    PostSetupType.MESSAGE: MessageAction,
    PostSetupType.OPEN: OpenAction,
    PostSetupType.CHOICE: PostSetupChoiceAction,
}


# ─────────────────────────────────────────────────────────────────────────────
# Project dependencies & environment
# ─────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class ProjectDependency:
    """Another project that must be fully set up before the one declaring it."""

    name: str
    repository: str | None = None
    path: str | None = None
    """Local directory, relative to the referencing project."""

    branch: str | None = None
    tag: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            logger.warning("Invalid config: Dependency name cannot be empty")
            raise ConfigValidationError("Dependency name cannot be empty")

    @property
    def is_local(self) -> bool:
        return bool(self.path)

    @property
    def ref(self) -> str | None:
        """Branch or tag to check out after cloning, if any."""
        return self.branch or self.tag

    @property
    def identity(self) -> str:
        """Key used for cycle detection and caching: ``<repository-or-path>#<ref>``."""
        base = self.path or self.repository
        return f"{base}#{self.ref or DEFAULT_REF}"


@dataclass(frozen=True)
class EnvironmentVariable:
    name: str
    prompt: str | None = None
    default: str | None = None


@dataclass(frozen=True)
class EnvironmentConfig:
    example_file: str | None = None
    """Template such as ``.env.example`` the project ships."""

    variables: tuple[EnvironmentVariable, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "variables", tuple(self.variables))


# ─────────────────────────────────────────────────────────────────────────────
# Top-level configuration
# ─────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class SetupConfig:
    """
    Immutable setup plan for one project, returned by load_config()/parse_config().
    Contains everything needed to instantiate an ExecutionEngine.
    """

    version: str | None = SUPPORTED_VERSION
    """Configuration schema version. Only "1" is supported."""

    project_name: str | None = None

    environment: EnvironmentConfig = field(default_factory=EnvironmentConfig)

    setup_steps: tuple[SetupStep, ...] = ()
    """Steps run in dependency order."""

    dependencies: tuple[ProjectDependency, ...] = ()
    """Projects set up before this one, in declaration order."""

    post_setup: tuple[PostSetupAction, ...] = ()
    """Actions run in order once every setup step has succeeded."""

    def __post_init__(self) -> None:
        object.__setattr__(self, "setup_steps", tuple(self.setup_steps))
        object.__setattr__(self, "dependencies", tuple(self.dependencies))
        object.__setattr__(self, "post_setup", tuple(self.post_setup))
