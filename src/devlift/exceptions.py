# devlift/exceptions.py
"""
Custom exception hierarchy for devlift.

All devlift-specific exceptions inherit from DevliftError to enable
catch-all error handling while still providing specific exception types
for different error conditions.
"""

from __future__ import annotations


class DevliftError(Exception):
    """
    Base exception for all devlift errors.

    Catch this to handle any devlift-specific error.
    """

    pass


class ConfigParseError(DevliftError):
    """
    Raised when a configuration file is not well-formed YAML or JSON.

    Example:
        >>> parse_config("setup_steps: [", "yaml")
        ConfigParseError: Failed to parse YAML configuration file: ...
    """

    pass


class ConfigSchemaError(DevliftError):
    """
    Raised when a configuration document parses but its root is not a mapping.
    """

    pass


class ConfigNotFoundError(DevliftError):
    """Raised when a project directory has no dev.yml, dev.yaml or dev.json."""

    def __init__(self, directory: str):
        self.directory = directory
        super().__init__(
            f"No configuration file found in {directory} (looked for dev.yml, dev.yaml, dev.json)"
        )


class ConfigValidationError(DevliftError):
    """
    Raised when a configuration is well-formed but violates the setup plan rules.

    Validation is fail-fast: the first violation found is reported.

    Example:
        >>> parse_config('version: "2"', "yaml")
        ConfigValidationError: Unsupported configuration version: 2
    """

    pass


class MissingFieldError(ConfigValidationError):
    """
    Raised when a step lacks a field its type requires (command, prompt, choices).

    Attributes:
        step_name: Name of the offending step
        field_name: The missing field
    """

    def __init__(self, step_name: str, field_name: str, message: str | None = None):
        self.step_name = step_name
        self.field_name = field_name
        super().__init__(message or f"Step '{step_name}' is missing required field: {field_name}")


class CircularDependencyError(DevliftError):
    """
    Raised when a dependency cycle is found, either between sibling setup
    steps or between projects.

    Attributes:
        cycle_path: Ordered list of nodes forming the cycle chain
    """

    def __init__(self, cycle_path: list[str], kind: str = "dependency"):
        """
        Initialize CircularDependencyError with cycle information.

        Args:
            cycle_path: Ordered list of nodes forming the cycle
            kind: What the nodes are ("setup step" or "dependency")
        """
        self.cycle_path = list(cycle_path)
        self.kind = kind
        cycle_display = " -> ".join(self.cycle_path)
        super().__init__(f"Circular {kind} detected: {cycle_display}")


class InvalidChoiceError(DevliftError):
    """
    Raised when a pre-specified choice value is not legal for its choice step.

    Checked before any step executes, so a typo never leaves partial setup behind.

    Attributes:
        step_name: The choice step (or post-setup choice key)
        value: The rejected value
        valid_values: Values the choice accepts
    """

    def __init__(self, step_name: str, value: str, valid_values: list[str], *, post_setup: bool = False):
        self.step_name = step_name
        self.value = value
        self.valid_values = list(valid_values)
        where = "post-setup action" if post_setup else "step"
        super().__init__(
            f"Invalid pre-specified choice \"{value}\" for {where} \"{step_name}\". "
            f"Valid choices are: {', '.join(self.valid_values)}"
        )


class ExternalProcessError(DevliftError):
    """
    Raised when a spawned command exits with a non-zero status.

    This is fatal for the run: remaining steps are not executed.

    Attributes:
        command: The command line that failed
        exit_code: Process return code
        cwd: Directory the command ran in
    """

    def __init__(self, command: str, exit_code: int, cwd: str | None = None):
        self.command = command
        self.exit_code = exit_code
        self.cwd = cwd
        location = f" in {cwd}" if cwd else ""
        super().__init__(f"Command failed with exit code {exit_code}{location}: {command}")


class LocalDependencyNotFoundError(DevliftError):
    """Raised when a local project dependency path does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Local dependency path not found: {path}")


class InvalidRepositoryError(DevliftError):
    """Raised when a dependency repository is not a recognisable git URL."""

    def __init__(self, repository: str):
        self.repository = repository
        super().__init__(f"Invalid repository URL: {repository}")
