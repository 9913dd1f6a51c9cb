from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

import yaml

from .exceptions import ConfigParseError, ConfigSchemaError, ConfigValidationError
from .setup_config import (
    DEFAULT_COMPOSE_FILE,
    POST_SETUP_CLASSES,
    STEP_CLASSES,
    ChoiceStep,
    DockerComposeStep,
    EnvironmentConfig,
    EnvironmentVariable,
    MessageAction,
    OpenAction,
    PackageManagerStep,
    PostSetupAction,
    PostSetupChoice,
    PostSetupChoiceAction,
    PostSetupType,
    ProjectDependency,
    SetupConfig,
    SetupStep,
    StepChoice,
    StepType,
)
from .validator import validate_config

logger = logging.getLogger(__name__)

ConfigFormat = Literal["yaml", "json"]

# Discovery order: YAML first, then JSON
SUPPORTED_CONFIG_FILES: tuple[tuple[str, ConfigFormat], ...] = (
    ("dev.yml", "yaml"),
    ("dev.yaml", "yaml"),
    ("dev.json", "json"),
)


# =====================================================================
#   Discovery
# =====================================================================
def find_config_file(directory: str | Path) -> tuple[Path, ConfigFormat] | None:
    """Return the first of dev.yml, dev.yaml, dev.json found in ``directory``."""
    base = Path(directory)
    for filename, fmt in SUPPORTED_CONFIG_FILES:
        candidate = base / filename
        if candidate.is_file():
            return candidate, fmt
    return None


def config_exists(directory: str | Path) -> bool:
    return find_config_file(directory) is not None


# =====================================================================
#   Main loader
# =====================================================================
def load_config(directory: str | Path) -> SetupConfig | None:
    """
    Load and validate the configuration file of a project directory.

    Returns None when the directory has no configuration file.
    """
    found = find_config_file(directory)
    if found is None:
        logger.debug(f"No configuration file in {directory}")
        return None

    config_path, fmt = found
    logger.debug(f"Loading {fmt} configuration from {config_path}")
    try:
        text = config_path.read_text(encoding="utf-8")
    except (UnicodeDecodeError, OSError) as e:
        raise ConfigParseError(f"Failed to read configuration file {config_path}: {e}") from e
    return parse_config(text, fmt)


def parse_config(text: str, fmt: ConfigFormat) -> SetupConfig:
    """
    Parse configuration text into a validated SetupConfig.

    Args:
        text: Raw file contents
        fmt: "yaml" or "json"

    Raises:
        ConfigParseError: The text is not valid YAML/JSON
        ConfigSchemaError: The document root is not a mapping
        ConfigValidationError: The document violates the setup plan rules
    """
    try:
        if fmt == "yaml":
            data = yaml.safe_load(text)
        elif fmt == "json":
            data = json.loads(text)
        else:
            raise ValueError(f"Unsupported configuration format: {fmt}")
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigParseError(f"Failed to parse {fmt.upper()} configuration file: {e}") from e

    if not isinstance(data, Mapping):
        raise ConfigSchemaError("Configuration file does not contain a valid object")

    config = build_config(data)
    validate_config(config)
    return config


# =====================================================================
#   Mapping -> dataclasses
# =====================================================================
def build_config(data: Mapping[str, Any]) -> SetupConfig:
    """Build a SetupConfig from a parsed mapping without cross-field validation."""
    version = data.get("version")
    if version is not None and not isinstance(version, str):
        version = str(version)

    # "setup" is the legacy spelling of "setup_steps"
    steps_data = data.get("setup_steps")
    if steps_data is None:
        steps_data = data.get("setup")

    return SetupConfig(
        version=version,
        project_name=data.get("project_name"),
        environment=_build_environment(data.get("environment") or {}),
        setup_steps=tuple(_build_steps(_as_list(steps_data, "setup_steps"))),
        dependencies=tuple(
            _build_dependency(d) for d in _as_list(data.get("dependencies"), "dependencies")
        ),
        post_setup=tuple(
            _build_post_setup_action(a) for a in _as_list(data.get("post_setup"), "post_setup")
        ),
    )


def _build_steps(items: list[Any]) -> list[SetupStep]:
    return [_build_step(item) for item in items]


def _build_step(item: Any) -> SetupStep:
    item = _as_mapping(item, "setup step")
    for required in ("name", "type"):
        if not item.get(required):
            logger.warning(f"Invalid config: setup step missing '{required}'")
            raise ConfigValidationError(f"Missing required field: {required}")

    name = str(item["name"])
    try:
        step_type = StepType(item["type"])
    except ValueError:
        logger.warning(f"Invalid config for '{name}': invalid step type '{item['type']}'")
        raise ConfigValidationError(f"Invalid step type: {item['type']}") from None

    depends_on = tuple(str(d) for d in _as_list(item.get("depends_on"), f"{name}.depends_on"))
    cls = STEP_CLASSES[step_type]

    if cls is ChoiceStep:
        choices = tuple(
            _build_step_choice(c, name) for c in _as_list(item.get("choices"), f"{name}.choices")
        )
        return ChoiceStep(name=name, depends_on=depends_on, prompt=item.get("prompt"), choices=choices)

    kwargs: dict[str, Any] = {"name": name, "depends_on": depends_on, "command": item.get("command")}
    if cls is PackageManagerStep:
        kwargs["manager"] = item.get("manager")
    elif cls is DockerComposeStep:
        kwargs["file"] = item.get("file") or DEFAULT_COMPOSE_FILE
    return cls(**kwargs)


def _build_step_choice(item: Any, step_name: str) -> StepChoice:
    item = _as_mapping(item, f"choice of step '{step_name}'")
    actions = _build_steps(_as_list(item.get("actions"), f"{step_name}.choices.actions"))
    return StepChoice(
        name=_optional_str(item.get("name")) or "",
        value=_choice_value(item, f"step '{step_name}'"),
        actions=tuple(actions),
    )


def _build_post_setup_action(item: Any) -> PostSetupAction:
    item = _as_mapping(item, "post-setup action")
    if not item.get("type"):
        logger.warning("Invalid config: post-setup action missing 'type'")
        raise ConfigValidationError("Missing required field: type")
    try:
        action_type = PostSetupType(item["type"])
    except ValueError:
        raise ConfigValidationError(f"Invalid post-setup action type: {item['type']}") from None

    cls = POST_SETUP_CLASSES[action_type]
    if cls is MessageAction:
        return MessageAction(content=item.get("content"))
    if cls is OpenAction:
        return OpenAction(target=item.get("target"), path=item.get("path"))

    choices = tuple(
        PostSetupChoice(
            name=_optional_str(c.get("name")) or "",
            value=_choice_value(c, "post-setup action"),
            actions=tuple(
                _build_post_setup_action(a)
                for a in _as_list(c.get("actions"), "post_setup.choices.actions")
            ),
        )
        for c in (
            _as_mapping(c, "post-setup choice")
            for c in _as_list(item.get("choices"), "post_setup.choices")
        )
    )
    return PostSetupChoiceAction(
        name=_optional_str(item.get("name")), prompt=item.get("prompt"), choices=choices
    )


def _build_dependency(item: Any) -> ProjectDependency:
    item = _as_mapping(item, "dependency")
    if not item.get("name"):
        logger.warning("Invalid config: dependency missing 'name'")
        raise ConfigValidationError("Missing required field: name")
    try:
        return ProjectDependency(
            name=str(item["name"]),
            repository=item.get("repository"),
            path=item.get("path"),
            branch=_optional_str(item.get("branch")),
            tag=_optional_str(item.get("tag")),
        )
    except TypeError as e:
        raise ConfigValidationError(f"Invalid config in dependencies: {e}") from None


def _build_environment(item: Any) -> EnvironmentConfig:
    item = _as_mapping(item, "environment")
    variables = []
    for var in _as_list(item.get("variables"), "environment.variables"):
        var = _as_mapping(var, "environment variable")
        if not var.get("name"):
            raise ConfigValidationError("Missing required field: name")
        variables.append(
            EnvironmentVariable(
                name=str(var["name"]),
                prompt=var.get("prompt"),
                default=_optional_str(var.get("default")),
            )
        )
    return EnvironmentConfig(example_file=item.get("example_file"), variables=tuple(variables))


# =====================================================================
#   Helpers
# =====================================================================
def _as_list(value: Any, where: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigValidationError(f"'{where}' must be a list")
    return value


def _as_mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigValidationError(f"Each {what} must be an object")
    return value


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


def _choice_value(item: Mapping[str, Any], where: str) -> str:
    """Choice values are matched as text against pre-specified choices, so they must be strings."""
    value = item.get("value")
    if value is None:
        return ""
    if not isinstance(value, str):
        logger.warning(f"Invalid config: non-string choice value {value!r} in {where}")
        raise ConfigValidationError(
            f"Choice value {value!r} in {where} must be a string (quote it in YAML)"
        )
    return value
