# devlift/validator.py
"""
Structural validation of a SetupConfig.

Runs before any side effect. Validation is fail-fast: the first violation
raises, and every nested choice branch (setup and post-setup) is walked.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .exceptions import ConfigValidationError, MissingFieldError
from .setup_config import (
    SUPPORTED_VERSION,
    ChoiceStep,
    CommandStep,
    MessageAction,
    OpenAction,
    PostSetupAction,
    PostSetupChoiceAction,
    ProjectDependency,
    SetupConfig,
    SetupStep,
)
from .step_graph import topological_order

logger = logging.getLogger(__name__)

OPEN_TARGETS = ("editor", "browser")


def validate_config(config: SetupConfig) -> None:
    """
    Validate a configuration, raising on the first problem found.

    Raises:
        ConfigValidationError: Unsupported version, invalid step, bad choice, etc.
        MissingFieldError: A step lacks its command, prompt or choices
        CircularDependencyError: Sibling steps depend on each other in a loop
    """
    if not config.version:
        _fail("Missing required field: version")
    if config.version != SUPPORTED_VERSION:
        _fail(f"Unsupported configuration version: {config.version}")

    validate_steps(config.setup_steps)

    for dependency in config.dependencies:
        _validate_dependency(dependency)

    unnamed = _validate_post_setup(config.post_setup)
    if unnamed > 1:
        _fail(
            f"Found {unnamed} post-setup choice actions without a name. "
            f"Give each post-setup choice a 'name' so pre-specified choices can target it."
        )

    logger.debug(
        f"Configuration valid ({len(config.setup_steps)} steps, "
        f"{len(config.dependencies)} dependencies, {len(config.post_setup)} post-setup actions)"
    )


def validate_steps(
    steps: Sequence[SetupStep],
    *,
    ordered: bool = True,
    outer_names: frozenset[str] = frozenset(),
) -> None:
    """
    Validate one sibling list of steps and every branch nested under it.

    Top-level steps form a dependency graph (``ordered``). Choice branch
    actions run in declaration order, so their graph is not ordered, but
    names must still be unique among siblings and every ``depends_on`` must
    name a sibling or a step of an enclosing list (``outer_names``).
    """
    for step in steps:
        if not isinstance(step, SetupStep) or step.step_type is None:
            _fail(f"Invalid step type: {getattr(step, 'type', type(step).__name__)}")

    if not ordered:
        _check_branch_names(steps, outer_names)
    enclosing = outer_names | {step.name for step in steps}

    for step in steps:
        if isinstance(step, CommandStep):
            if not step.command or not step.command.strip():
                logger.warning(f"Invalid config for '{step.name}': missing command")
                raise MissingFieldError(
                    step.name, "command", f"{step.label} step \"{step.name}\" is missing a command"
                )
        elif isinstance(step, ChoiceStep):
            _validate_choice_step(step, enclosing)

    if ordered:
        # Raises on duplicates, unknown references and cycles
        topological_order(steps)


def _check_branch_names(steps: Sequence[SetupStep], outer_names: frozenset[str]) -> None:
    siblings: set[str] = set()
    for step in steps:
        if step.name in siblings:
            _fail(f"Duplicate step name: '{step.name}'")
        siblings.add(step.name)

    for step in steps:
        for dep in step.depends_on:
            if dep not in siblings and dep not in outer_names:
                _fail(f"Step '{step.name}' depends on unknown step '{dep}'")


def _validate_choice_step(step: ChoiceStep, enclosing: frozenset[str] = frozenset()) -> None:
    if not step.prompt:
        logger.warning(f"Invalid config for '{step.name}': choice step without prompt")
        raise MissingFieldError(step.name, "prompt", f"Choice step \"{step.name}\" is missing a prompt")
    if not step.choices:
        logger.warning(f"Invalid config for '{step.name}': choice step without choices")
        raise MissingFieldError(
            step.name,
            "choices",
            f"Choice step \"{step.name}\" is missing choices or has empty choices array",
        )

    seen: set[str] = set()
    for choice in step.choices:
        if not choice.name or not choice.value:
            _fail(f"Every choice of step \"{step.name}\" needs a name and a value")
        if choice.value in seen:
            _fail(f"Choice step \"{step.name}\" has duplicate value '{choice.value}'")
        seen.add(choice.value)
        validate_steps(choice.actions, ordered=False, outer_names=enclosing)


def _validate_dependency(dependency: ProjectDependency) -> None:
    if bool(dependency.repository) == bool(dependency.path):
        _fail(
            f"Dependency '{dependency.name}' must define exactly one of 'repository' or 'path'"
        )
    if dependency.branch and dependency.tag:
        _fail(f"Dependency '{dependency.name}' cannot define both 'branch' and 'tag'")


def _validate_post_setup(actions: Sequence[PostSetupAction]) -> int:
    """Validate post-setup actions recursively; return the number of unnamed choices."""
    unnamed = 0
    for action in actions:
        if isinstance(action, MessageAction):
            continue
        if isinstance(action, OpenAction):
            if action.target not in OPEN_TARGETS:
                _fail(
                    f"Invalid open target: {action.target}. Expected one of: {', '.join(OPEN_TARGETS)}"
                )
            continue
        if not isinstance(action, PostSetupChoiceAction):
            _fail(f"Invalid post-setup action type: {getattr(action, 'type', type(action).__name__)}")

        if action.name is None:
            unnamed += 1
        if not action.prompt:
            raise MissingFieldError(
                action.key, "prompt", "Post-setup choice action is missing a prompt"
            )
        if not action.choices:
            raise MissingFieldError(
                action.key,
                "choices",
                "Post-setup choice action is missing choices or has empty choices array",
            )
        for choice in action.choices:
            if not choice.name or not choice.value:
                _fail(f"Every choice of post-setup action \"{action.key}\" needs a name and a value")
            unnamed += _validate_post_setup(choice.actions)
    return unnamed


def _fail(message: str) -> None:
    logger.warning(f"Invalid config: {message}")
    raise ConfigValidationError(message)
