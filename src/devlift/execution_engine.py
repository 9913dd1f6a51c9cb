# devlift/execution_engine.py
"""
ExecutionEngine - runs one project's setup plan end to end.

Order of work for run():
1. Check every pre-specified choice against the whole step tree (setup and
   post-setup). A bad value fails the run before anything executes.
2. Order setup_steps topologically (cycle => CircularDependencyError).
3. Execute each step, gating side effects behind confirmations.
4. Run post_setup actions.

A non-zero exit aborts the run with ExternalProcessError. A declined
confirmation skips that step and the run continues.
"""

from __future__ import annotations

import logging
import shlex
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path

from .command_executor import CommandExecutor
from .exceptions import ExternalProcessError, InvalidChoiceError, MissingFieldError
from .local_subprocess_executor import LocalSubprocessExecutor
from .prompter import Prompter, RichPrompter
from .settings import DevliftSettings
from .setup_config import (
    ChoiceStep,
    CommandStep,
    DatabaseStep,
    DockerComposeStep,
    DockerStep,
    MessageAction,
    OpenAction,
    PackageManagerStep,
    PostSetupAction,
    PostSetupChoiceAction,
    ServiceStep,
    SetupConfig,
    SetupStep,
    ShellStep,
)
from .step_graph import topological_order
from .step_result import StepResult

logger = logging.getLogger(__name__)

# Checked in order; the first lockfile present wins
LOCKFILE_MANAGERS: tuple[tuple[str, str], ...] = (
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("package-lock.json", "npm"),
)
DEFAULT_PACKAGE_MANAGER = "npm"

POST_SETUP_PARENT = "post_setup"


def detect_package_manager(directory: str | Path) -> str:
    """Pick the package manager from the lockfile present in ``directory``."""
    base = Path(directory)
    for lockfile, manager in LOCKFILE_MANAGERS:
        if (base / lockfile).exists():
            return manager
    return DEFAULT_PACKAGE_MANAGER


def browser_command(url: str, platform: str | None = None) -> list[str]:
    """Command that opens ``url`` with the platform's default browser."""
    platform = platform or sys.platform
    if platform == "darwin":
        return ["open", url]
    if platform.startswith("win"):
        return ["cmd", "/c", "start", "", url]
    return ["xdg-open", url]


class ExecutionEngine:
    """
    Executes a validated SetupConfig inside a project directory.

    Args:
        config: The validated setup plan
        directory: Project root; every command runs here
        executor: Process runner (defaults to LocalSubprocessExecutor)
        prompter: Confirmation/selection prompts (defaults to RichPrompter)
        prespecified_choices: Choice step name -> value, bypassing prompts
        skip_confirmations: Run gated commands without asking
        settings: User settings (editor commands, default browser URL)
    """

    def __init__(
        self,
        config: SetupConfig,
        directory: str | Path,
        *,
        executor: CommandExecutor | None = None,
        prompter: Prompter | None = None,
        prespecified_choices: Mapping[str, str] | None = None,
        skip_confirmations: bool = False,
        settings: DevliftSettings | None = None,
    ):
        self.config = config
        self.directory = Path(directory).resolve()
        self.executor = executor or LocalSubprocessExecutor()
        self.prompter = prompter or RichPrompter()
        self.prespecified_choices: dict[str, str] = dict(prespecified_choices or {})
        self.skip_confirmations = skip_confirmations
        self.settings = settings or DevliftSettings()
        self.results: list[StepResult] = []

        logger.debug(
            f"ExecutionEngine initialized for {self.directory} "
            f"({len(config.setup_steps)} steps, {len(self.prespecified_choices)} pre-specified choices, "
            f"skip_confirmations={skip_confirmations})"
        )

    # ================================================================
    # Public API
    # ================================================================
    async def run(self) -> list[StepResult]:
        """
        Run setup steps in dependency order, then post-setup actions.

        Returns:
            One StepResult per step instance, in execution order

        Raises:
            InvalidChoiceError: A pre-specified choice is not legal (nothing ran)
            CircularDependencyError: setup_steps contain a cycle (nothing ran)
            MissingFieldError: A step lacks its command, prompt or choices
            ExternalProcessError: A command exited non-zero; later steps did not run
        """
        self.results = []

        self.validate_prespecified_choices()
        ordered = topological_order(self.config.setup_steps)

        for step in ordered:
            await self._run_step(step)

        if self.config.post_setup:
            logger.info("Running post-setup actions...")
            for action in self.config.post_setup:
                await self._run_post_setup_action(action)

        logger.debug(f"Run complete for {self.directory} ({len(self.results)} step records)")
        return self.results

    def validate_prespecified_choices(self) -> None:
        """
        Check every pre-specified choice against the whole tree.

        Every branch is walked, not just the selected one, so a typo anywhere
        fails before any side effect.
        """
        if not self.prespecified_choices:
            return
        self._validate_step_choices(self.config.setup_steps)
        self._validate_post_setup_choices(self.config.post_setup)

    # ================================================================
    # Pre-specified choice validation
    # ================================================================
    def _validate_step_choices(self, steps: Sequence[SetupStep]) -> None:
        for step in steps:
            if not isinstance(step, ChoiceStep):
                continue
            value = self.prespecified_choices.get(step.name)
            if value is not None and step.get_choice(value) is None:
                raise InvalidChoiceError(step.name, value, step.values)
            for choice in step.choices:
                self._validate_step_choices(choice.actions)

    def _validate_post_setup_choices(self, actions: Sequence[PostSetupAction]) -> None:
        for action in actions:
            if not isinstance(action, PostSetupChoiceAction):
                continue
            value = self.prespecified_choices.get(action.key)
            if value is not None and action.get_choice(value) is None:
                raise InvalidChoiceError(action.key, value, action.values, post_setup=True)
            for choice in action.choices:
                self._validate_post_setup_choices(choice.actions)

    # ================================================================
    # Step dispatch
    # ================================================================
    async def _run_step(self, step: SetupStep, parent: str | None = None) -> None:
        if isinstance(step, ChoiceStep):
            await self._handle_choice_step(step, parent)
        elif isinstance(step, PackageManagerStep):
            await self._handle_package_manager_step(step, parent)
        elif isinstance(step, DockerComposeStep):
            await self._handle_docker_compose_step(step, parent)
        elif isinstance(step, DockerStep):
            await self._handle_docker_step(step, parent)
        elif isinstance(step, (ShellStep, DatabaseStep, ServiceStep)):
            await self._handle_shell_like_step(step, parent)
        else:
            logger.warning(f"Unknown step type: {step.type} (step '{step.name}' skipped)")
            self._new_result(step, parent).mark_skipped(f"Unknown step type: {step.type}")

    async def _handle_package_manager_step(self, step: PackageManagerStep, parent: str | None) -> None:
        command = self._require_command(step)
        manager = step.manager or detect_package_manager(self.directory)
        argv = [manager, *shlex.split(command)]

        result = self._new_result(step, parent)
        result.command = " ".join(argv)
        logger.info(f"Running command: {result.command}")

        # Installs are treated as safe: no confirmation
        result.mark_confirmed()
        await self._execute(result, argv=argv)

    async def _handle_docker_compose_step(self, step: DockerComposeStep, parent: str | None) -> None:
        command = self._require_command(step)
        logger.info(f"Running Docker Compose: {step.name}")

        if not (self.directory / step.file).exists():
            logger.warning(f"Warning: {step.file} not found")

        argv = ["docker", "compose", *shlex.split(command)]
        result = self._new_result(step, parent)
        result.command = " ".join(argv)
        if self._confirm(result, f"Execute Docker Compose command?\n  docker compose {command}"):
            await self._execute(result, argv=argv)

    async def _handle_docker_step(self, step: DockerStep, parent: str | None) -> None:
        command = self._require_command(step)
        logger.info(f"Running Docker command: {step.name}")

        argv = ["docker", *shlex.split(command)]
        result = self._new_result(step, parent)
        result.command = " ".join(argv)
        if self._confirm(result, f"Execute Docker command?\n  docker {command}"):
            await self._execute(result, argv=argv)

    async def _handle_shell_like_step(self, step: CommandStep, parent: str | None) -> None:
        command = self._require_command(step)

        if isinstance(step, DatabaseStep):
            logger.info(f"Running database command: {step.name}")
            question = "Execute database command?"
        elif isinstance(step, ServiceStep):
            logger.info(f"Managing service: {step.name}")
            question = "Execute service command?"
        else:
            logger.info(f"Running shell command: {step.name}")
            question = "Execute the following command?"

        result = self._new_result(step, parent)
        result.command = command
        if self._confirm(result, f"{question}\n  {command}"):
            await self._execute(result, shell_command=command)

    async def _handle_choice_step(self, step: ChoiceStep, parent: str | None) -> None:
        if not step.prompt:
            raise MissingFieldError(step.name, "prompt", f"Choice step \"{step.name}\" is missing a prompt")
        if not step.choices:
            raise MissingFieldError(
                step.name,
                "choices",
                f"Choice step \"{step.name}\" is missing choices or has empty choices array",
            )

        logger.info(step.name)
        result = self._new_result(step, parent)

        value = self.prespecified_choices.get(step.name)
        if value is not None:
            choice = step.get_choice(value)
            if choice is None:
                raise InvalidChoiceError(step.name, value, step.values)
            logger.info(f"Using pre-specified choice: {choice.name}")
        else:
            value = self.prompter.select(step.prompt, [(c.name, c.value) for c in step.choices])
            choice = step.get_choice(value)
            if choice is None:
                raise InvalidChoiceError(step.name, value, step.values)

        result.mark_selected(value)

        if not choice.actions:
            logger.info(f"Skipping (no actions for: {choice.name})")
            return

        logger.info(f"Executing actions for: {choice.name}")
        for action in choice.actions:
            await self._run_step(action, parent=step.name)

    # ================================================================
    # Post-setup
    # ================================================================
    async def _run_post_setup_action(self, action: PostSetupAction) -> None:
        if isinstance(action, MessageAction):
            if action.content:
                logger.info(action.content)
        elif isinstance(action, OpenAction):
            if action.target == "editor":
                await self._open_editor(action.path or ".")
            elif action.target == "browser":
                await self._open_browser(action.path or self.settings.default_browser_url)
            else:
                logger.warning(f"Unknown open target: {action.target}")
        elif isinstance(action, PostSetupChoiceAction):
            await self._handle_post_setup_choice(action)
        else:
            logger.warning(f"Unknown post-setup action type: {action.type}")

    async def _handle_post_setup_choice(self, action: PostSetupChoiceAction) -> None:
        if not action.prompt:
            raise MissingFieldError(action.key, "prompt", "Post-setup choice action is missing a prompt")
        if not action.choices:
            raise MissingFieldError(
                action.key,
                "choices",
                "Post-setup choice action is missing choices or has empty choices array",
            )

        result = StepResult(step_name=action.key, step_type=action.type, parent=POST_SETUP_PARENT)
        self.results.append(result)

        value = self.prespecified_choices.get(action.key)
        if value is not None:
            choice = action.get_choice(value)
            if choice is None:
                raise InvalidChoiceError(action.key, value, action.values, post_setup=True)
            logger.info(f"Using pre-specified choice: {choice.name}")
        else:
            value = self.prompter.select(action.prompt, [(c.name, c.value) for c in action.choices])
            choice = action.get_choice(value)
            if choice is None:
                raise InvalidChoiceError(action.key, value, action.values, post_setup=True)

        result.mark_selected(value)

        if not choice.actions:
            logger.info(f"Skipping (no actions for: {choice.name})")
            return

        logger.info(f"Executing post-setup actions for: {choice.name}")
        for sub_action in choice.actions:
            await self._run_post_setup_action(sub_action)

    async def _open_editor(self, path: str) -> None:
        full_path = (self.directory / path).resolve()
        logger.info(f"Opening {full_path} in editor...")

        for editor in self.settings.editor_commands:
            try:
                code = await self.executor.run_exec([editor, str(full_path)], self.directory)
            except OSError as e:
                logger.debug(f"Editor '{editor}' could not be started: {e}")
                continue
            if code == 0:
                return
            logger.debug(f"Editor '{editor}' exited with code {code}")

        logger.warning("Could not open editor automatically. Please open the project manually.")

    async def _open_browser(self, url: str) -> None:
        logger.info(f"Opening {url} in browser...")
        try:
            code = await self.executor.run_exec(browser_command(url), self.directory)
        except OSError as e:
            logger.debug(f"Browser opener failed: {e}")
            code = None
        if code != 0:
            logger.warning(f"Could not open browser automatically. Please visit {url} manually.")

    # ================================================================
    # Helpers
    # ================================================================
    def _new_result(self, step: SetupStep, parent: str | None) -> StepResult:
        result = StepResult(step_name=step.name, step_type=step.type, parent=parent)
        self.results.append(result)
        return result

    def _require_command(self, step: CommandStep) -> str:
        if not step.command or not step.command.strip():
            raise MissingFieldError(step.name, "command", f"{step.label} step \"{step.name}\" is missing a command")
        return step.command

    def _confirm(self, result: StepResult, question: str) -> bool:
        """Ask before running a gated command. Declining marks the step SKIPPED."""
        if self.skip_confirmations or self.prompter.confirm(question, default=True):
            result.mark_confirmed()
            return True
        logger.info("Skipped.")
        result.mark_skipped()
        return False

    async def _execute(
        self,
        result: StepResult,
        *,
        shell_command: str | None = None,
        argv: list[str] | None = None,
    ) -> None:
        """Run the step's command and record the outcome; non-zero exit raises."""
        if shell_command is not None:
            code = await self.executor.run_shell(shell_command, self.directory)
            display = shell_command
        else:
            code = await self.executor.run_exec(argv or [], self.directory)
            display = " ".join(argv or [])

        if code != 0:
            error = ExternalProcessError(display, code, str(self.directory))
            result.mark_failed(error)
            logger.error(f"Step '{result.step_name}' failed: {error}")
            raise error

        result.mark_executed()

    def __repr__(self) -> str:
        return (
            f"ExecutionEngine(directory={self.directory}, steps={len(self.config.setup_steps)}, "
            f"skip_confirmations={self.skip_confirmations})"
        )
