# devlift/project_setup.py
"""
End-to-end setup of one project: dependencies first, then the project itself.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .command_executor import CommandExecutor
from .dependency_resolver import DependencyResolver, ResolvedDependency
from .exceptions import ConfigNotFoundError
from .execution_engine import ExecutionEngine
from .git_client import GitClient
from .load_config import load_config
from .local_subprocess_executor import LocalSubprocessExecutor
from .prompter import Prompter, RichPrompter
from .settings import DevliftSettings
from .setup_config import PackageManagerStep, SetupConfig
from .step_result import StepResult

logger = logging.getLogger(__name__)


@dataclass
class SetupReport:
    """What setup_project() did."""

    project_dir: Path
    dependencies: list[ResolvedDependency] = field(default_factory=list)
    """Dependencies in the order they were set up."""

    results: dict[str, list[StepResult]] = field(default_factory=dict)
    """Step results keyed by dependency name; the primary project is keyed by its directory."""

    @property
    def project_results(self) -> list[StepResult]:
        return self.results.get(str(self.project_dir), [])


def infer_config(directory: str | Path) -> SetupConfig | None:
    """
    Build a minimal plan for a project without a configuration file.

    A directory with a package.json gets a single package-manager install
    step. Anything else returns None.
    """
    if not (Path(directory) / "package.json").is_file():
        return None
    logger.info("Found package.json. Inferring setup steps...")
    return SetupConfig(
        setup_steps=(PackageManagerStep(name="Install npm dependencies", command="install"),)
    )


async def setup_project(
    directory: str | Path,
    *,
    prespecified_choices: Mapping[str, str] | None = None,
    skip_confirmations: bool = False,
    executor: CommandExecutor | None = None,
    prompter: Prompter | None = None,
    git: GitClient | None = None,
    settings: DevliftSettings | None = None,
    root_identity: str | None = None,
) -> SetupReport:
    """
    Set up the project in ``directory`` together with its dependencies.

    Dependencies are resolved (cloned or located) first, then each one that
    ships a configuration is set up, deepest first. The primary project runs
    last. Pre-specified choices and skip_confirmations apply to every engine,
    and are checked against every plan before the first clone or command.

    Raises:
        ConfigNotFoundError: ``directory`` has no dev.yml/dev.yaml/dev.json
            and no package.json to infer a plan from
        InvalidChoiceError: A pre-specified choice is not legal in some plan
        DevliftError: Any failure from loading, resolution or execution
    """
    project_dir = Path(directory).resolve()
    config = load_config(project_dir)
    if config is None:
        logger.info(f"No configuration file found in {project_dir}")
        config = infer_config(project_dir)
    if config is None:
        raise ConfigNotFoundError(str(project_dir))

    executor = executor or LocalSubprocessExecutor()
    prompter = prompter or RichPrompter()
    settings = settings or DevliftSettings()
    git = git or GitClient(executor)

    def make_engine(plan: SetupConfig, path: Path) -> ExecutionEngine:
        return ExecutionEngine(
            plan,
            path,
            executor=executor,
            prompter=prompter,
            prespecified_choices=prespecified_choices,
            skip_confirmations=skip_confirmations,
            settings=settings,
        )

    name = config.project_name or project_dir.name
    logger.info(f"Setting up {name}")

    # Nothing is cloned while the project's own choices are unchecked
    project_engine = make_engine(config, project_dir)
    project_engine.validate_prespecified_choices()

    resolver = DependencyResolver(git=git, settings=settings)
    dependencies = await resolver.resolve_dependencies(
        config, project_dir, root_identity=root_identity
    )

    dependency_engines: list[tuple[str, ExecutionEngine]] = []
    for dependency in dependencies:
        if dependency.config is None:
            logger.info(f"Dependency {dependency.name} has no configuration; skipping setup")
            continue
        engine = make_engine(dependency.config, dependency.path)
        engine.validate_prespecified_choices()
        dependency_engines.append((dependency.name, engine))

    report = SetupReport(project_dir=project_dir, dependencies=dependencies)

    for dependency_name, engine in dependency_engines:
        logger.info(f"Setting up dependency: {dependency_name}")
        report.results[dependency_name] = await engine.run()

    report.results[str(project_dir)] = await project_engine.run()

    logger.info(f"Setup complete: {name}")
    return report
