# devlift/dependency_resolver.py
"""
DependencyResolver - materializes project-level dependencies before setup.

Each dependency is either a local path or a git repository. Its own
configuration may declare further dependencies, so resolution recurses and
returns a flattened, bottom-up list: every dependency appears after the
dependencies it declares, and each one appears once.

Cycle detection uses an explicit resolution stack, so cycles of any depth
(across any number of configuration files) are reported with their full chain.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .exceptions import (
    CircularDependencyError,
    InvalidRepositoryError,
    LocalDependencyNotFoundError,
)
from .git_client import GitClient, clone_path, is_valid_git_url
from .load_config import load_config
from .settings import DevliftSettings
from .setup_config import DEFAULT_REF, ProjectDependency, SetupConfig

logger = logging.getLogger(__name__)

ConfigLoader = Callable[[Path], "SetupConfig | None"]


@dataclass(frozen=True)
class ResolvedDependency:
    """A dependency that is present on disk and ready to be set up."""

    name: str
    path: Path
    config: SetupConfig | None
    """The dependency's own configuration, or None if it has none."""

    identity: str


class DependencyResolver:
    """
    Resolves and materializes project dependencies recursively.

    State (clone cache and resolution stack) lives on the instance. One
    instance can serve several runs in a process; call reset() between
    independent runs that must not share the clone cache.

    Args:
        git: Git client used for clone/checkout (defaults to GitClient())
        settings: Provides the clone root (defaults to DevliftSettings())
        config_loader: Loads a directory's configuration (defaults to load_config)
    """

    def __init__(
        self,
        *,
        git: GitClient | None = None,
        settings: DevliftSettings | None = None,
        config_loader: ConfigLoader = load_config,
    ):
        self.git = git or GitClient()
        self.settings = settings or DevliftSettings()
        self._config_loader = config_loader
        self._setup_cache: set[str] = set()
        self._resolution_stack: list[str] = []

    # ================================================================
    # Public API
    # ================================================================
    async def resolve_dependencies(
        self,
        config: SetupConfig,
        base_path: str | Path,
        *,
        root_identity: str | None = None,
    ) -> list[ResolvedDependency]:
        """
        Materialize every dependency of ``config``, transitively.

        Args:
            config: Configuration of the project being set up
            base_path: Directory of that project (local paths resolve from here)
            root_identity: Identity of the project itself, when it is a clone of a
                repository (``<url>#<ref>``). Defaults to ``<base_path>#main`` so a
                dependency pointing back at the root is caught as a cycle.

        Returns:
            Dependencies in set-up order (deepest first), without duplicates

        Raises:
            CircularDependencyError: The project dependency graph has a cycle
            LocalDependencyNotFoundError: A local dependency path does not exist
            InvalidRepositoryError: A repository URL is not a git URL
            ExternalProcessError: git clone/checkout failed
        """
        if not config.dependencies:
            return []

        base = Path(base_path).resolve()
        logger.info(f"Resolving {len(config.dependencies)} project dependencies...")

        resolved: list[ResolvedDependency] = []
        seen: set[str] = set()

        root = root_identity or f"{base}#{DEFAULT_REF}"
        self._resolution_stack.append(root)
        try:
            await self._resolve_all(config, base, resolved, seen)
        finally:
            self._resolution_stack.pop()

        logger.debug(f"Resolved dependencies: {[d.name for d in resolved]}")
        return resolved

    def is_dependency_setup(self, dependency: ProjectDependency) -> bool:
        """True if this repository@ref was already cloned by this resolver."""
        return dependency.identity in self._setup_cache

    def mark_dependency_as_setup(self, dependency: ProjectDependency) -> None:
        self._setup_cache.add(dependency.identity)

    def reset(self) -> None:
        """Clear the clone cache and resolution stack (test isolation)."""
        self._setup_cache.clear()
        self._resolution_stack.clear()

    @property
    def resolution_stack(self) -> tuple[str, ...]:
        """Identities currently being resolved, outermost first."""
        return tuple(self._resolution_stack)

    # ================================================================
    # Internals
    # ================================================================
    async def _resolve_all(
        self,
        config: SetupConfig,
        base_path: Path,
        resolved: list[ResolvedDependency],
        seen: set[str],
    ) -> None:
        for dependency in config.dependencies:
            await self._resolve_dependency(dependency, base_path, resolved, seen)

    async def _resolve_dependency(
        self,
        dependency: ProjectDependency,
        parent_path: Path,
        resolved: list[ResolvedDependency],
        seen: set[str],
    ) -> None:
        identity = self._identity(dependency, parent_path)

        if identity in self._resolution_stack:
            chain = [*self._resolution_stack, identity]
            logger.debug(f"Cycle detected while resolving '{dependency.name}'")
            raise CircularDependencyError(chain, kind="project dependency")

        if identity in seen:
            logger.debug(f"Dependency '{dependency.name}' already resolved in this run")
            return

        self._resolution_stack.append(identity)
        try:
            if dependency.is_local:
                path = (parent_path / dependency.path).resolve()
                if not path.exists():
                    raise LocalDependencyNotFoundError(str(path))
                logger.info(f"Using local dependency: {dependency.name} at {path}")
            else:
                path = await self._clone_dependency(dependency)

            dependency_config = self._config_loader(path)

            # Bottom-up: a dependency's own dependencies come first
            if dependency_config is not None and dependency_config.dependencies:
                await self._resolve_all(dependency_config, path, resolved, seen)

            seen.add(identity)
            resolved.append(
                ResolvedDependency(
                    name=dependency.name,
                    path=path,
                    config=dependency_config,
                    identity=identity,
                )
            )
        finally:
            self._resolution_stack.pop()

    async def _clone_dependency(self, dependency: ProjectDependency) -> Path:
        repository = dependency.repository or ""
        if not is_valid_git_url(repository):
            raise InvalidRepositoryError(repository)

        dest = clone_path(repository, self.settings.clone_root, ref=dependency.ref)

        if self.is_dependency_setup(dependency) and dest.exists():
            logger.info(f"Dependency already set up: {dependency.name}")
            return dest

        logger.info(f"Cloning dependency: {dependency.name} from {repository}")

        if dest.exists():
            logger.debug(f"Removing stale clone at {dest}")
            shutil.rmtree(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)

        await self.git.clone(repository, dest)

        if dependency.ref:
            kind = "branch" if dependency.branch else "tag"
            logger.info(f"Checking out {kind}: {dependency.ref}")
            await self.git.checkout(dest, dependency.ref)

        self.mark_dependency_as_setup(dependency)
        logger.info(f"Dependency cloned: {dependency.name}")
        return dest

    @staticmethod
    def _identity(dependency: ProjectDependency, parent_path: Path) -> str:
        """
        Identity used for cycle detection.

        Local paths are resolved against the referencing project so the same
        directory reached through different relative paths matches.
        """
        if dependency.is_local:
            local = (parent_path / dependency.path).resolve()
            return f"{local}#{dependency.ref or DEFAULT_REF}"
        return dependency.identity

    def __repr__(self) -> str:
        return (
            f"DependencyResolver(cached={len(self._setup_cache)}, "
            f"clone_root={self.settings.clone_root})"
        )
