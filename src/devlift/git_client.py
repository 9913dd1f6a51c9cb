# devlift/git_client.py
# Small wrapper around the git CLI.
# Every git interaction goes through GitClient so the rest of the codebase
# never builds git command lines itself.

from __future__ import annotations

import logging
import re
from pathlib import Path

from .command_executor import CommandExecutor
from .exceptions import ExternalProcessError
from .local_subprocess_executor import LocalSubprocessExecutor

logger = logging.getLogger(__name__)

# https://host/owner/repo(.git) or git@host:owner/repo(.git)
GIT_URL_PATTERN = re.compile(r"^(https|git)(://|@)([^/:]+)[/:]([^/:]+)/([^/:]+)(\.git)?$")


def is_valid_git_url(url: str) -> bool:
    """True for HTTPS and SSH git URLs of the form host/owner/repo."""
    return bool(url) and GIT_URL_PATTERN.match(url) is not None


def clone_path(repository: str, clone_root: str | Path, ref: str | None = None) -> Path:
    """
    Deterministic local directory for a repository URL.

    ``https://github.com/acme/api.git`` and ``git@github.com:acme/api.git``
    both map to ``<clone_root>/github.com/acme/api``. A branch or tag gets
    its own directory (``api@v1.2.0``) so two refs of one repository can
    coexist.
    """
    normalized = re.sub(r"^(https://|git://|git@)", "", repository)
    normalized = re.sub(r"\.git$", "", normalized)
    normalized = normalized.replace(":", "/", 1)
    if ref:
        normalized = f"{normalized}@{ref.replace('/', '-')}"
    return Path(clone_root) / normalized


class GitClient:
    """
    Runs git through a CommandExecutor.

    Args:
        executor: Process runner (defaults to LocalSubprocessExecutor)
    """

    def __init__(self, executor: CommandExecutor | None = None):
        self.executor = executor or LocalSubprocessExecutor()

    async def clone(self, url: str, dest: str | Path) -> None:
        """Clone ``url`` into ``dest``. The parent of ``dest`` must exist."""
        dest = Path(dest)
        await self._git(["clone", url, str(dest)], cwd=dest.parent)

    async def checkout(self, repo_path: str | Path, ref: str) -> None:
        """Check out a branch or tag in an existing clone."""
        await self._git(["checkout", ref], cwd=Path(repo_path))

    async def _git(self, args: list[str], cwd: Path) -> None:
        """
        Run one git command, raising ExternalProcessError on a non-zero exit.
        """
        argv = ["git", *args]
        logger.debug(f"git {' '.join(args)} (cwd={cwd})")
        code = await self.executor.run_exec(argv, cwd)
        if code != 0:
            raise ExternalProcessError(" ".join(argv), code, str(cwd))
