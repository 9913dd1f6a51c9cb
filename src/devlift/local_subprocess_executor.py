# devlift/local_subprocess_executor.py
"""
LocalSubprocessExecutor - Default executor using asyncio subprocesses.

Executes commands as local subprocesses with:
- Inherited stdio (live output, nothing captured)
- Exit code reporting
- Kill on cancellation
"""

from __future__ import annotations

import asyncio
import logging
import shlex
from collections.abc import Sequence
from pathlib import Path

from .command_executor import CommandExecutor

logger = logging.getLogger(__name__)

COMMAND_NOT_FOUND = 127


class LocalSubprocessExecutor(CommandExecutor):
    """
    Executes commands as local subprocesses using asyncio.

    Only one process is active at a time; each call awaits completion.
    """

    def __init__(self, env: dict[str, str] | None = None):
        """
        Initialize the executor.

        Args:
            env: Optional environment for child processes (defaults to os.environ)
        """
        self._env = env
        self._process: asyncio.subprocess.Process | None = None
        logger.debug("Initialized LocalSubprocessExecutor")

    async def run_shell(self, command: str, cwd: str | Path) -> int:
        logger.debug(f"Launching shell command in {cwd}: {command}")
        process = await asyncio.create_subprocess_shell(command, cwd=str(cwd), env=self._env)
        return await self._wait(process, command)

    async def run_exec(self, args: Sequence[str], cwd: str | Path) -> int:
        display = shlex.join(args)
        logger.debug(f"Launching process in {cwd}: {display}")
        try:
            process = await asyncio.create_subprocess_exec(*args, cwd=str(cwd), env=self._env)
        except FileNotFoundError:
            logger.debug(f"Executable not found: {args[0]}")
            return COMMAND_NOT_FOUND
        return await self._wait(process, display)

    async def _wait(self, process: asyncio.subprocess.Process, display: str) -> int:
        self._process = process
        try:
            returncode = await process.wait()
        except asyncio.CancelledError:
            logger.debug(f"Wait cancelled, killing: {display}")
            await self._kill_process(process)
            raise
        finally:
            self._process = None

        logger.debug(f"Process exited with code {returncode}: {display}")
        return returncode

    async def _kill_process(self, process: asyncio.subprocess.Process) -> None:
        """
        Forcefully kill a process with SIGKILL.

        Args:
            process: The process to kill
        """
        try:
            process.kill()  # SIGKILL
            await process.wait()  # Ensure it's dead
        except ProcessLookupError:
            # Already dead
            pass

    def supports_feature(self, feature: str) -> bool:
        """Check if executor supports optional features."""
        return feature in {"inherited_stdio", "cancellation"}

    def __repr__(self) -> str:
        active = 1 if self._process is not None else 0
        return f"LocalSubprocessExecutor(active_processes={active})"
