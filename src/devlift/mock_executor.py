# devlift/mock_executor.py
"""
MockExecutor - records commands instead of running them.

Useful for tests and dry runs: every call is appended to ``calls`` and
answered with a configurable exit code.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .command_executor import CommandExecutor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutedCommand:
    """One recorded call."""

    command: str
    """The command line (shell) or the space-joined argv (exec)."""

    cwd: str
    shell: bool
    args: tuple[str, ...] = ()


class MockExecutor(CommandExecutor):
    """
    Fake executor returning canned exit codes.

    Args:
        exit_codes: Per-command exit codes, keyed by the recorded command string
        default_exit_code: Exit code for commands not listed in ``exit_codes``
    """

    def __init__(self, exit_codes: dict[str, int] | None = None, default_exit_code: int = 0):
        self.exit_codes = dict(exit_codes or {})
        self.default_exit_code = default_exit_code
        self.calls: list[ExecutedCommand] = []

    async def run_shell(self, command: str, cwd: str | Path) -> int:
        self.calls.append(ExecutedCommand(command=command, cwd=str(cwd), shell=True))
        return self._exit_code(command)

    async def run_exec(self, args: Sequence[str], cwd: str | Path) -> int:
        command = " ".join(args)
        self.calls.append(
            ExecutedCommand(command=command, cwd=str(cwd), shell=False, args=tuple(args))
        )
        return self._exit_code(command)

    @property
    def commands(self) -> list[str]:
        """Recorded command strings, in call order."""
        return [c.command for c in self.calls]

    def _exit_code(self, command: str) -> int:
        code = self.exit_codes.get(command, self.default_exit_code)
        logger.debug(f"MockExecutor: '{command}' -> {code}")
        return code

    def supports_feature(self, feature: str) -> bool:
        return feature == "recording"

    def __repr__(self) -> str:
        return f"MockExecutor(calls={len(self.calls)})"
