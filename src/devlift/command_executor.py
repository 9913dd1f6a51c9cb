# devlift/command_executor.py
"""
Abstract interface for running the external processes a setup plan asks for.

The ExecutionEngine and the git client never spawn processes directly; they
go through a CommandExecutor so tests and embedders can substitute their own.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path


class CommandExecutor(ABC):
    """
    Runs one command at a time and reports its exit code.

    Implementations inherit the caller's stdin/stdout/stderr so the user sees
    live output. Output is never parsed.
    """

    @abstractmethod
    async def run_shell(self, command: str, cwd: str | Path) -> int:
        """
        Run ``command`` through the system shell.

        Args:
            command: Full command line
            cwd: Working directory

        Returns:
            The process exit code (0 = success)
        """

    @abstractmethod
    async def run_exec(self, args: Sequence[str], cwd: str | Path) -> int:
        """
        Run a program directly, without a shell.

        Args:
            args: Program followed by its arguments
            cwd: Working directory

        Returns:
            The process exit code. A program that cannot be found is reported
            as exit code 127, like a shell would.
        """

    def supports_feature(self, feature: str) -> bool:
        """Check if executor supports optional features."""
        return False
