# devlift/prompter.py
"""
Interactive prompts used by the ExecutionEngine.

Prompts are blocking suspension points: the run waits for an answer with no
timeout. Unattended runs avoid them with ``skip_confirmations`` and
pre-specified choices instead.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence

from rich.console import Console
from rich.prompt import Confirm, Prompt

logger = logging.getLogger(__name__)


class Prompter(ABC):
    """Yes/no confirmations and single-select menus."""

    @abstractmethod
    def confirm(self, message: str, default: bool = True) -> bool:
        """Ask a yes/no question."""

    @abstractmethod
    def select(self, message: str, options: Sequence[tuple[str, str]]) -> str:
        """
        Ask the user to pick exactly one option.

        Args:
            message: The question
            options: ``(label, value)`` pairs, in display order

        Returns:
            The value of the selected option
        """


class RichPrompter(Prompter):
    """Terminal prompts rendered with rich."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def confirm(self, message: str, default: bool = True) -> bool:
        return Confirm.ask(message, default=default, console=self.console)

    def select(self, message: str, options: Sequence[tuple[str, str]]) -> str:
        if not options:
            raise ValueError("select() needs at least one option")

        self.console.print(f"[bold cyan]{message}[/bold cyan]")
        for index, (label, _value) in enumerate(options, start=1):
            self.console.print(f"  [cyan]{index}[/cyan]. {label}")

        answer = Prompt.ask(
            "Select an option",
            choices=[str(i) for i in range(1, len(options) + 1)],
            default="1",
            console=self.console,
        )
        return options[int(answer) - 1][1]


class ScriptedPrompter(Prompter):
    """
    Answers prompts from pre-recorded responses.

    Confirmations are taken from ``confirmations`` in order, then fall back
    to ``default_confirm``. Selections are taken from ``selections`` in order;
    running out of selections is an error.
    """

    def __init__(
        self,
        confirmations: Iterable[bool] = (),
        selections: Iterable[str] = (),
        default_confirm: bool = True,
    ):
        self._confirmations = list(confirmations)
        self._selections = list(selections)
        self.default_confirm = default_confirm
        self.confirm_messages: list[str] = []
        self.select_messages: list[str] = []

    def confirm(self, message: str, default: bool = True) -> bool:
        self.confirm_messages.append(message)
        answer = self._confirmations.pop(0) if self._confirmations else self.default_confirm
        logger.debug(f"Scripted confirm '{message}' -> {answer}")
        return answer

    def select(self, message: str, options: Sequence[tuple[str, str]]) -> str:
        self.select_messages.append(message)
        if not self._selections:
            raise LookupError(f"No scripted selection left for prompt: {message}")
        answer = self._selections.pop(0)
        logger.debug(f"Scripted select '{message}' -> {answer}")
        return answer
