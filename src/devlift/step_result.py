# devlift/step_result.py
from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class StepState(Enum):
    """Possible states of one step instance during a run."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SKIPPED = "skipped"
    SELECTED = "selected"
    EXECUTED = "executed"
    FAILED = "failed"


@dataclass
class StepResult:
    """
    Record of a single step instance executed by the ExecutionEngine.

    Lifecycle:
      command steps: PENDING → CONFIRMED | SKIPPED → EXECUTED | FAILED
      choice steps:  PENDING → SELECTED (branch steps get their own records)
    """

    # ------------------------------------------------------------------ #
    # Identification
    # ------------------------------------------------------------------ #
    step_name: str
    """Name of the step (or post-setup choice key)."""

    step_type: str
    """Type string of the step, e.g. "shell" or "choice"."""

    parent: str | None = None
    """Name of the choice step whose branch produced this step, if any."""

    # ------------------------------------------------------------------ #
    # Outcome
    # ------------------------------------------------------------------ #
    command: str | None = None
    """Command line actually run (after manager detection / docker prefixing)."""

    selected_value: str | None = None
    """For choice steps: the value that was selected."""

    state: StepState = StepState.PENDING

    error: str | Exception | None = None
    """Error message or exception if failed, or the skip reason."""

    # ------------------------------------------------------------------ #
    # Timing
    # ------------------------------------------------------------------ #
    start_time: datetime.datetime | None = None
    end_time: datetime.datetime | None = None
    duration: datetime.timedelta | None = field(default=None)

    # ------------------------------------------------------------------ #
    # State transitions
    # ------------------------------------------------------------------ #
    def mark_confirmed(self) -> None:
        """Transition to CONFIRMED and record start time."""
        if self.state is not StepState.PENDING:
            logger.warning(f"Step '{self.step_name}' confirmed from invalid state {self.state}")
        self.state = StepState.CONFIRMED
        self.start_time = datetime.datetime.now()
        logger.debug(f"Step '{self.step_name}' confirmed")

    def mark_skipped(self, reason: str | None = None) -> None:
        self.state = StepState.SKIPPED
        self.error = reason or "Declined by user"
        self._finalize()
        logger.debug(f"Step '{self.step_name}' skipped: {self.error}")

    def mark_selected(self, value: str) -> None:
        """Record the branch chosen for a choice step."""
        self.state = StepState.SELECTED
        self.selected_value = value
        self.start_time = datetime.datetime.now()
        self._finalize()
        logger.debug(f"Choice '{self.step_name}' selected '{value}'")

    def mark_executed(self) -> None:
        """Mark the command as completed successfully."""
        self.state = StepState.EXECUTED
        self._finalize()
        logger.debug(f"Step '{self.step_name}' executed in {self.duration_str}")

    def mark_failed(self, error: str | Exception) -> None:
        self.state = StepState.FAILED
        self.error = error
        self._finalize()
        msg = str(error) if isinstance(error, Exception) else error
        logger.debug(f"Step '{self.step_name}' failed: {msg}")

    # ------------------------------------------------------------------ #
    # Finalization
    # ------------------------------------------------------------------ #
    def _finalize(self) -> None:
        """Record end time and compute duration."""
        self.end_time = datetime.datetime.now()
        if self.start_time:
            self.duration = self.end_time - self.start_time
        else:
            self.duration = datetime.timedelta(0)

    # ------------------------------------------------------------------ #
    # Properties
    # ------------------------------------------------------------------ #
    @property
    def duration_secs(self) -> float | None:
        return self.duration.total_seconds() if self.duration else None

    @property
    def duration_str(self) -> str:
        """Human-readable duration (e.g. '452ms', '2.4s', '1m 23s')."""
        secs = self.duration_secs
        if secs is None:
            return "—"
        if secs < 1:
            return f"{secs * 1000:.0f}ms"
        if secs < 60:
            return f"{secs:.1f}s"
        mins, secs = divmod(secs, 60)
        if mins < 60:
            return f"{int(mins)}m {secs:.0f}s"
        hrs, mins = divmod(mins, 60)
        return f"{int(hrs)}h {int(mins)}m"

    @property
    def is_finished(self) -> bool:
        return self.state not in {StepState.PENDING, StepState.CONFIRMED}

    # ------------------------------------------------------------------ #
    # Representation & serialization
    # ------------------------------------------------------------------ #
    def __repr__(self) -> str:
        return (
            f"StepResult(step='{self.step_name}', type={self.step_type}, "
            f"state={self.state.value}, dur={self.duration_str})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "step_name": self.step_name,
            "step_type": self.step_type,
            "parent": self.parent,
            "command": self.command,
            "selected_value": self.selected_value,
            "state": self.state.value,
            "error": str(self.error) if self.error else None,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "duration_str": self.duration_str,
        }
