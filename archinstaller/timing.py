from __future__ import annotations

import logging
import time
from typing import Callable, Dict, List, Optional

from .errors import StepTimeout

logger = logging.getLogger(__name__)


def format_duration(seconds: float) -> str:
    s = max(int(seconds), 0)
    if s < 60:
        return f"{s}s"
    if s < 3600:
        return f"{s // 60}m {s % 60}s"
    return f"{s // 3600}h {(s % 3600) // 60}m"


class TimingRecord:
    """Per-run step durations and a naive remaining-time projection.

    Purely advisory: nothing here affects control flow, and the record is
    never persisted across runs.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._created = clock()
        self._started: Dict[str, float] = {}
        self.durations: List[float] = []

    def start(self, step_name: str) -> None:
        self._started[step_name] = self._clock()

    def finish(self, step_name: str) -> float:
        began = self._started.pop(step_name, None)
        if began is None:
            logger.debug("finish() without start() for %s", step_name)
            return 0.0
        duration = max(self._clock() - began, 0.0)
        self.durations.append(duration)
        return duration

    @property
    def average(self) -> float:
        if not self.durations:
            return 0.0
        return sum(self.durations) / len(self.durations)

    def estimate_remaining(self, total_steps: int, steps_attempted_so_far: int) -> float:
        if not self.durations:
            return 0.0
        return self.average * max(total_steps - steps_attempted_so_far, 0)

    def elapsed_total(self) -> float:
        return max(self._clock() - self._created, 0.0)


class StepDeadline:
    """Time budget of the step currently running.

    The orchestrator arms it around a step; commands ask for remaining() and
    hand that to subprocess, so an overrunning step is stopped inside its own
    work before the next step starts.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._budget: Optional[float] = None
        self._expires_at: Optional[float] = None

    def arm(self, seconds: float) -> None:
        if seconds <= 0:
            raise ValueError("deadline must be positive")
        self._budget = seconds
        self._expires_at = self._clock() + seconds

    def disarm(self) -> None:
        self._budget = None
        self._expires_at = None

    @property
    def armed(self) -> bool:
        return self._expires_at is not None

    @property
    def expired(self) -> bool:
        return self._expires_at is not None and self._clock() >= self._expires_at

    def remaining(self) -> Optional[float]:
        """Seconds left, or None when no deadline is armed.

        Raises StepTimeout once the budget is spent.
        """

        if self._expires_at is None:
            return None
        left = self._expires_at - self._clock()
        if left <= 0:
            raise StepTimeout(f"timed out after {self._budget:g}s")
        return left
