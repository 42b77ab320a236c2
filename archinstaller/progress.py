from __future__ import annotations

import logging

from .timing import TimingRecord, format_duration

logger = logging.getLogger(__name__)


class ProgressReporter:
    """Console/log progress lines for the step loop.

    remaining_steps counts only steps that will actually execute, so steps
    skipped by mode or by resume never inflate the estimate.
    """

    def __init__(self, total_steps: int, timing: TimingRecord) -> None:
        self.total_steps = total_steps
        self.timing = timing

    def _estimate(self, remaining_steps: int) -> None:
        remaining = self.timing.estimate_remaining(self.total_steps, self.total_steps - remaining_steps)
        if remaining > 0:
            logger.info("Estimated remaining time: %s", format_duration(remaining))

    def step_header(self, ordinal: int, title: str, remaining_steps: int) -> None:
        logger.info("=== Step %d of %d: %s ===", ordinal, self.total_steps, title)
        self._estimate(remaining_steps)

    def skipped(self, ordinal: int, title: str) -> None:
        logger.info("Step %d (%s) already completed - skipping", ordinal, title)

    def skipped_by_mode(self, ordinal: int, title: str, mode: str) -> None:
        logger.info("Step %d: %s mode selected, skipping %s", ordinal, mode.capitalize(), title)

    def step_done(self, *, ok: bool, name: str, duration: float, completed: int, remaining_steps: int) -> None:
        pct = completed * 100 // self.total_steps if self.total_steps else 0
        if ok:
            logger.info(
                "Step completed in %s! Overall progress: %d%% (%d/%d)",
                format_duration(duration),
                pct,
                completed,
                self.total_steps,
            )
        else:
            logger.error(
                "Step failed! Overall progress: %d%% (%d/%d) - failed step: %s",
                pct,
                completed,
                self.total_steps,
                name,
            )
        self._estimate(remaining_steps)
