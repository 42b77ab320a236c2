from __future__ import annotations

import logging
from enum import Enum
from typing import List

from .prompts import DecisionPort, Question
from .run_state import RunState, StepStatus

logger = logging.getLogger(__name__)


class ResumeDirective(Enum):
    FRESH_START = "fresh_start"
    RESUME_FROM_LAST_COMPLETED = "resume_from_last_completed"
    RETRY_FAILED_FIRST = "retry_failed_first"
    CANCELLED = "cancelled"


RETRY_FAILED = Question("Found failed steps. Retry failed steps first?", default=True)
RESUME_LAST = Question("Resume from last completed step?", default=False)
RESUME = Question("Resume installation from where you left off?", default=True)
START_FRESH = Question("Start fresh installation (this will clear previous progress)?", default=False)


def status_lines(run_state: RunState) -> List[str]:
    lines = []
    for name, outcome in run_state.latest().items():
        if outcome.status is StepStatus.COMPLETED:
            lines.append(f"  ✓ {name}")
        else:
            lines.append(f"  ✗ {name} (FAILED)")
    return lines


def decide(run_state: RunState, port: DecisionPort) -> ResumeDirective:
    """Turn a prior run's state into a directive for this run.

    Each question's default prefers keeping progress, so a port that only
    answers defaults yields RETRY_FAILED_FIRST or RESUME_FROM_LAST_COMPLETED.
    """

    if run_state.is_empty:
        return ResumeDirective.FRESH_START

    port.inform("Previous installation detected. Installation status:")
    for line in status_lines(run_state):
        port.inform(line)
    if run_state.last_completed:
        port.inform(f"Last completed step: {run_state.last_completed}")

    if run_state.failed_set:
        if port.confirm(RETRY_FAILED):
            directive = ResumeDirective.RETRY_FAILED_FIRST
        elif port.confirm(RESUME_LAST):
            directive = ResumeDirective.RESUME_FROM_LAST_COMPLETED
        elif port.confirm(START_FRESH):
            directive = ResumeDirective.FRESH_START
        else:
            directive = ResumeDirective.CANCELLED
    else:
        if port.confirm(RESUME):
            directive = ResumeDirective.RESUME_FROM_LAST_COMPLETED
        elif port.confirm(START_FRESH):
            directive = ResumeDirective.FRESH_START
        else:
            directive = ResumeDirective.CANCELLED

    logger.info(
        "Resume decision: %s (completed=%d, failed=%d)",
        directive.value,
        len(run_state.completed_set),
        len(run_state.failed_set),
    )
    return directive
