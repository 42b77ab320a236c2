from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Tuple

from .errors import StateWriteError

logger = logging.getLogger(__name__)


class StepStatus(Enum):
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class StepOutcome:
    step_name: str
    status: StepStatus
    sequence: int = 0

    def to_line(self) -> str:
        return f"{self.status.value}: {self.step_name}"


@dataclass(frozen=True)
class RunState:
    """Ordered outcomes of the current installation attempt.

    The latest outcome recorded for a step name is authoritative, so
    completed_set and failed_set never overlap.
    """

    entries: Tuple[StepOutcome, ...] = ()
    _latest: Dict[str, StepOutcome] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        latest: Dict[str, StepOutcome] = {}
        for e in self.entries:
            latest[e.step_name] = e
        object.__setattr__(self, "_latest", latest)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def latest(self) -> Dict[str, StepOutcome]:
        """Authoritative outcome per step name, in first-seen order."""
        return dict(self._latest)

    @property
    def completed_set(self) -> FrozenSet[str]:
        return frozenset(n for n, e in self._latest.items() if e.status is StepStatus.COMPLETED)

    @property
    def failed_set(self) -> FrozenSet[str]:
        return frozenset(n for n, e in self._latest.items() if e.status is StepStatus.FAILED)

    @property
    def last_completed(self) -> Optional[str]:
        for e in reversed(self.entries):
            if e.status is StepStatus.COMPLETED:
                return e.step_name
        return None


_TAGGED = re.compile(r"^(COMPLETED|FAILED):\s*(\S.*)$")
# Bare names predate the status tags; they only ever meant "completed".
_LEGACY_NAME = re.compile(r"^[\w.\-]+$")


def parse_line(line: str, sequence: int = 0) -> Optional[StepOutcome]:
    text = line.strip()
    if not text or not text.isprintable():
        return None
    m = _TAGGED.match(text)
    if m:
        return StepOutcome(step_name=m.group(2).strip(), status=StepStatus(m.group(1)), sequence=sequence)
    if _LEGACY_NAME.match(text):
        return StepOutcome(step_name=text, status=StepStatus.COMPLETED, sequence=sequence)
    return None


class RunStateStore:
    """Append-only, line-oriented record of step outcomes backed by one file."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def record(self, step_name: str, status: StepStatus) -> StepOutcome:
        if not step_name or not step_name.strip():
            raise ValueError("step_name cannot be empty")

        outcome = StepOutcome(step_name=step_name.strip(), status=status)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(outcome.to_line() + "\n")
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            raise StateWriteError(f"Could not record {outcome.to_line()!r} in {self.path}: {e}") from e

        logger.debug("State %s <- %s", self.path, outcome.to_line())
        return outcome

    def raw_lines(self) -> List[str]:
        try:
            text = self.path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            return []
        return [ln for ln in text.splitlines() if ln.strip()]

    def load(self) -> RunState:
        """Read back every recorded outcome.

        Never raises: a missing, empty, binary or unreadable file is treated
        as "no prior run".
        """

        if not self.path.exists():
            return RunState()

        try:
            data = self.path.read_bytes()
        except OSError as e:
            logger.warning("State file %s unreadable (%s); ignoring it", self.path, e)
            return RunState()

        if b"\x00" in data:
            logger.warning("State file %s looks binary; ignoring it", self.path)
            return RunState()
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("State file %s is not valid UTF-8; ignoring it", self.path)
            return RunState()

        entries: List[StepOutcome] = []
        bad = 0
        for raw in text.splitlines():
            if not raw.strip():
                continue
            outcome = parse_line(raw, sequence=len(entries))
            if outcome is None:
                bad += 1
                continue
            entries.append(outcome)

        if bad:
            logger.warning("Ignored %d unparseable line(s) in %s", bad, self.path)
        return RunState(entries=tuple(entries))

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
        logger.debug("Cleared state file %s", self.path)
