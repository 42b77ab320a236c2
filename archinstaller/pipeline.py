from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Sequence, Set

from .errors import ErrorAggregator, PipelineAborted, StateWriteError, StepTimeout
from .progress import ProgressReporter
from .prompts import DecisionPort, Question
from .resume import ResumeDirective
from .run_state import RunState, RunStateStore, StepStatus
from .timing import StepDeadline, TimingRecord

logger = logging.getLogger(__name__)


class Criticality(Enum):
    FATAL = "fatal"
    RECOVERABLE = "recoverable"


class StepDecision(Enum):
    RUN = "run"
    SKIP = "skip"
    SKIP_BY_MODE = "skip_by_mode"


@dataclass(frozen=True)
class Step:
    """A named, ordered unit of work.

    action is a zero-argument callable; only the truthiness of its return
    value matters.
    """

    name: str
    ordinal: int
    action: Callable[[], Any]
    title: str = ""
    criticality: Criticality = Criticality.RECOVERABLE
    skippable_in_mode: FrozenSet[str] = frozenset()
    timeout: Optional[float] = None

    @property
    def label(self) -> str:
        return self.title or self.name


@dataclass
class PipelineResult:
    ran: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    skipped_by_mode: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    durations: Dict[str, float] = field(default_factory=dict)

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)


def validate_steps(steps: Sequence[Step]) -> None:
    seen: Set[str] = set()
    for i, s in enumerate(steps, start=1):
        if not s.name:
            raise ValueError(f"Step at position {i} has no name")
        if s.name in seen:
            raise ValueError(f"Duplicate step name: {s.name}")
        if s.ordinal != i:
            raise ValueError(f"Step {s.name} has ordinal {s.ordinal}, expected {i}")
        seen.add(s.name)


class Orchestrator:
    """Runs the fixed step pipeline under a resume directive.

    Steps always run in ordinal order. Retrying failed steps means they are
    not skipped; they are never moved to the front.

    A step timeout arms `deadline` for the duration of the action. Actions
    enforce it by passing the remaining time to their commands, so a step
    that times out has stopped before the next one begins.
    """

    def __init__(
        self,
        *,
        steps: Sequence[Step],
        store: RunStateStore,
        port: DecisionPort,
        errors: ErrorAggregator,
        timing: Optional[TimingRecord] = None,
        progress: Optional[ProgressReporter] = None,
        mode: str = "standard",
        persist: bool = True,
        default_timeout: Optional[float] = None,
        deadline: Optional[StepDeadline] = None,
    ) -> None:
        validate_steps(steps)
        self.steps = list(steps)
        self.store = store
        self.port = port
        self.errors = errors
        self.timing = timing or TimingRecord()
        self.progress = progress or ProgressReporter(len(self.steps), self.timing)
        self.mode = mode
        self.persist = persist
        self.default_timeout = default_timeout
        self.deadline = deadline or StepDeadline()

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    def decide_step(self, step: Step, directive: ResumeDirective, run_state: RunState) -> StepDecision:
        if self.mode in step.skippable_in_mode:
            return StepDecision.SKIP_BY_MODE
        if directive in (ResumeDirective.RESUME_FROM_LAST_COMPLETED, ResumeDirective.RETRY_FAILED_FIRST):
            if step.name in run_state.completed_set:
                return StepDecision.SKIP
        return StepDecision.RUN

    def run(self, directive: ResumeDirective, run_state: Optional[RunState] = None) -> PipelineResult:
        if directive is ResumeDirective.CANCELLED:
            raise ValueError("A cancelled run has no pipeline to execute")

        prior = run_state or RunState()
        if directive is ResumeDirective.FRESH_START:
            prior = RunState()

        names = {s.name for s in self.steps}
        unknown = (prior.completed_set | prior.failed_set) - names
        if unknown:
            logger.info("Ignoring state entries for unknown steps: %s", ", ".join(sorted(unknown)))

        completed: Set[str] = set(prior.completed_set & names)
        if directive is ResumeDirective.RETRY_FAILED_FIRST and prior.failed_set & names:
            logger.info("Will retry failed steps: %s", ", ".join(s.name for s in self.steps if s.name in prior.failed_set))

        plan = [(step, self.decide_step(step, directive, prior)) for step in self.steps]
        to_run = sum(1 for _, d in plan if d is StepDecision.RUN)

        result = PipelineResult()
        for step, decision in plan:
            if decision is StepDecision.SKIP_BY_MODE:
                self.progress.skipped_by_mode(step.ordinal, step.label, self.mode)
                result.skipped_by_mode.append(step.name)
                continue
            if decision is StepDecision.SKIP:
                self.progress.skipped(step.ordinal, step.label)
                result.skipped.append(step.name)
                continue

            ok, duration = self._execute(step, remaining_steps=to_run)
            to_run -= 1
            result.ran.append(step.name)
            result.durations[step.name] = duration
            if ok:
                completed.add(step.name)
            else:
                completed.discard(step.name)
                result.failed.append(step.name)

            self.progress.step_done(
                ok=ok,
                name=step.name,
                duration=duration,
                completed=len(completed),
                remaining_steps=to_run,
            )

            if not ok:
                self._handle_failure(step)

        return result

    def _execute(self, step: Step, remaining_steps: int) -> tuple[bool, float]:
        self.progress.step_header(step.ordinal, step.label, remaining_steps=remaining_steps)
        timeout = step.timeout if step.timeout is not None else self.default_timeout

        self.timing.start(step.name)
        detail = ""
        if timeout:
            self.deadline.arm(timeout)
        try:
            ok = bool(step.action())
        except StepTimeout as e:
            ok = False
            detail = f"{step.label} timed out after {timeout:g}s" if timeout else f"{step.label} failed: {e}"
        except Exception as e:
            logger.exception("Step %s raised", step.name)
            ok, detail = False, f"{step.label} failed: {e}"
        finally:
            if timeout and self.deadline.expired and not detail:
                logger.warning("%s ran past its %gs budget", step.label, timeout)
            self.deadline.disarm()
        duration = self.timing.finish(step.name)

        if not ok:
            message = detail or f"{step.label} failed"
            logger.error("%s", message)
            self.errors.report(message)

        self._record(step.name, StepStatus.COMPLETED if ok else StepStatus.FAILED)
        return ok, duration

    def _record(self, name: str, status: StepStatus) -> None:
        if not self.persist:
            logger.debug("Not persisting %s: %s", status.value, name)
            return
        try:
            self.store.record(name, status)
        except StateWriteError as e:
            logger.error("%s", e)
            self.errors.report(str(e))
            raise

    def _handle_failure(self, step: Step) -> None:
        if step.criticality is Criticality.RECOVERABLE:
            logger.warning("%s failed but continuing installation", step.label)
            return

        question = Question(
            f"{step.label} failed. Continue with installation?",
            default=True,
            detail="This may cause issues with subsequent steps.",
        )
        if self.port.confirm(question):
            logger.warning("Continuing installation despite %s failure", step.label)
            return

        logger.error("Installation stopped due to %s failure", step.label)
        raise PipelineAborted(step.name, f"Installation stopped due to {step.label} failure")
