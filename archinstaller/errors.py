from __future__ import annotations

from typing import Iterator, List


class InstallerError(RuntimeError):
    """Base for errors that end an installer run."""


class StateWriteError(InstallerError):
    """The run-state file could not be appended to."""


class PreflightError(InstallerError):
    """A system requirement check failed before any step ran."""


class StepTimeout(InstallerError):
    """The running step used up its time budget."""


class PipelineAborted(InstallerError):
    def __init__(self, step_name: str, message: str | None = None) -> None:
        super().__init__(message or f"Installation stopped after {step_name} failed")
        self.step_name = step_name


class ErrorAggregator:
    """Ordered collection of human-readable error messages for the final summary.

    One instance per run. Messages are kept verbatim and never deduplicated.
    """

    def __init__(self) -> None:
        self._errors: List[str] = []

    def report(self, message: str) -> None:
        self._errors.append(message)

    def has_errors(self) -> bool:
        return bool(self._errors)

    def all(self) -> List[str]:
        return list(self._errors)

    def __len__(self) -> int:
        return len(self._errors)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._errors))
