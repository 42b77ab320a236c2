"""Decision ports: the only place the installer blocks on a human.

The orchestrator and the resume logic ask yes/no questions through a
DecisionPort so they can be driven by a terminal, by defaults when there is no
terminal, or by a scripted answer list in tests.
"""

from __future__ import annotations

import logging
import sys
from collections import deque
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol, TextIO, Tuple

from rich.console import Console
from rich.prompt import Confirm
from rich.text import Text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Question:
    text: str
    default: bool = True
    detail: str = ""


class DecisionPort(Protocol):
    def confirm(self, question: Question) -> bool:
        ...

    def inform(self, message: str) -> None:
        ...


class DefaultDecisionPort:
    """Answers every question with its default; used without a terminal."""

    def confirm(self, question: Question) -> bool:
        logger.info("%s -> %s (non-interactive default)", question.text, "yes" if question.default else "no")
        return question.default

    def inform(self, message: str) -> None:
        logger.info("%s", message)


class TerminalDecisionPort:
    """Blocking y/n prompts on the controlling terminal, drawn with rich.

    Falls back to the question's default when stdin is not a TTY or the
    input stream ends, so a detached run never blocks forever.
    """

    def __init__(
        self,
        *,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        require_tty: bool = True,
    ) -> None:
        self._in = stdin or sys.stdin
        self._out = stdout or sys.stdout
        self._require_tty = require_tty
        self._console = Console(file=self._out, highlight=False)

    def _interactive(self) -> bool:
        if not self._require_tty:
            return True
        isatty = getattr(self._in, "isatty", None)
        return bool(isatty and isatty())

    def confirm(self, question: Question) -> bool:
        if not self._interactive():
            logger.info("No terminal for %r; using default answer", question.text)
            return question.default

        if question.detail:
            self._console.print(question.detail, markup=False, soft_wrap=True)
        try:
            return Confirm.ask(
                Text(question.text),
                default=question.default,
                console=self._console,
                stream=None if self._in is sys.stdin else self._in,
            )
        except EOFError:
            logger.info("Input stream ended at %r; using default answer", question.text)
            return question.default

    def inform(self, message: str) -> None:
        self._console.print(message, markup=False, soft_wrap=True)


class ScriptedDecisionPort:
    """Replays pre-set answers in order; falls back to defaults when exhausted."""

    def __init__(self, answers: Iterable[bool] = ()) -> None:
        self._answers: deque[bool] = deque(answers)
        self.asked: List[Tuple[Question, bool]] = []
        self.messages: List[str] = []

    def confirm(self, question: Question) -> bool:
        answer = self._answers.popleft() if self._answers else question.default
        self.asked.append((question, answer))
        return answer

    def inform(self, message: str) -> None:
        self.messages.append(message)


def default_port(non_interactive: bool = False) -> DecisionPort:
    if non_interactive:
        return DefaultDecisionPort()
    return TerminalDecisionPort()
