import pytest

from archinstaller.logging_utils import reset_logging
from archinstaller.pipeline import Criticality, Step


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    reset_logging()


class Recorder:
    """Step actions that record invocations and return scripted results."""

    def __init__(self, results=None):
        self.calls = []
        self.results = dict(results or {})

    def action(self, name):
        def _run():
            self.calls.append(name)
            result = self.results.get(name, True)
            if isinstance(result, Exception):
                raise result
            return result

        return _run


def build_test_steps(recorder, names, fatal=(), skip_modes=None):
    skip_modes = skip_modes or {}
    return [
        Step(
            name=n,
            ordinal=i,
            title=n.replace("_", " ").title(),
            action=recorder.action(n),
            criticality=Criticality.FATAL if n in fatal else Criticality.RECOVERABLE,
            skippable_in_mode=frozenset(skip_modes.get(n, ())),
        )
        for i, n in enumerate(names, start=1)
    ]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def make_steps():
    return build_test_steps
