"""
Log-driven readiness detection.

A launched container has no health endpoint the launcher can rely on, so its
output lines are matched against a ``ReadinessRule``:

    success pattern    -> READY
    exclusion patterns -> INDETERMINATE (known benign "errors")
    failure patterns   -> FAILED
    anything else      -> INDETERMINATE

Exclusions are always checked before failures. The first terminal
classification wins and is never changed by later lines.
"""
import re
from enum import Enum
from typing import Iterable
from typing import NamedTuple
from typing import Pattern


class Readiness(Enum):
    PENDING = 'pending'
    INDETERMINATE = 'indeterminate'
    READY = 'ready'
    FAILED = 'failed'

    @property
    def is_terminal(self) -> bool:
        return self in (Readiness.READY, Readiness.FAILED)


class Classification(NamedTuple):
    state: Readiness
    diagnostic: str | None = None


def _compile(patterns: Iterable[str | Pattern]) -> tuple[Pattern, ...]:
    return tuple(re.compile(pattern) for pattern in patterns)


class ReadinessRule:
    def __init__(self, success: str | Pattern,
                 failures: Iterable[str | Pattern] = (),
                 exclusions: Iterable[str | Pattern] = ()):
        self.success = re.compile(success)
        self.failures = _compile(failures)
        self.exclusions = _compile(exclusions)

    def is_success(self, line: str) -> bool:
        return self.success.search(line) is not None

    def is_excluded(self, line: str) -> bool:
        return any(pattern.search(line) for pattern in self.exclusions)

    def is_failure(self, line: str) -> bool:
        return any(pattern.search(line) for pattern in self.failures)

    def __repr__(self):
        return (f'{type(self).__name__}(success={self.success.pattern!r}, '
                f'failures={[p.pattern for p in self.failures]}, '
                f'exclusions={[p.pattern for p in self.exclusions]})')


def classify(line: str, rule: ReadinessRule, prior_state: Readiness = Readiness.PENDING) -> Classification:
    if prior_state.is_terminal:
        return Classification(prior_state)

    if rule.is_success(line):
        return Classification(Readiness.READY)

    if rule.is_excluded(line):
        return Classification(Readiness.INDETERMINATE, line)

    if rule.is_failure(line):
        return Classification(Readiness.FAILED, line)

    return Classification(Readiness.INDETERMINATE, line)


def exit_message(exit_code: int | None) -> str:
    if exit_code is None:
        return 'process was killed by a signal'
    return f'process exited with code {exit_code}'


class ReadinessMatcher:
    """Per-service classification state, fed from both output channels."""

    def __init__(self, rule: ReadinessRule):
        self.rule = rule
        self.state = Readiness.PENDING
        self.last_line: str | None = None
        self._result: Classification | None = None

    @property
    def result(self) -> Classification | None:
        return self._result

    def feed(self, line: str) -> Classification:
        if self.state.is_terminal:
            return self._result

        if not line.strip():
            return Classification(self.state)

        classification = classify(line, self.rule, self.state)
        self.state = classification.state
        if classification.state == Readiness.INDETERMINATE:
            self.last_line = classification.diagnostic
        elif classification.state.is_terminal:
            self.last_line = None
            self._result = classification
        return classification

    def process_exited(self, exit_code: int | None) -> Classification:
        if self.state.is_terminal:
            return self._result

        self.state = Readiness.FAILED
        self._result = Classification(Readiness.FAILED, self.last_line or exit_message(exit_code))
        return self._result
