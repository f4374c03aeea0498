"""Event reconstruction: pairs ``testStart`` / ``testDone`` events into durations.

Test runners such as ``dart test --reporter json`` write one JSON object per
line.  Start and completion events are matched by numeric test id, and the
difference of their ``time`` fields (milliseconds) is the test duration.

Runner logs are noisy: headers, progress markers and interleaved non-JSON
output are expected and are skipped without logging each line.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────────

_TEST_START = "testStart"
_TEST_DONE = "testDone"
_LOADING_PREFIX = "loading "
_MARKER_PREFIX = "["
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


class LineOutcome(Enum):
    """What happened to a single log line."""

    APPLIED = "applied"
    IGNORED_IRRELEVANT = "ignored_irrelevant"
    IGNORED_MALFORMED = "ignored_malformed"


@dataclass(frozen=True)
class InFlightTest:
    """A test whose start event has been seen."""

    name: str
    start_time: int
    groups: tuple[str, ...] = ()


class _MalformedEventError(Exception):
    """A relevant event is missing a field or carries a wrong-typed one."""


# ── Field extraction ─────────────────────────────────────────────


def _require_int(container: dict[str, Any], key: str) -> int:
    value = container.get(key)
    # bool is an int subclass but never a valid id or timestamp
    if not isinstance(value, int) or isinstance(value, bool):
        raise _MalformedEventError(key)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise _MalformedEventError(key)
    return value


def _require_str(container: dict[str, Any], key: str) -> str:
    value = container.get(key)
    if not isinstance(value, str):
        raise _MalformedEventError(key)
    return value


def _require_dict(container: dict[str, Any], key: str) -> dict[str, Any]:
    value = container.get(key)
    if not isinstance(value, dict):
        raise _MalformedEventError(key)
    return value


def coerce_group_id(value: object) -> str:
    """Return the canonical string form of a group id.

    Strings are returned unchanged; anything else uses its compact JSON
    spelling (``2`` -> ``"2"``, ``True`` -> ``"true"``, ``[1, 2]`` -> ``"[1,2]"``).
    """
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"))


def _extract_groups(test: dict[str, Any]) -> tuple[str, ...]:
    raw = test.get("groupIDs")
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise _MalformedEventError("groupIDs")
    return tuple(coerce_group_id(item) for item in raw)


# ── Reconstruction ───────────────────────────────────────────────


@dataclass
class Reconstruction:
    """State of one pass over an event log.

    Holds the in-flight tests keyed by id, the resolved durations keyed by
    test name and per-outcome line counts.  A fresh instance is used for
    every log, so no state leaks between runs.

    Two completed tests with the same name share one ``durations`` entry:
    the one processed last wins.  ``duplicate_names`` counts how often that
    happened.
    """

    in_flight: dict[int, InFlightTest] = field(default_factory=dict)
    durations: dict[str, int] = field(default_factory=dict)
    groups: dict[str, tuple[str, ...]] = field(default_factory=dict)
    outcomes: Counter[LineOutcome] = field(default_factory=Counter)
    duplicate_names: int = 0

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> Reconstruction:
        """Build a reconstruction by applying *lines* in order."""
        state = cls()
        for line in lines:
            state.apply_line(line)
        logger.debug(
            "Reconstructed %d durations (%d applied, %d irrelevant, %d malformed lines)",
            len(state.durations),
            state.outcomes[LineOutcome.APPLIED],
            state.outcomes[LineOutcome.IGNORED_IRRELEVANT],
            state.outcomes[LineOutcome.IGNORED_MALFORMED],
        )
        return state

    def apply_line(self, line: str) -> LineOutcome:
        """Apply one raw log line and record its outcome."""
        outcome = self._apply(line)
        self.outcomes[outcome] += 1
        return outcome

    def _apply(self, line: str) -> LineOutcome:
        if not line or line.startswith(_MARKER_PREFIX):
            return LineOutcome.IGNORED_IRRELEVANT

        try:
            event = json.loads(line)
        except (json.JSONDecodeError, RecursionError):
            return LineOutcome.IGNORED_MALFORMED
        if not isinstance(event, dict):
            return LineOutcome.IGNORED_MALFORMED

        event_type = event.get("type")
        try:
            if event_type == _TEST_START:
                return self._apply_start(event)
            if event_type == _TEST_DONE:
                return self._apply_done(event)
        except _MalformedEventError:
            return LineOutcome.IGNORED_MALFORMED
        return LineOutcome.IGNORED_IRRELEVANT

    def _apply_start(self, event: dict[str, Any]) -> LineOutcome:
        test = _require_dict(event, "test")
        test_id = _require_int(test, "id")
        name = _require_str(test, "name")
        if name.startswith(_LOADING_PREFIX):
            return LineOutcome.IGNORED_IRRELEVANT

        start_time = _require_int(event, "time")
        groups = _extract_groups(test)
        self.in_flight[test_id] = InFlightTest(name=name, start_time=start_time, groups=groups)
        return LineOutcome.APPLIED

    def _apply_done(self, event: dict[str, Any]) -> LineOutcome:
        test_id = _require_int(event, "testID")
        record = self.in_flight.get(test_id)
        if record is None:
            return LineOutcome.IGNORED_IRRELEVANT

        end_time = _require_int(event, "time")
        if record.name in self.durations:
            self.duplicate_names += 1
        self.durations[record.name] = end_time - record.start_time
        self.groups[record.name] = record.groups
        return LineOutcome.APPLIED


def reconstruct(lines: Iterable[str]) -> dict[str, int]:
    """Return a mapping of test name to duration in milliseconds.

    Lines are applied in order.  Empty lines, ``[``-prefixed markers,
    non-JSON output, unrelated events and completions without a matching
    start are skipped.  Returns an empty dict when nothing resolved.
    """
    return Reconstruction.from_lines(lines).durations
