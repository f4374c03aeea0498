"""Analysis pipeline: raw log lines -> durations -> statistics."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from slowpoke.errors import NoTestDataError
from slowpoke.events import LineOutcome, Reconstruction
from slowpoke.stats import TestStatistics, compute_statistics, rank_durations

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class GroupSummary:
    """Tests and summed duration for one group id."""

    group_id: str
    test_count: int = 0
    total_duration: int = 0


@dataclass
class AnalysisResult:
    """Everything the reporters need from one log."""

    durations: dict[str, int]
    statistics: TestStatistics
    ranked: list[tuple[str, int]]
    groups: dict[str, tuple[str, ...]] = field(default_factory=dict)
    outcomes: dict[LineOutcome, int] = field(default_factory=dict)
    duplicate_names: int = 0

    def slow_tests(self, threshold_ms: int) -> list[tuple[str, int]]:
        """Return ranked tests strictly slower than *threshold_ms*."""
        return [(name, duration) for name, duration in self.ranked if duration > threshold_ms]

    def group_summaries(self) -> list[GroupSummary]:
        """Summarize durations per group id, slowest group first."""
        summaries: dict[str, GroupSummary] = {}
        for name, duration in self.durations.items():
            for group_id in self.groups.get(name, ()):
                summary = summaries.setdefault(group_id, GroupSummary(group_id=group_id))
                summary.test_count += 1
                summary.total_duration += duration
        return sorted(summaries.values(), key=lambda s: s.total_duration, reverse=True)


def read_log(path: Path) -> list[str]:
    """Read *path* and return its lines.

    Undecodable bytes are replaced rather than rejected.  ``OSError``
    propagates to the caller.
    """
    return path.read_text(encoding="utf-8", errors="replace").splitlines()


def analyze(lines: Iterable[str]) -> AnalysisResult:
    """Reconstruct durations from *lines* and compute statistics.

    Raises:
        NoTestDataError: If no test duration could be resolved.
    """
    state = Reconstruction.from_lines(lines)
    if not state.durations:
        raise NoTestDataError

    if state.duplicate_names:
        logger.warning(
            "%d completed tests reused an earlier test name; only the last duration is kept",
            state.duplicate_names,
        )

    return AnalysisResult(
        durations=state.durations,
        statistics=compute_statistics(state.durations.values()),
        ranked=rank_durations(state.durations),
        groups=state.groups,
        outcomes=dict(state.outcomes),
        duplicate_names=state.duplicate_names,
    )
