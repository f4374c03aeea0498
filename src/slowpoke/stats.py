"""Descriptive statistics over test durations."""

from __future__ import annotations

import statistics
from dataclasses import dataclass
from typing import TYPE_CHECKING

from slowpoke.errors import NoTestDataError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


@dataclass(frozen=True)
class TestStatistics:
    """Aggregate timing statistics for one run (milliseconds)."""

    __test__ = False  # not a pytest test class

    mean: float
    median: float
    standard_dev: float
    """Population standard deviation (divides by N)."""

    total_duration: int
    slowest_test: int
    fastest_test: int
    count: int


def compute_statistics(durations: Iterable[int]) -> TestStatistics:
    """Compute mean, median, population std dev, total, max and min.

    Raises:
        NoTestDataError: If *durations* is empty.
    """
    values = sorted(durations)
    if not values:
        raise NoTestDataError

    mean = statistics.fmean(values)

    return TestStatistics(
        mean=mean,
        median=float(statistics.median(values)),
        standard_dev=statistics.pstdev(values, mu=mean),
        total_duration=sum(values),
        slowest_test=values[-1],
        fastest_test=values[0],
        count=len(values),
    )


def rank_durations(durations: Mapping[str, int]) -> list[tuple[str, int]]:
    """Return ``(name, duration)`` pairs, slowest first.

    Ties keep the order in which the names were first recorded.
    """
    return sorted(durations.items(), key=lambda item: item[1], reverse=True)
