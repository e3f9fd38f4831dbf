"""Suite and document totals."""

import time
from typing import Callable, Iterable, Optional

from .models import AggregateCounts
from .normalizer import NormalizedCase, NormalizedSuite

# Returns the current time in epoch milliseconds
Clock = Callable[[], float]


def system_clock() -> float:
    return time.time() * 1000


def seconds(milliseconds: float) -> float:
    return round(milliseconds / 1000, 3)


def aggregate_cases(cases: Iterable[NormalizedCase]) -> AggregateCounts:
    counts = AggregateCounts()
    total_ms = 0
    for case in cases:
        if case.counts_as_test:
            counts.tests += 1
        if case.is_failure:
            counts.failures += 1
        elif case.is_error:
            counts.errors += 1
        elif case.status.is_skipped:
            counts.skipped += 1
        total_ms += case.duration
    counts.time = seconds(total_ms)
    return counts


def aggregate_suite(suite: NormalizedSuite) -> AggregateCounts:
    return aggregate_cases(suite.cases)


def aggregate_document(suite_counts: Iterable[AggregateCounts], start_time: float,
                       clock: Optional[Clock] = None) -> AggregateCounts:
    """
    Sum suite totals into document totals.

    The document time is the wall-clock time since the run started (suites
    usually run in parallel, so it is not the sum of the suite times). When
    the report has no start time the suite times are summed instead.
    """
    clock = clock or system_clock
    counts = AggregateCounts()
    suite_time = 0.0
    for c in suite_counts:
        counts.tests += c.tests
        counts.failures += c.failures
        counts.errors += c.errors
        counts.skipped += c.skipped
        suite_time += c.time

    if start_time:
        counts.time = seconds(max(0, clock() - start_time))
    else:
        counts.time = round(suite_time, 3)
    return counts
