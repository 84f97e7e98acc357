"""SLA thresholds evaluated at the end of a load test.

- 99.9% of writes succeed
- 99.9% of writes take less than 10s
- 99.9% of queries succeed
- queries take less than 2s on average
"""

import operator
from collections.abc import Callable
from dataclasses import dataclass

_COMPARATORS: dict[str, Callable[[float, float], bool]] = {
    ">": operator.gt,
    "<": operator.lt,
}


@dataclass(frozen=True)
class Threshold:
    """A bound on one observed statistic.

    Attributes:
        name: Statistic the bound applies to.
        comparator: ``>`` or ``<``.
        limit: Bound value.
    """

    name: str
    comparator: str
    limit: float

    def passes(self, value: float) -> bool:
        """Whether ``value`` satisfies the bound."""
        return _COMPARATORS[self.comparator](value, self.limit)

    def __str__(self) -> str:
        return f"{self.name} {self.comparator} {self.limit:g}"


@dataclass(frozen=True)
class ThresholdResult:
    """Outcome of one threshold; ``observed`` is None when nothing ran."""

    threshold: Threshold
    observed: float | None

    @property
    def passed(self) -> bool:
        # Nothing observed means nothing breached
        return self.observed is None or self.threshold.passes(self.observed)


WRITE_CHECK_RATE = "write_check_rate"
WRITE_P999_MS = "write_p999_ms"
READ_CHECK_RATE = "read_check_rate"
READ_AVG_MS = "read_avg_ms"

DEFAULT_THRESHOLDS = (
    Threshold(WRITE_CHECK_RATE, ">", 0.999),
    Threshold(WRITE_P999_MS, "<", 10000),
    Threshold(READ_CHECK_RATE, ">", 0.999),
    Threshold(READ_AVG_MS, "<", 2000),
)


def evaluate_thresholds(
    observed: dict[str, float | None],
    thresholds: tuple[Threshold, ...] = DEFAULT_THRESHOLDS,
) -> list[ThresholdResult]:
    """Compare observed statistics against the thresholds.

    Args:
        observed: Statistic name to observed value (None or missing when
            the statistic has no samples).
        thresholds: Thresholds to evaluate.

    Returns:
        One result per threshold, in order.
    """
    return [ThresholdResult(t, observed.get(t.name)) for t in thresholds]


def breached(results: list[ThresholdResult]) -> list[ThresholdResult]:
    """Results that failed their threshold."""
    return [result for result in results if not result.passed]
