"""Check recording for write and read outcomes.

Every invocation ends in exactly one check tagged ``type=write`` or
``type=read``. The SLA thresholds are computed from these counters.
"""

from enum import Enum
from typing import Any

from prometheus_client import REGISTRY

from tsdb_loadgen.core.metrics import CHECKS, NAMESPACE


class CheckType(str, Enum):
    """Check tag values."""

    WRITE = "write"
    READ = "read"


def record_check(check_type: CheckType, passed: bool) -> bool:
    """Count one check outcome.

    Returns:
        The outcome, so callers can chain on it.
    """
    CHECKS.labels(type=check_type.value, result="pass" if passed else "fail").inc()
    return passed


def check_counts(check_type: CheckType) -> tuple[float, float]:
    """Passed and failed checks of a type recorded so far in this process."""
    name = f"{NAMESPACE}_checks_total"
    passed = REGISTRY.get_sample_value(name, {"type": check_type.value, "result": "pass"})
    failed = REGISTRY.get_sample_value(name, {"type": check_type.value, "result": "fail"})
    return passed or 0.0, failed or 0.0


def check_rate(check_type: CheckType) -> float | None:
    """Fraction of passed checks, or None when nothing was checked."""
    passed, failed = check_counts(check_type)
    total = passed + failed
    if total == 0:
        return None
    return passed / total


def query_result_is_vector(payload: Any) -> bool:
    """Whether a decoded query response is a successful instant vector."""
    if not isinstance(payload, dict) or payload.get("status") != "success":
        return False
    data = payload.get("data")
    return isinstance(data, dict) and data.get("resultType") == "vector"
