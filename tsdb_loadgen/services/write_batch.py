"""Write batch construction.

A batch is the description of one remote write request: which slice of the
series space it carries, the label template for that slice, and the sample
value and timestamp. Batches cyclically tile the series space; after
``batches_per_cycle`` logical iterations the same id range repeats with a
fresh timestamp.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from tsdb_loadgen.services.series import SeriesSpace, resolve_iteration

# Remote write statuses accepted as success
WRITE_SUCCESS_STATUSES = frozenset({200, 202})


@dataclass(frozen=True)
class WriteBatch:
    """One remote write request, before encoding.

    Attributes:
        time_ms: Sample timestamp in milliseconds since epoch.
        sample_value: Sample value shared by every series of the batch.
        min_series_id: First series id of the batch (inclusive).
        max_series_id: Last series id of the batch (exclusive).
        labels: Label template expanded per series by the write client.
        replica_tag: Value of the ``__replica__`` label.
    """

    time_ms: int
    sample_value: int
    min_series_id: int
    max_series_id: int
    labels: dict[str, str] = field(default_factory=dict)
    replica_tag: str = "replica_0"

    @property
    def series_count(self) -> int:
        """Number of series carried by the batch."""
        return self.max_series_id - self.min_series_id

    def submission(self) -> dict[str, Any]:
        """Keyword arguments for ``RemoteWriteClient.store_from_templates``."""
        return {
            "min_value": self.sample_value,
            "max_value": self.sample_value,
            "timestamp_ms": self.time_ms,
            "min_series_id": self.min_series_id,
            "max_series_id": self.max_series_id,
            "labels": dict(self.labels),
        }


class WriteBatchBuilder:
    """Builds the batch for a raw write iteration.

    The builder holds no mutable state: the iteration counter belongs to the
    scheduler and the clock is only read, so concurrent workers can share one
    builder.
    """

    def __init__(
        self,
        space: SeriesSpace,
        ha_replicas: int = 1,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize WriteBatchBuilder.

        Args:
            space: Series space to tile.
            ha_replicas: Number of simulated HA replicas.
            clock: Source of the current time in seconds since epoch.
        """
        if ha_replicas < 1:
            raise ValueError(f"ha_replicas must be >= 1, got {ha_replicas}")
        self._space = space
        self._ha_replicas = ha_replicas
        self._clock = clock

    def slot_range(self, logical_iteration: int) -> tuple[int, int]:
        """Series id range ``[min, max)`` selected by a logical iteration."""
        per_request = self._space.write_series_per_request
        slot = logical_iteration % self._space.batches_per_cycle()
        min_series_id = slot * per_request
        return min_series_id, min_series_id + per_request

    def build(self, raw_iteration: int, now: float | None = None) -> WriteBatch:
        """Build the batch for a raw scheduler iteration.

        Args:
            raw_iteration: Monotonic iteration counter owned by the scheduler.
            now: Current time in seconds; read from the clock when omitted.

        Returns:
            WriteBatch for the resolved logical iteration and replica.
        """
        resolved = resolve_iteration(raw_iteration, self._ha_replicas)
        min_series_id, max_series_id = self.slot_range(resolved.logical)
        if now is None:
            now = self._clock()

        labels = self._space.label_template(min_series_id, resolved.replica)
        # Seconds since epoch grow like a counter and compress like one
        return WriteBatch(
            time_ms=int(now * 1000),
            sample_value=int(now),
            min_series_id=min_series_id,
            max_series_id=max_series_id,
            labels=labels,
            replica_tag=labels["__replica__"],
        )


def write_succeeded(status: int) -> bool:
    """Whether a remote write status counts as a successful write."""
    return status in WRITE_SUCCESS_STATUSES
