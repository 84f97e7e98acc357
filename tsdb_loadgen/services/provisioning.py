"""Worker pool sizing for the write and read paths.

Empirical estimates: one worker per 8500 series of write throughput and
five workers per query per second on the read path.
"""

import math
from dataclasses import dataclass

SERIES_PER_WRITE_WORKER = 8500
READ_WORKERS_PER_QUERY_RATE = 5


def write_worker_pool_size(total_series: int) -> int:
    """Workers needed to push ``total_series`` every scrape interval."""
    return math.ceil(total_series / SERIES_PER_WRITE_WORKER)


def read_worker_pool_size(read_request_rate: int) -> int:
    """Workers needed to sustain ``read_request_rate`` queries per second."""
    return read_request_rate * READ_WORKERS_PER_QUERY_RATE


def write_target_rate(request_rate: int, ha_replicas: int) -> int:
    """Effective write requests per scrape interval after HA fan-out."""
    return request_rate * ha_replicas


@dataclass(frozen=True)
class ProvisioningPlan:
    """Capacity handed to the load runtime.

    Attributes:
        write_workers: Concurrent remote write workers.
        read_workers: Concurrent query workers.
        write_rate: Write requests per scrape interval, HA fan-out included.
        write_time_unit_s: Time unit of ``write_rate`` in seconds.
        read_rate: Queries per second.
    """

    write_workers: int
    read_workers: int
    write_rate: int
    write_time_unit_s: int
    read_rate: int

    @classmethod
    def from_settings(cls, settings) -> "ProvisioningPlan":
        """Derive the plan from the load test settings."""
        return cls(
            write_workers=write_worker_pool_size(settings.total_series),
            read_workers=read_worker_pool_size(settings.read_request_rate),
            write_rate=write_target_rate(
                settings.write_request_rate, settings.ha_replicas
            ),
            write_time_unit_s=settings.scrape_interval_seconds,
            read_rate=settings.read_request_rate,
        )

    @property
    def total_workers(self) -> int:
        """Workers across both paths."""
        return self.write_workers + self.read_workers
