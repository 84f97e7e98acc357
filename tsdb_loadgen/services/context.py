"""Wiring of the load test components.

Builds everything one run needs from the settings. The only mutable piece
is the write iteration counter, which belongs to the runtime and is handed
to the core as a plain integer on every write.
"""

import itertools
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

from tsdb_loadgen.core.config import Settings
from tsdb_loadgen.core.logging import get_logger
from tsdb_loadgen.services.clients import (
    RemoteWriteClient,
    load_remote_write_client,
    read_base_url,
    read_headers,
    remote_write_url,
)
from tsdb_loadgen.services.provisioning import ProvisioningPlan
from tsdb_loadgen.services.query import QueryGenerator
from tsdb_loadgen.services.scheduling import ArrivalSchedule, read_schedule, write_schedule
from tsdb_loadgen.services.series import SeriesSpace
from tsdb_loadgen.services.write_batch import WriteBatchBuilder

logger = get_logger(__name__)


@dataclass
class LoadContext:
    """Components shared by all workers of one run.

    Attributes:
        settings: Validated settings.
        plan: Worker pool sizes and target rates.
        space: Series space.
        batches: Write batch builder.
        queries: Query generator.
        write_client: Remote write client.
        write_schedule: Write arrival schedule.
        read_schedule: Read arrival schedule.
        write_url: Remote write endpoint, also the write request name.
        read_url: Base URL of the query API.
        read_headers: Headers sent with every query.
        clock: Wall clock in seconds since epoch.
    """

    settings: Settings
    plan: ProvisioningPlan
    space: SeriesSpace
    batches: WriteBatchBuilder
    queries: QueryGenerator
    write_client: RemoteWriteClient
    write_schedule: ArrivalSchedule
    read_schedule: ArrivalSchedule
    write_url: str
    read_url: str
    read_headers: dict[str, str]
    clock: Callable[[], float] = time.time
    _iterations: Iterator[int] = field(default_factory=itertools.count, repr=False)
    _started_at: float | None = field(default=None, repr=False)

    def next_iteration(self) -> int:
        """Next raw write iteration, shared across all write workers."""
        return next(self._iterations)

    def start(self) -> None:
        """Mark the start of the test; schedules are timed from here."""
        self._started_at = time.monotonic()

    def elapsed(self) -> float:
        """Seconds since ``start``; 0 before the test started."""
        if self._started_at is None:
            return 0.0
        return time.monotonic() - self._started_at

    @property
    def duration_s(self) -> float:
        """Length of the whole test in seconds."""
        return self.settings.duration_min * 60


def build_context(
    settings: Settings,
    write_client: RemoteWriteClient | None = None,
    query_generator: QueryGenerator | None = None,
) -> LoadContext:
    """Assemble the components of a run.

    Args:
        settings: Validated settings.
        write_client: Remote write client; loaded from settings when omitted.
        query_generator: Query generator; a randomly seeded one when omitted.

    Returns:
        LoadContext ready to be bound to the load runtime.

    Raises:
        ConfigurationError: If the remote write client cannot be loaded.
    """
    space = SeriesSpace.from_settings(settings)
    plan = ProvisioningPlan.from_settings(settings)
    if write_client is None:
        write_client = load_remote_write_client(settings)

    context = LoadContext(
        settings=settings,
        plan=plan,
        space=space,
        batches=WriteBatchBuilder(space, ha_replicas=settings.ha_replicas),
        queries=query_generator or QueryGenerator(space),
        write_client=write_client,
        write_schedule=write_schedule(settings),
        read_schedule=read_schedule(settings),
        write_url=remote_write_url(settings),
        read_url=read_base_url(settings),
        read_headers=read_headers(settings),
    )
    logger.info(
        "Load context ready",
        total_series=space.total_series(),
        batches_per_cycle=space.batches_per_cycle(),
        ha_replicas=settings.ha_replicas,
        write_workers=plan.write_workers,
        read_workers=plan.read_workers,
        write_url=context.write_url,
        read_url=context.read_url,
    )
    return context
