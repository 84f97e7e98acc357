"""Synthetic series space and HA replica resolution.

The series space is the fixed universe of series identities written during a
run. Identities are plain integers in ``[0, total_series)``; every identity
maps to one label binding for the whole run. The host label is
not injective: identities collide on ``host<id mod 2500>``, so each
simulated host carries several series.
"""

from collections.abc import Sequence
from dataclasses import dataclass

# Number of distinct agent_hostname values
HOST_CARDINALITY = 2500

DEFAULT_METRIC_NAME = "windows_system_system_up_time"

# Placeholder expanded per series by the remote write client
SERIES_ID_PLACEHOLDER = "${series_id}"


@dataclass(frozen=True)
class ResolvedIteration:
    """A raw scheduler iteration split into batch selector and replica.

    Attributes:
        logical: Iteration used to select the data batch.
        replica: Index of the simulated HA replica sending the batch.
    """

    logical: int
    replica: int


def resolve_iteration(raw_iteration: int, ha_replicas: int) -> ResolvedIteration:
    """Map a raw iteration to its logical iteration and HA replica.

    Each logical batch is sent ``ha_replicas`` times, once per replica,
    before the logical iteration advances.

    Args:
        raw_iteration: Monotonic iteration counter owned by the scheduler.
        ha_replicas: Number of simulated HA replicas (1 disables HA).

    Returns:
        ResolvedIteration with ``raw == logical * ha_replicas + replica``.

    Raises:
        ValueError: If ha_replicas < 1 or raw_iteration is negative.
    """
    if ha_replicas < 1:
        raise ValueError(f"ha_replicas must be >= 1, got {ha_replicas}")
    if raw_iteration < 0:
        raise ValueError(f"raw_iteration must be >= 0, got {raw_iteration}")
    logical, replica = divmod(raw_iteration, ha_replicas)
    return ResolvedIteration(logical=logical, replica=replica)


def replica_tag(replica: int) -> str:
    """Value of the ``__replica__`` label for a simulated HA replica."""
    return f"replica_{replica}"


class SeriesSpace:
    """Universe of synthetic series shared by the write and read paths.

    The write path walks the space in batches of ``write_series_per_request``
    identities; the read path selects hosts from the first
    ``read_series_per_request`` host indices.
    """

    def __init__(
        self,
        write_request_rate: int,
        write_series_per_request: int,
        read_series_per_request: int,
        metric_names: Sequence[str] = (DEFAULT_METRIC_NAME,),
    ) -> None:
        """Initialize SeriesSpace.

        Args:
            write_request_rate: Write requests per scrape interval.
            write_series_per_request: Series carried by one write request.
            read_series_per_request: Host range size queried by one read.
            metric_names: Metric names; one is bound per write slot.

        Raises:
            ValueError: If a size is not positive or no metric name is given.
        """
        if write_request_rate < 1 or write_series_per_request < 1:
            raise ValueError("write rate and series per request must be positive")
        if read_series_per_request < 1:
            raise ValueError("read_series_per_request must be positive")
        if not metric_names:
            raise ValueError("at least one metric name is required")

        self.write_request_rate = write_request_rate
        self.write_series_per_request = write_series_per_request
        self.read_series_per_request = read_series_per_request
        self.metric_names = tuple(metric_names)

    @classmethod
    def from_settings(cls, settings) -> "SeriesSpace":
        """Build the series space described by the load test settings."""
        return cls(
            write_request_rate=settings.write_request_rate,
            write_series_per_request=settings.write_series_per_request,
            read_series_per_request=settings.read_series_per_request,
            metric_names=settings.metric_names,
        )

    def total_series(self) -> int:
        """Total series cardinality of the run."""
        return self.write_request_rate * self.write_series_per_request

    def batches_per_cycle(self) -> int:
        """Number of write batches needed to cover the space once."""
        # total_series is a multiple of write_series_per_request by construction
        return self.total_series() // self.write_series_per_request

    def metric_name_for(self, series_id: int) -> str:
        """Metric name bound to the write slot holding ``series_id``."""
        slot = series_id // self.write_series_per_request
        return self.metric_names[slot % len(self.metric_names)]

    def label_binding(self, series_id: int) -> dict[str, str]:
        """Concrete labels of one series identity.

        Args:
            series_id: Non-negative series identity.

        Returns:
            Mapping of label name to value; identical for identical ids.
        """
        return {
            "__name__": self.metric_name_for(series_id),
            "agent_hostname": f"host{series_id % HOST_CARDINALITY}",
            "agent_data": str(series_id),
        }

    def label_template(self, min_series_id: int, replica: int) -> dict[str, str]:
        """Label template for the batch starting at ``min_series_id``.

        Values holding ``${series_id}`` are expanded per series by the
        remote write client.
        """
        return {
            "__name__": self.metric_name_for(min_series_id),
            "agent_hostname": f"host${{series_id%{HOST_CARDINALITY}}}",
            "__replica__": replica_tag(replica),
            "agent_data": SERIES_ID_PLACEHOLDER,
        }
