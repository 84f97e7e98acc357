"""Randomized PromQL query generation.

Queries select a random, non-contiguous subset of hosts through a regex
alternation whose size is bounded by ``read_series_per_request``. Three
query shapes are drawn from a cumulative probability table:

- difference ratio (50%): ``(Q1-Q2)/(1024*1024)``, a memory delta
- rate (30%): ``rate(Q[<k>m]) * 1000``
- single selector (20%): ``Q``

An alternation can come out empty; the resulting query matches no series
and is still sent, modelling the occasional zero-result query.
"""

import random
from collections import deque
from collections.abc import Callable

from tsdb_loadgen.core.logging import get_logger
from tsdb_loadgen.core.metrics import QUERY_SHAPES
from tsdb_loadgen.services.series import SeriesSpace

logger = get_logger(__name__)

HOST_INCLUDE_PROBABILITY = 0.7
HOST_PREPEND_PROBABILITY = 0.5
LABEL_FILTER_PROBABILITY = 0.5

# agent_data!~"<d>.*" draws its prefix digit from [0, LABEL_FILTER_DIGITS)
LABEL_FILTER_DIGITS = 6
MAX_RATE_WINDOW_MIN = 10


class QueryGenerator:
    """Generates queries over the read slice of a series space.

    The random source is injected so that tests can pin every draw. The
    generator keeps no state between calls besides the random source.
    """

    def __init__(
        self,
        space: SeriesSpace,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize QueryGenerator.

        Args:
            space: Series space the queries select from.
            rng: Random source; a fresh ``random.Random`` when omitted.
        """
        self._space = space
        self._rng = rng or random.Random()
        # Cumulative thresholds evaluated against a single draw
        self._shapes: tuple[tuple[float, str, Callable[[], str]], ...] = (
            (0.5, "difference_ratio", self.difference_ratio_query),
            (0.8, "rate", self.rate_query),
            (1.0, "single", self.single_query),
        )

    @property
    def shape_table(self) -> tuple[tuple[float, str], ...]:
        """The (cumulative threshold, shape name) table."""
        return tuple((threshold, name) for threshold, name, _ in self._shapes)

    def generate(self) -> str:
        """Generate one query string."""
        draw = self._rng.random()
        for threshold, name, build in self._shapes:
            if draw < threshold:
                break
        query = build()
        QUERY_SHAPES.labels(shape=name).inc()
        logger.debug("Generated query", shape=name, query=query)
        return query

    def difference_ratio_query(self) -> str:
        """Difference of two selectors scaled to MiB."""
        return f"({self.single_query()}-{self.single_query()})/(1024*1024)"

    def rate_query(self) -> str:
        """Per-second rate over a random 1-10 minute window, scaled by 1000."""
        selector = self.single_query()
        window = self._rng.randint(1, MAX_RATE_WINDOW_MIN)
        return f"rate({selector}[{window}m]) * 1000"

    def single_query(self, boundary: int | None = None) -> str:
        """Single selector over a random host subset.

        The host range ``[0, read_series_per_request]`` is split at a random
        boundary; the boundary host itself is left out and each half is
        combined independently.

        Args:
            boundary: Split index; drawn uniformly from
                ``[0, read_series_per_request)`` when omitted.

        Returns:
            A selector such as ``metric{agent_hostname=~"host1|host7"}``.
        """
        use_label_filter = self._rng.random() < LABEL_FILTER_PROBABILITY
        prefix = self._rng.randrange(LABEL_FILTER_DIGITS)
        metric_name = self._rng.choice(self._space.metric_names)
        upper = self._space.read_series_per_request
        if boundary is None:
            boundary = self._rng.randrange(upper)

        halves = (
            self.combine_hosts(0, boundary),
            self.combine_hosts(boundary + 1, upper + 1),
        )
        hosts = "|".join(half for half in halves if half)

        if use_label_filter:
            return (
                f'{metric_name}{{agent_hostname=~"{hosts}", '
                f'agent_data!~"{prefix}.*"}}'
            )
        return f'{metric_name}{{agent_hostname=~"{hosts}"}}'

    def combine_hosts(self, start: int, end: int) -> str:
        """Random alternation of hosts with index in ``[start, end)``.

        Each host is kept with probability 0.7 and then either prepended or
        appended, so the order of alternatives is random.

        Returns:
            ``|``-joined host names without a trailing separator; may be empty.
        """
        combined: deque[str] = deque()
        for i in range(start, end):
            prepend = self._rng.random() < HOST_PREPEND_PROBABILITY
            include = self._rng.random() < HOST_INCLUDE_PROBABILITY
            if not include:
                continue
            if prepend:
                combined.appendleft(f"host{i}")
            else:
                combined.append(f"host{i}")
        return "|".join(combined)
