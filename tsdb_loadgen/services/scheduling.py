"""Arrival-rate schedules for the write and read paths.

A schedule is a list of stages, each ramping linearly from the previous
target to its own target over its duration, the same model as a ramping
arrival-rate executor. Rates are expressed per ``time_unit_s`` and exposed
as iterations per second.
"""

import math
from dataclasses import dataclass

IDLE_WAIT_S = 1.0


@dataclass(frozen=True)
class Stage:
    """One ramp segment.

    Attributes:
        target: Rate reached at the end of the stage, per time unit.
        duration_s: Length of the stage in seconds (0 jumps to the target).
    """

    target: float
    duration_s: float


class ArrivalSchedule:
    """Piecewise-linear iteration rate over the test duration."""

    def __init__(
        self,
        stages: list[Stage],
        time_unit_s: float = 1.0,
        start_rate: float = 0.0,
    ) -> None:
        if time_unit_s <= 0:
            raise ValueError("time_unit_s must be positive")
        if any(stage.duration_s < 0 or stage.target < 0 for stage in stages):
            raise ValueError("stage targets and durations must be non-negative")
        self.stages = list(stages)
        self.time_unit_s = time_unit_s
        self.start_rate = start_rate

    @property
    def duration_s(self) -> float:
        """Total schedule length in seconds."""
        return sum(stage.duration_s for stage in self.stages)

    def rate_at(self, elapsed_s: float) -> float | None:
        """Iterations per second at ``elapsed_s`` into the test.

        Returns:
            The interpolated rate, or None once the schedule is over.
        """
        if elapsed_s < 0:
            elapsed_s = 0.0
        previous = self.start_rate
        offset = 0.0
        for stage in self.stages:
            end = offset + stage.duration_s
            if elapsed_s < end:
                progress = (elapsed_s - offset) / stage.duration_s
                rate = previous + (stage.target - previous) * progress
                return rate / self.time_unit_s
            previous = stage.target
            offset = end
        return None

    def time_after(self, elapsed_s: float, arrivals: float) -> float | None:
        """Elapsed time at which ``arrivals`` more iterations are due.

        Integrates the piecewise-linear rate from ``elapsed_s`` on.

        Args:
            elapsed_s: Seconds into the test to count from.
            arrivals: Number of iterations to wait for.

        Returns:
            Seconds into the test, or None if the schedule ends first.
        """
        elapsed_s = max(elapsed_s, 0.0)
        if arrivals <= 0:
            return elapsed_s if elapsed_s < self.duration_s else None
        remaining = arrivals
        previous = self.start_rate / self.time_unit_s
        offset = 0.0
        for stage in self.stages:
            end = offset + stage.duration_s
            target = stage.target / self.time_unit_s
            if stage.duration_s > 0 and elapsed_s < end:
                slope = (target - previous) / stage.duration_s
                start = max(elapsed_s, offset)
                rate = previous + slope * (start - offset)
                available = (rate + target) / 2 * (end - start)
                if available >= remaining:
                    # Root of rate * dt + slope / 2 * dt^2 == remaining
                    return start + 2 * remaining / (
                        rate + math.sqrt(max(rate * rate + 2 * slope * remaining, 0.0))
                    )
                remaining -= available
            previous = target
            offset = end
        return None


def ramping_schedule(
    target: float,
    duration_s: float,
    ramp_up_s: float = 0.0,
    ramp_down_s: float = 0.0,
    time_unit_s: float = 1.0,
) -> ArrivalSchedule:
    """Ramp up to ``target``, hold it, then ramp back down to zero."""
    hold_s = duration_s - ramp_up_s - ramp_down_s
    if hold_s < 0:
        raise ValueError("ramps must fit inside the schedule duration")
    return ArrivalSchedule(
        stages=[
            Stage(target=target, duration_s=ramp_up_s),
            Stage(target=target, duration_s=hold_s),
            Stage(target=0.0, duration_s=ramp_down_s),
        ],
        time_unit_s=time_unit_s,
    )


def write_schedule(settings) -> ArrivalSchedule:
    """Remote write schedule: HA-multiplied requests per scrape interval."""
    return ramping_schedule(
        target=settings.write_request_rate * settings.ha_replicas,
        duration_s=settings.duration_min * 60,
        ramp_up_s=settings.ramp_up_min * 60,
        ramp_down_s=settings.ramp_down_min * 60,
        time_unit_s=settings.scrape_interval_seconds,
    )


def read_schedule(settings) -> ArrivalSchedule:
    """Query schedule: a constant rate per second for the whole test."""
    return ArrivalSchedule(
        stages=[
            Stage(target=settings.read_request_rate, duration_s=0.0),
            Stage(target=settings.read_request_rate, duration_s=settings.duration_min * 60),
        ],
    )


def pacing_interval(
    schedule: ArrivalSchedule,
    workers: int,
    last_start_s: float,
    now_s: float,
) -> float:
    """Wait before a worker's next iteration.

    Each worker starts its next iteration once ``workers`` arrivals have
    accrued since its last start, so the pool together follows the
    schedule, ramps included.

    Args:
        schedule: Arrival schedule shared by the pool.
        workers: Size of the worker pool sharing the schedule.
        last_start_s: Elapsed seconds at the worker's last iteration start.
        now_s: Elapsed seconds now.

    Returns:
        Seconds to wait, never negative.
    """
    if workers < 1:
        return IDLE_WAIT_S
    due = schedule.time_after(last_start_s, workers)
    if due is None:
        return IDLE_WAIT_S
    return max(0.0, due - now_s)
