"""Locust users and load shape driving the write and read paths.

- RemoteWriteUser: one remote write per task, paced so that the write pool
  reaches the write schedule's rate. Shares one iteration counter.
- QueryUser: one instant query per task against the read path.
- ArrivalRateShape: starts every worker at once and stops the test after
  the configured duration.

The base classes are abstract; ``bind_user_classes`` produces concrete
classes bound to a LoadContext.
"""

import time

from locust import HttpUser, LoadTestShape, User, task

from tsdb_loadgen.core.exceptions import ReadFailedError
from tsdb_loadgen.core.logging import get_logger
from tsdb_loadgen.core.metrics import REQUEST_LATENCY, WRITE_ITERATION
from tsdb_loadgen.services.checks import CheckType, check_rate
from tsdb_loadgen.services.clients import QUERY_PATH
from tsdb_loadgen.services.context import LoadContext
from tsdb_loadgen.services.driver import evaluate_read, prepare_read, run_write
from tsdb_loadgen.services.scheduling import pacing_interval
from tsdb_loadgen.services.thresholds import (
    READ_AVG_MS,
    READ_CHECK_RATE,
    WRITE_CHECK_RATE,
    WRITE_P999_MS,
    breached,
    evaluate_thresholds,
)

logger = get_logger(__name__)

WRITE_REQUEST_TYPE = "remote_write"
QUERY_REQUEST_NAME = "query"


class RemoteWriteUser(User):
    """Sends remote write batches.

    Requests are reported to Locust under the remote write URL, so the
    write latency threshold can be read from the run statistics.
    """

    abstract = True
    context: LoadContext

    def on_start(self):
        self._last_start = self.context.elapsed()

    def wait_time(self):
        """Pace the worker to its share of the write schedule."""
        return pacing_interval(
            self.context.write_schedule,
            self.context.plan.write_workers,
            self._last_start,
            self.context.elapsed(),
        )

    @task
    def write(self):
        """Build and send the batch for the next iteration.

        Any failure is reported to Locust and re-raised so the iteration is
        counted as failed; other workers keep running.
        """
        self._last_start = self.context.elapsed()
        iteration = self.context.next_iteration()
        WRITE_ITERATION.set(iteration)

        start = time.perf_counter()
        exception = None
        response_length = 0
        try:
            response = run_write(self.context.batches, self.context.write_client, iteration)
            response_length = len(response.body or "")
        except Exception as e:
            exception = e
            raise
        finally:
            self.environment.events.request.fire(
                request_type=WRITE_REQUEST_TYPE,
                name=self.context.write_url,
                response_time=(time.perf_counter() - start) * 1000,
                response_length=response_length,
                exception=exception,
                context={"type": CheckType.WRITE.value, "iteration": iteration},
            )


class QueryUser(HttpUser):
    """Sends randomized instant queries to the read path."""

    abstract = True
    context: LoadContext

    def on_start(self):
        self._last_start = self.context.elapsed()
        self.client.headers.update(self.context.read_headers)

    def wait_time(self):
        """Pace the worker to its share of the query schedule."""
        return pacing_interval(
            self.context.read_schedule,
            self.context.plan.read_workers,
            self._last_start,
            self.context.elapsed(),
        )

    @task
    def read(self):
        """Generate a query, send it and check the response shape."""
        self._last_start = self.context.elapsed()
        query, params = prepare_read(
            self.context.queries,
            self.context.clock,
            lookback_s=self.context.settings.query_lookback_s,
        )

        start = time.perf_counter()
        with self.client.post(
            QUERY_PATH,
            data=params,
            timeout=self.context.settings.read_timeout_s,
            catch_response=True,
            name=QUERY_REQUEST_NAME,
        ) as response:
            REQUEST_LATENCY.labels(type=CheckType.READ.value).observe(
                time.perf_counter() - start
            )
            try:
                evaluate_read(response)
            except ReadFailedError as e:
                response.failure(e.message)
                logger.warning("Read failed", query=query, **e.to_dict()["error"])
                raise
            response.success()


class ArrivalRateShape(LoadTestShape):
    """Holds every worker for the whole test; rates are paced per worker."""

    abstract = True
    context: LoadContext

    def tick(self):
        if self.get_run_time() >= self.context.duration_s:
            return None
        users = self.context.plan.total_workers
        return (users, users)


def bind_user_classes(
    context: LoadContext,
) -> tuple[type[RemoteWriteUser], type[QueryUser], type[ArrivalRateShape]]:
    """Create concrete user and shape classes bound to ``context``.

    Worker counts come from the provisioning plan and are fixed for the
    whole run.
    """
    write_user = type(
        "RemoteWriteUser",
        (RemoteWriteUser,),
        {
            "abstract": False,
            "context": context,
            "fixed_count": context.plan.write_workers,
        },
    )
    query_user = type(
        "QueryUser",
        (QueryUser,),
        {
            "abstract": False,
            "context": context,
            "fixed_count": context.plan.read_workers,
            "host": context.read_url,
        },
    )
    shape = type("LoadShape", (ArrivalRateShape,), {"abstract": False, "context": context})
    return write_user, query_user, shape


def observed_statistics(environment, context: LoadContext) -> dict[str, float | None]:
    """Statistics the SLA thresholds are evaluated on."""
    write_stats = environment.stats.get(context.write_url, WRITE_REQUEST_TYPE)
    read_stats = environment.stats.get(QUERY_REQUEST_NAME, "POST")
    return {
        WRITE_CHECK_RATE: check_rate(CheckType.WRITE),
        WRITE_P999_MS: (
            write_stats.get_response_time_percentile(0.999)
            if write_stats.num_requests
            else None
        ),
        READ_CHECK_RATE: check_rate(CheckType.READ),
        READ_AVG_MS: read_stats.avg_response_time if read_stats.num_requests else None,
    }


def report_thresholds(environment, context: LoadContext) -> bool:
    """Log the SLA threshold results and flag a breach in the exit code.

    Returns:
        True when every threshold passed.
    """
    results = evaluate_thresholds(observed_statistics(environment, context))
    for result in results:
        logger.info(
            "Threshold",
            threshold=str(result.threshold),
            observed=result.observed,
            passed=result.passed,
        )
    failures = breached(results)
    if failures:
        logger.error(
            "SLA thresholds breached",
            thresholds=[str(result.threshold) for result in failures],
        )
        environment.process_exit_code = 1
    return not failures
