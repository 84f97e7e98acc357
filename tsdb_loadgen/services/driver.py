"""Per-invocation write and read logic used by the load runtime.

The runtime owns timing, concurrency and the shared iteration counter. The
functions here run one invocation each: they classify the outcome, record
exactly one check, and re-raise failures so the runtime accounts for the
failed iteration. Nothing here keeps state between invocations.
"""

import math
import time
from collections.abc import Callable
from typing import Any

from tsdb_loadgen.core.exceptions import ReadFailedError, WriteFailedError
from tsdb_loadgen.core.logging import get_logger
from tsdb_loadgen.core.metrics import REQUEST_LATENCY, SERIES_WRITTEN
from tsdb_loadgen.services.checks import CheckType, query_result_is_vector, record_check
from tsdb_loadgen.services.clients import RemoteWriteClient, WriteResponse
from tsdb_loadgen.services.query import QueryGenerator
from tsdb_loadgen.services.write_batch import WriteBatch, WriteBatchBuilder, write_succeeded

logger = get_logger(__name__)

# Longest response body kept in error messages
_BODY_PREVIEW = 512


def _preview(body: Any) -> str:
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    return str(body or "")[:_BODY_PREVIEW]


def submit_write(client: RemoteWriteClient, batch: WriteBatch) -> WriteResponse:
    """Send one batch and check the result.

    Args:
        client: Remote write client.
        batch: Batch to send.

    Returns:
        The client response when the write succeeded.

    Raises:
        WriteFailedError: If the status is not 200 or 202.
        Exception: Any client error, re-raised after being recorded.
    """
    logger.debug(
        "Sending write batch",
        min_series_id=batch.min_series_id,
        max_series_id=batch.max_series_id,
        replica=batch.replica_tag,
    )
    start = time.perf_counter()
    try:
        response = client.store_from_templates(**batch.submission())
    except Exception as e:
        record_check(CheckType.WRITE, False)
        logger.error("Write raised", error=str(e), replica=batch.replica_tag)
        raise
    finally:
        REQUEST_LATENCY.labels(type=CheckType.WRITE.value).observe(
            time.perf_counter() - start
        )

    if not record_check(CheckType.WRITE, write_succeeded(response.status)):
        error = WriteFailedError(status=response.status, body=_preview(response.body))
        logger.warning("Write failed", **error.to_dict()["error"])
        raise error

    SERIES_WRITTEN.labels(replica=batch.replica_tag).inc(batch.series_count)
    return response


def read_params(query: str, now: float, lookback_s: int = 60) -> dict[str, Any]:
    """Form parameters of an instant query evaluated ``lookback_s`` ago."""
    return {"query": query, "time": math.ceil(now) - lookback_s}


def evaluate_read(response: Any) -> Any:
    """Check a query response.

    The response must have status 200 and a JSON body with
    ``status == "success"`` and ``data.resultType == "vector"``.

    Args:
        response: requests-style response (``status_code``, ``json()``, ``text``).

    Returns:
        The decoded JSON payload.

    Raises:
        ReadFailedError: If the status or the body shape is wrong.
    """
    status = response.status_code
    if status != 200:
        record_check(CheckType.READ, False)
        raise ReadFailedError(status=status, body=_preview(response.text))

    try:
        payload = response.json()
    except ValueError as e:
        record_check(CheckType.READ, False)
        raise ReadFailedError(
            status=status, body=_preview(response.text), reason="invalid JSON"
        ) from e

    if not record_check(CheckType.READ, query_result_is_vector(payload)):
        raise ReadFailedError(
            status=status,
            body=_preview(response.text),
            reason="unexpected response shape",
        )
    return payload


def run_write(
    builder: WriteBatchBuilder,
    client: RemoteWriteClient,
    raw_iteration: int,
) -> WriteResponse:
    """Build the batch of one raw iteration and send it.

    A failure while building the batch counts as a failed write check, the
    same as a failed submission.

    Raises:
        WriteFailedError: If the status is not 200 or 202.
        Exception: Any error raised while building or sending the batch.
    """
    try:
        batch = builder.build(raw_iteration)
    except Exception as e:
        record_check(CheckType.WRITE, False)
        logger.error("Write batch construction failed", error=str(e), iteration=raw_iteration)
        raise
    return submit_write(client, batch)


def prepare_read(
    generator: QueryGenerator,
    clock: Callable[[], float],
    lookback_s: int = 60,
) -> tuple[str, dict[str, Any]]:
    """Generate one query and its form parameters.

    A failure here counts as a failed read check.

    Returns:
        The query and the parameters to post.
    """
    try:
        query = generator.generate()
        return query, read_params(query, now=clock(), lookback_s=lookback_s)
    except Exception as e:
        record_check(CheckType.READ, False)
        logger.error("Query construction failed", error=str(e))
        raise
