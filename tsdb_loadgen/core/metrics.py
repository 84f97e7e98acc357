"""Prometheus metrics describing the load the generator produced.

Metrics follow the naming convention: {namespace}_{subsystem}_{name}_{unit}
Reference: https://prometheus.io/docs/practices/naming/
"""

from prometheus_client import Counter, Gauge, Histogram

NAMESPACE = "tsdb_loadgen"

# Check outcomes, tagged like the SLA thresholds (type=write|read)
CHECKS = Counter(
    name="checks_total",
    documentation="Outcome of every write and read check",
    labelnames=["type", "result"],
    namespace=NAMESPACE,
)

REQUEST_LATENCY = Histogram(
    name="request_latency_seconds",
    documentation="Latency of write and read requests in seconds",
    labelnames=["type"],
    namespace=NAMESPACE,
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0),
)

# Write path
SERIES_WRITTEN = Counter(
    name="write_series_total",
    documentation="Series submitted to the remote write client",
    labelnames=["replica"],
    namespace=NAMESPACE,
)

WRITE_ITERATION = Gauge(
    name="write_iteration",
    documentation="Last raw write iteration handed to a worker",
    namespace=NAMESPACE,
)

# Read path
QUERY_SHAPES = Counter(
    name="query_shape_total",
    documentation="Generated queries by shape",
    labelnames=["shape"],
    namespace=NAMESPACE,
)
