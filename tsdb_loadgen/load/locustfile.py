"""Locust entry point for the remote write and query load test.

Configuration is read from LOADGEN_* environment variables when Locust
imports this file; a missing required value aborts the run immediately.

Usage:
    # Headless mode (the shape stops the test after LOADGEN_DURATION_MIN)
    LOADGEN_WRITE_HOSTNAME=distributor:8080 \\
    LOADGEN_READ_HOSTNAME=query-frontend:8080 \\
    LOADGEN_REMOTE_WRITE_CLIENT=mypackage.remote:Client \\
        locust -f tsdb_loadgen/load/locustfile.py --headless

    # Web UI mode
    locust -f tsdb_loadgen/load/locustfile.py
"""

from locust import events
from prometheus_client import start_http_server

from tsdb_loadgen.core.config import get_settings
from tsdb_loadgen.core.logging import bind_run_context, configure_logging, get_logger
from tsdb_loadgen.load.users import bind_user_classes, report_thresholds
from tsdb_loadgen.services.context import build_context

settings = get_settings()
configure_logging(level=settings.log_level, format=settings.log_format)
logger = get_logger(__name__)

CONTEXT = build_context(settings)
RemoteWriteUser, QueryUser, LoadShape = bind_user_classes(CONTEXT)


@events.init.add_listener
def on_init(environment, **kwargs):
    """Expose the generator's own metrics when a port is configured."""
    if settings.metrics_port is not None:
        start_http_server(settings.metrics_port)
        logger.info("Metrics exporter started", port=settings.metrics_port)


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    """Start the schedule clock and log the plan."""
    run_id = bind_run_context(tenant=settings.tenant_id)
    CONTEXT.start()
    logger.info(
        "Load test started",
        run_id=run_id,
        write_url=CONTEXT.write_url,
        read_url=CONTEXT.read_url,
        write_workers=CONTEXT.plan.write_workers,
        read_workers=CONTEXT.plan.read_workers,
        write_rate=CONTEXT.plan.write_rate,
        write_time_unit_s=CONTEXT.plan.write_time_unit_s,
        read_rate=CONTEXT.plan.read_rate,
        duration_min=settings.duration_min,
    )


@events.quitting.add_listener
def on_quitting(environment, **kwargs):
    """Evaluate the SLA thresholds before Locust exits."""
    report_thresholds(environment, CONTEXT)
    logger.info("Load test completed")
