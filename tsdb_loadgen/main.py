"""Headless runner using Locust as a library.

Runs the same users and shape as ``load/locustfile.py`` without the Locust
CLI, then evaluates the SLA thresholds and exits non-zero on a breach.

Usage:
    python -m tsdb_loadgen            # run the load test
    python -m tsdb_loadgen --plan     # print the provisioning plan only
"""

import argparse
import sys

import gevent
from locust import events
from locust.env import Environment
from locust.stats import print_stats, stats_history, stats_printer
from prometheus_client import start_http_server

from tsdb_loadgen.core.config import Settings, get_settings
from tsdb_loadgen.core.exceptions import ConfigurationError
from tsdb_loadgen.core.logging import bind_run_context, configure_logging, get_logger
from tsdb_loadgen.load.users import bind_user_classes, report_thresholds
from tsdb_loadgen.services.context import LoadContext, build_context
from tsdb_loadgen.services.provisioning import ProvisioningPlan
from tsdb_loadgen.services.series import SeriesSpace

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_THRESHOLDS_BREACHED = 1
EXIT_CONFIGURATION = 2


def describe_plan(settings: Settings) -> dict[str, object]:
    """Summary of the load a run with ``settings`` would produce."""
    plan = ProvisioningPlan.from_settings(settings)
    space = SeriesSpace.from_settings(settings)
    return {
        "total_series": space.total_series(),
        "batches_per_cycle": space.batches_per_cycle(),
        "ha_replicas": settings.ha_replicas,
        "write_rate": plan.write_rate,
        "write_time_unit_s": plan.write_time_unit_s,
        "write_workers": plan.write_workers,
        "read_rate": plan.read_rate,
        "read_workers": plan.read_workers,
        "duration_min": settings.duration_min,
        "ramp_up_min": settings.ramp_up_min,
        "ramp_down_min": settings.ramp_down_min,
    }


def run(context: LoadContext) -> bool:
    """Run the load test to completion.

    Args:
        context: Components of the run.

    Returns:
        True when every SLA threshold passed.
    """
    write_user, query_user, shape = bind_user_classes(context)
    env = Environment(
        user_classes=[write_user, query_user],
        shape_class=shape(),
        events=events,
    )
    runner = env.create_local_runner()
    env.events.init.fire(environment=env, runner=runner, web_ui=None)

    printer = gevent.spawn(stats_printer(env.stats))
    history = gevent.spawn(stats_history, runner)

    bind_run_context(tenant=context.settings.tenant_id)
    context.start()
    runner.start_shape()
    shape_greenlet = runner.shape_greenlet
    if shape_greenlet is not None:
        shape_greenlet.join()
    runner.quit()

    printer.kill(block=False)
    history.kill(block=False)
    print_stats(env.stats)
    return report_thresholds(env, context)


def main(argv: list[str] | None = None) -> int:
    """Command line entry point."""
    parser = argparse.ArgumentParser(description="Remote write and PromQL load generator")
    parser.add_argument(
        "--plan",
        action="store_true",
        help="Print the provisioning plan and exit without sending traffic",
    )
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ConfigurationError as e:
        configure_logging()
        logger.error("Invalid configuration", **e.to_dict()["error"])
        return EXIT_CONFIGURATION

    configure_logging(level=settings.log_level, format=settings.log_format)
    plan = describe_plan(settings)
    if args.plan:
        logger.info("Provisioning plan", **plan)
        return EXIT_OK

    try:
        context = build_context(settings)
    except ConfigurationError as e:
        logger.error("Invalid configuration", **e.to_dict()["error"])
        return EXIT_CONFIGURATION

    if settings.metrics_port is not None:
        start_http_server(settings.metrics_port)
        logger.info("Metrics exporter started", port=settings.metrics_port)

    logger.info("Starting load test", **plan)
    passed = run(context)
    logger.info("Load test completed", thresholds_passed=passed)
    return EXIT_OK if passed else EXIT_THRESHOLDS_BREACHED


if __name__ == "__main__":
    sys.exit(main())
