"""Fixtures for integration tests.

Provides fully wired load contexts with a recording remote write client
and a seeded query generator.
"""

import random

import pytest

from tsdb_loadgen.services.context import build_context
from tsdb_loadgen.services.query import QueryGenerator
from tsdb_loadgen.services.series import SeriesSpace


@pytest.fixture
def ha_settings(make_settings):
    """Settings for an HA pair writing 4 x 250 series."""
    return make_settings(
        write_request_rate=4,
        write_series_per_request=250,
        ha_replicas=2,
        read_series_per_request=10,
        metric_names=["node_load1", "node_load5"],
    )


@pytest.fixture
def ha_context(ha_settings, write_client):
    """LoadContext for ha_settings recording every write."""
    return build_context(ha_settings, write_client=write_client)


@pytest.fixture
def seeded_generator():
    """Query generator over 10 read series with a fixed seed."""
    space = SeriesSpace(1, 1000, 10)
    return QueryGenerator(space, rng=random.Random(42))
