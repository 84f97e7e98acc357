"""Shared pytest fixtures for all test layers.

Provides settings construction isolated from the developer's environment
and fakes for the external write and read clients.
"""

import os
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from tsdb_loadgen.core.config import Settings


class RecordingWriteClient:
    """Remote write client double recording every call.

    Returns the queued statuses in order, then 200.
    """

    def __init__(self, statuses=None, error: Exception | None = None):
        self.calls: list[dict] = []
        self._statuses = list(statuses or [])
        self._error = error

    def store_from_templates(
        self,
        min_value,
        max_value,
        timestamp_ms,
        min_series_id,
        max_series_id,
        labels,
    ):
        self.calls.append(
            {
                "min_value": min_value,
                "max_value": max_value,
                "timestamp_ms": timestamp_ms,
                "min_series_id": min_series_id,
                "max_series_id": max_series_id,
                "labels": labels,
            }
        )
        if self._error is not None:
            raise self._error
        status = self._statuses.pop(0) if self._statuses else 200
        return SimpleNamespace(status=status, body="" if status < 300 else "boom")


@pytest.fixture
def make_settings():
    """Build Settings from keyword overrides, ignoring env vars and .env.

    Returns:
        A callable accepting Settings field overrides.
    """

    def factory(**overrides) -> Settings:
        values = {
            "write_hostname": "distributor.local",
            "read_hostname": "query-frontend.local",
        }
        values.update(overrides)
        with patch.dict(os.environ, {}, clear=True):
            return Settings(_env_file=None, **values)

    return factory


@pytest.fixture
def settings(make_settings) -> Settings:
    """Settings with the default load shape."""
    return make_settings()


@pytest.fixture
def write_client() -> RecordingWriteClient:
    """Remote write client that accepts every batch."""
    return RecordingWriteClient()


@pytest.fixture
def recording_write_client_cls():
    """The RecordingWriteClient class, for tests that script statuses."""
    return RecordingWriteClient
