"""Endpoints, headers and the pluggable remote write client.

The remote write wire format (protobuf encoding, snappy compression) is
owned by an external client. It is plugged in by import path through
``LOADGEN_REMOTE_WRITE_CLIENT`` and only needs to implement
``RemoteWriteClient``.
"""

import importlib
from typing import Any, Protocol, runtime_checkable

from tsdb_loadgen.core.config import Settings
from tsdb_loadgen.core.exceptions import ConfigurationError
from tsdb_loadgen.utils.auth import basic_auth_header

USER_AGENT = "tsdb-loadgen"
QUERY_PATH = "/query"


class WriteResponse(Protocol):
    """What the driver reads from a remote write response."""

    status: int
    body: str


@runtime_checkable
class RemoteWriteClient(Protocol):
    """Remote write client expanding label templates per series.

    Label values holding ``${series_id}`` (optionally with an arithmetic
    suffix such as ``${series_id%2500}``) are expanded for every id in
    ``[min_series_id, max_series_id)``.
    """

    def store_from_templates(
        self,
        min_value: float,
        max_value: float,
        timestamp_ms: int,
        min_series_id: int,
        max_series_id: int,
        labels: dict[str, str],
    ) -> WriteResponse:
        ...


def remote_write_url(settings: Settings) -> str:
    """Remote write push endpoint."""
    return f"{settings.scheme.value}://{settings.write_hostname}/api/v1/push"


def read_base_url(settings: Settings) -> str:
    """Base URL of the Prometheus compatible query API."""
    return f"{settings.scheme.value}://{settings.read_hostname}/prometheus/api/v1"


def read_headers(settings: Settings) -> dict[str, str]:
    """Headers sent with every query request."""
    headers = {
        "User-Agent": USER_AGENT,
        "Content-Type": "application/x-www-form-urlencoded",
    }
    if settings.has_read_auth:
        headers["Authorization"] = basic_auth_header(settings.username, settings.read_token)
    if settings.tenant_id:
        headers["X-Scope-OrgID"] = settings.tenant_id
    return headers


def write_headers(settings: Settings) -> dict[str, str]:
    """Extra headers for the remote write client.

    The tenant is passed separately as ``tenant_name``.
    """
    headers = {"User-Agent": USER_AGENT}
    if settings.has_write_auth:
        headers["Authorization"] = basic_auth_header(settings.username, settings.write_token)
    return headers


def _import_factory(path: str) -> Any:
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigurationError(
            f"LOADGEN_REMOTE_WRITE_CLIENT must look like 'package.module:callable', got {path!r}"
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(
            f"Cannot import remote write client module {module_name!r}: {e}"
        ) from e
    try:
        return getattr(module, attr)
    except AttributeError as e:
        raise ConfigurationError(
            f"Module {module_name!r} has no remote write client factory {attr!r}"
        ) from e


def load_remote_write_client(settings: Settings) -> RemoteWriteClient:
    """Instantiate the configured remote write client.

    The factory is called with ``url``, ``timeout_s``, ``tenant_name`` and
    ``headers`` keyword arguments.

    Raises:
        ConfigurationError: If no client is configured or it cannot be loaded.
    """
    if not settings.remote_write_client:
        raise ConfigurationError(
            "LOADGEN_REMOTE_WRITE_CLIENT environment variable missing: set it to "
            "the remote write client factory as 'package.module:callable'"
        )
    factory = _import_factory(settings.remote_write_client)
    client = factory(
        url=remote_write_url(settings),
        timeout_s=settings.write_timeout_s,
        tenant_name=settings.tenant_id,
        headers=write_headers(settings),
    )
    if not isinstance(client, RemoteWriteClient):
        raise ConfigurationError(
            f"{settings.remote_write_client} did not return a client with store_from_templates()"
        )
    return client
