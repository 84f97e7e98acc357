"""Core components for the load generator."""

from tsdb_loadgen.core.config import Settings, get_settings, load_settings
from tsdb_loadgen.core.exceptions import (
    ConfigurationError,
    ErrorKind,
    LoadGenError,
    ReadFailedError,
    RequestFailedError,
    WriteFailedError,
)

__all__ = [
    "Settings",
    "get_settings",
    "load_settings",
    "ErrorKind",
    "LoadGenError",
    "ConfigurationError",
    "RequestFailedError",
    "WriteFailedError",
    "ReadFailedError",
]
