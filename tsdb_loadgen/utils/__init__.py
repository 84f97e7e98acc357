"""Utility functions for the load generator."""

from tsdb_loadgen.utils.auth import basic_auth_header

__all__ = ["basic_auth_header"]
