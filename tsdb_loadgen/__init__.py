"""Synthetic load generator for remote write and PromQL query backends."""

__version__ = "0.1.0"
