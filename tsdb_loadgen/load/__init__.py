"""Locust integration: users, load shape and SLA reporting."""

from tsdb_loadgen.load.users import (
    ArrivalRateShape,
    QueryUser,
    RemoteWriteUser,
    bind_user_classes,
    report_thresholds,
)

__all__ = [
    "ArrivalRateShape",
    "QueryUser",
    "RemoteWriteUser",
    "bind_user_classes",
    "report_thresholds",
]
