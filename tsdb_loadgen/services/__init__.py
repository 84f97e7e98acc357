"""Series generation, query generation and load shaping."""

from tsdb_loadgen.services.provisioning import ProvisioningPlan
from tsdb_loadgen.services.query import QueryGenerator
from tsdb_loadgen.services.series import SeriesSpace, resolve_iteration
from tsdb_loadgen.services.write_batch import WriteBatch, WriteBatchBuilder

__all__ = [
    "ProvisioningPlan",
    "QueryGenerator",
    "SeriesSpace",
    "WriteBatch",
    "WriteBatchBuilder",
    "resolve_iteration",
]
