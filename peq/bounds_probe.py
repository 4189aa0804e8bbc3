#!/usr/bin/env python3
"""
Bounds probing for split columns
Finds min and max of an integer split column with a single aggregate query
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from peq.database_type_mappings import is_integral_dtype
from peq.enhanced_logger import logger
from peq.export_config import get_probe_column_names
from peq.query_executors import QueryExecutor
from peq.sql_query import SqlQuery


class BoundsProbeError(Exception):
    """Base class for bounds probe failures"""


class EmptyProbeResultError(BoundsProbeError, RuntimeError):
    """The min/max query returned no row"""


class SplitColumnTypeError(BoundsProbeError, ValueError):
    """The split column is not of an integer type"""


class QueryExecutionError(BoundsProbeError):
    """The executor failed to run the probe query"""


class ProbeFailure(Enum):
    """Why a probe did not produce bounds"""
    NO_ROWS = "no_rows"
    NOT_INTEGRAL = "not_integral"
    EXECUTION_FAILED = "execution_failed"


_FAILURE_ERRORS = {
    ProbeFailure.NO_ROWS: EmptyProbeResultError,
    ProbeFailure.NOT_INTEGRAL: SplitColumnTypeError,
    ProbeFailure.EXECUTION_FAILED: QueryExecutionError,
}


@dataclass(frozen=True)
class Bounds:
    """Min and max of the split column"""
    min: int
    max: int


@dataclass(frozen=True)
class ProbeOutcome:
    """Either bounds, or the failure that prevented them"""
    bounds: Optional[Bounds] = None
    failure: Optional[ProbeFailure] = None
    message: str = ""
    cause: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def unwrap(self) -> Bounds:
        """Return the bounds or raise the error matching the failure"""
        if self.failure is None:
            return self.bounds
        raise _FAILURE_ERRORS[self.failure](self.message) from self.cause


def probe_bounds(executor: QueryExecutor, base_query: SqlQuery, partition_condition: str,
                 split_column: str) -> ProbeOutcome:
    """
    Run the min/max query for the split column

    Args:
        executor: Executor the probe query runs on
        base_query: Base query of the export
        partition_condition: Partition window condition, may be empty
        split_column: Integer column to find bounds for

    Returns:
        ProbeOutcome with bounds, or with the failure reason
    """
    min_column_name, max_column_name = get_probe_column_names()
    query = base_query.bounds_query(split_column, min_column_name, max_column_name,
                                    partition_condition)
    logger.debug(f"Probing bounds: {query}")

    start_time = time.time()
    try:
        result = executor.execute(str(query))
    except Exception as e:
        return ProbeOutcome(
            failure=ProbeFailure.EXECUTION_FAILED,
            message=f"Bounds query failed for split column '{split_column}': {e}",
            cause=e
        )

    # Should ideally always hold for an aggregate query
    if result.height == 0:
        return ProbeOutcome(
            failure=ProbeFailure.NO_ROWS,
            message="Result Set for Min/Max returned zero records"
        )

    # Min and max columns are both of the split column type
    dtype = result.schema[min_column_name]
    if not is_integral_dtype(dtype):
        return ProbeOutcome(
            failure=ProbeFailure.NOT_INTEGRAL,
            message=f"splitColumn should be of type Integer / Long, '{split_column}' is {dtype}"
        )

    row = result.row(0, named=True)
    min_value, max_value = row[min_column_name], row[max_column_name]

    # An empty window has no bounds; [0, 0] yields a single query selecting nothing
    if min_value is None or max_value is None:
        logger.null_bounds_defaulted(split_column)
        min_value, max_value = 0, 0

    logger.bounds_probed(min_value, max_value, time.time() - start_time)
    return ProbeOutcome(bounds=Bounds(int(min_value), int(max_value)))


def find_input_bounds(executor: QueryExecutor, base_query: SqlQuery, partition_condition: str,
                      split_column: str) -> Bounds:
    """
    Find min and max of the split column with the partition condition applied

    Raises:
        EmptyProbeResultError: the probe returned no row
        SplitColumnTypeError: the split column is not an integer column
        QueryExecutionError: the probe query failed
    """
    return probe_bounds(executor, base_query, partition_condition, split_column).unwrap()
