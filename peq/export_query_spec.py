"""
Export query specification

Describes how to create the queries of one export job, and builds them.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Union

from peq.bounds_probe import find_input_bounds
from peq.enhanced_logger import logger
from peq.export_config import get_default_partition_period
from peq.partitioning import next_partition, normalize_partition_period, to_partition_date
from peq.query_executors import QueryExecutor
from peq.sql_query import (
    SqlQuery,
    assemble_query,
    create_sql_limit_condition,
    create_sql_partition_condition,
    queries_for_bounds,
)


def check_split_arguments(split_column: Optional[str], parallelism: Optional[int]):
    """Parallelism and split column go together, parallelism must be positive"""
    if parallelism is not None and split_column is None:
        raise ValueError(
            "Cannot use queryParallelism because no column to split is specified. "
            "Please specify column to use for splitting using --split-column"
        )
    if parallelism is None and split_column is not None:
        raise ValueError(
            "argument splitColumn has no effect since --query-parallelism is not specified"
        )
    if parallelism is not None and parallelism <= 0:
        raise ValueError(
            f"Query Parallelism must be a positive number. "
            f"Specified queryParallelism was {parallelism}"
        )


@dataclass(frozen=True)
class ExportQuerySpec:
    """
    Immutable description of the queries for one export

    Use ExportQuerySpec.create() to build one from a table name or raw SQL.
    """
    table_name: str
    base_query: SqlQuery
    limit: Optional[int] = None
    partition_column: Optional[str] = None
    partition: Optional[date] = None
    partition_period: str = field(default_factory=get_default_partition_period)
    split_column: Optional[str] = None
    parallelism: Optional[int] = None

    def __post_init__(self):
        check_split_arguments(self.split_column, self.parallelism)
        if self.limit is not None and self.limit < 0:
            raise ValueError(f"Limit must not be negative, got {self.limit}")
        # Normalise derived values on the frozen instance
        object.__setattr__(self, 'partition_period',
                           normalize_partition_period(self.partition_period))
        if self.partition is not None:
            object.__setattr__(self, 'partition', to_partition_date(self.partition))

    @classmethod
    def create(cls, table_name: str, sql_query: Optional[str] = None,
               limit: Optional[int] = None,
               partition_column: Optional[str] = None,
               partition: Optional[Union[date, datetime, str]] = None,
               partition_period: Optional[str] = None,
               split_column: Optional[str] = None,
               parallelism: Optional[int] = None) -> 'ExportQuerySpec':
        """
        Validating factory

        Args:
            table_name: Table to export; validated even when sql_query is given
            sql_query: Raw SELECT statement used instead of the whole table
            limit: Maximum number of rows
            partition_column: Date column the partition window applies to
            partition: First day of the partition window
            partition_period: Window length, e.g. '1d', '1mo' or 'P1M'
            split_column: Integer column to split the export on
            parallelism: Maximum number of split queries

        Returns:
            ExportQuerySpec

        Raises:
            ValueError: when any argument is invalid
        """
        if table_name is None:
            raise ValueError("TableName cannot be null")
        base_query = SqlQuery.of_table_name(table_name)
        if sql_query is not None:
            base_query = SqlQuery.of_raw_sql(sql_query)

        return cls(
            table_name=table_name,
            base_query=base_query,
            limit=limit,
            partition_column=partition_column,
            partition=partition,
            partition_period=(get_default_partition_period() if partition_period is None
                              else partition_period),
            split_column=split_column,
            parallelism=parallelism,
        )

    @property
    def is_split(self) -> bool:
        return self.split_column is not None and self.parallelism is not None

    def limit_condition(self) -> str:
        if self.limit is None:
            return ""
        return create_sql_limit_condition(self.limit)

    def partition_condition(self) -> str:
        """Half-open date window on the partition column, empty when not partitioned"""
        if self.partition_column is None or self.partition is None:
            return ""
        end = next_partition(self.partition, self.partition_period)
        return create_sql_partition_condition(
            self.partition_column, self.partition.isoformat(), end.isoformat()
        )

    def build_queries(self, executor: Optional[QueryExecutor] = None) -> List[str]:
        """
        Create queries to be executed for the export job

        Args:
            executor: Used to find the split column bounds; only needed when splitting

        Returns:
            List of queries, one per split range (or a single query)

        Raises:
            ValueError: invalid split arguments, or no executor to probe with
            BoundsProbeError: the bounds probe failed
        """
        logger.export_started(self.table_name, self.split_column, self.parallelism)
        try:
            check_split_arguments(self.split_column, self.parallelism)
            partition_condition = self.partition_condition()

            if not self.is_split:
                queries = [assemble_query(self.base_query, partition_condition,
                                          limit_filter=self.limit_condition())]
            else:
                if executor is None:
                    raise ValueError("A query executor is required to find split column bounds")

                bounds = find_input_bounds(executor, self.base_query, partition_condition,
                                           self.split_column)
                limit_with_parallelism = ""
                if self.limit is not None:
                    limit_with_parallelism = create_sql_limit_condition(self.limit // self.parallelism)

                queries = queries_for_bounds(
                    bounds.min, bounds.max, self.parallelism, self.split_column,
                    self.base_query, partition_condition, limit_with_parallelism
                )
        except Exception as e:
            logger.build_failed(e)
            raise

        logger.queries_built(len(queries))
        return queries
