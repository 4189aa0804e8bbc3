"""
SQL query text for parallel exports.

This module owns every piece of textual SQL the query builder produces:

- the base query (``SELECT * FROM <table> WHERE 1=1`` or a wrapped raw query)
- the partition, split and limit clauses appended to it
- the bounds probe query
- the final assembly of one query per split range

Queries are composed by string concatenation. Table and column names are
validated or taken as given; they are not quoted or escaped.
"""

import re
from typing import List

from peq.export_config import QUERY_BUILDER_CONFIG
from peq.range_chunking import SplitRange, calculate_ranges


TABLE_NAME_PATTERN = re.compile(r'^[a-zA-Z_][a-zA-Z0-9_]*$')
SELECT_PATTERN = re.compile(r'^\s*SELECT\s', re.IGNORECASE)


def check_table_name(table_name: str) -> bool:
    return table_name is not None and TABLE_NAME_PATTERN.match(table_name) is not None


def check_sql_query(sql_query: str) -> bool:
    """Raw SQL must be a single non-empty SELECT statement"""
    if not sql_query or not sql_query.strip():
        return False
    return SELECT_PATTERN.match(sql_query) is not None


def remove_trailing_symbols(sql_query: str) -> str:
    """Strip trailing whitespace and semicolons so the query can be nested"""
    return sql_query.strip().rstrip(';').rstrip()


class SqlQuery:
    """
    Base query of an export, always ending in a WHERE clause
    so that ' AND ...' predicates can be appended
    """

    def __init__(self, sql_query: str):
        self.sql_query = sql_query

    @classmethod
    def of_table_name(cls, table_name: str) -> 'SqlQuery':
        if not check_table_name(table_name):
            raise ValueError("'table' must follow [a-zA-Z_][a-zA-Z0-9_]*")
        return cls(f"SELECT * FROM {table_name} WHERE 1=1")

    @classmethod
    def of_raw_sql(cls, sql_query: str) -> 'SqlQuery':
        if not check_sql_query(sql_query):
            raise ValueError("Invalid SQL query")
        alias = QUERY_BUILDER_CONFIG['base_query']['raw_sql_alias']
        return cls(f"SELECT * FROM ({remove_trailing_symbols(sql_query)}) as {alias} WHERE 1=1")

    def bounds_query(self, split_column: str, min_column_name: str,
                     max_column_name: str, partition_condition: str) -> 'SqlQuery':
        """Aggregate query returning min and max of the split column"""
        alias = QUERY_BUILDER_CONFIG['bounds_probe']['subquery_alias']
        return SqlQuery(
            f"SELECT MIN({split_column}) as {min_column_name}, "
            f"MAX({split_column}) as {max_column_name} "
            f"FROM ({self.sql_query}{partition_condition}) as {alias}"
        )

    def __str__(self):
        return self.sql_query

    def __repr__(self):
        return f"SqlQuery({self.sql_query!r})"

    def __eq__(self, other):
        return isinstance(other, SqlQuery) and self.sql_query == other.sql_query

    def __hash__(self):
        return hash(self.sql_query)


def create_sql_limit_condition(limit: int) -> str:
    return f" LIMIT {limit}"


def create_sql_partition_condition(partition_column: str, start_inclusive: str,
                                   end_exclusive: str) -> str:
    return (f" AND {partition_column} >= '{start_inclusive}'"
            f" AND {partition_column} < '{end_exclusive}'")


def create_sql_split_condition(split_column: str, lower: int, upper: int,
                               upper_inclusive: bool) -> str:
    upper_operator = "<=" if upper_inclusive else "<"
    return (f" AND {split_column} >= {lower}"
            f" AND {split_column} {upper_operator} {upper}")


def split_condition_for_range(split_column: str, split_range: SplitRange) -> str:
    return create_sql_split_condition(
        split_column, split_range.lower, split_range.upper, split_range.upper_inclusive
    )


def assemble_query(base_query, partition_filter: str = "", split_filter: str = "",
                   limit_filter: str = "") -> str:
    """
    Compose the final query text: base query, partition filter,
    split filter, limit, in that order
    """
    return f"{base_query}{partition_filter}{split_filter}{limit_filter}"


def queries_for_bounds(min_value: int, max_value: int, parallelism: int, split_column: str,
                       base_query, partition_filter: str = "",
                       limit_filter: str = "") -> List[str]:
    """
    Generate one query per range of [min_value, max_value]

    Args:
        min_value: Smallest split column value
        max_value: Largest split column value
        parallelism: Maximum number of queries
        split_column: Column the ranges are applied to
        base_query: SqlQuery (or query text) the filters are appended to
        partition_filter: Partition window condition, may be empty
        limit_filter: Per-query LIMIT clause, may be empty

    Returns:
        List of query strings, at most `parallelism` long
    """
    return [
        assemble_query(base_query, partition_filter,
                       split_condition_for_range(split_column, split_range), limit_filter)
        for split_range in calculate_ranges(min_value, max_value, parallelism)
    ]
