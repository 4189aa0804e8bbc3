"""
Query executors used by the bounds probe

Every executor runs one SQL statement and returns the result as a Polars
DataFrame whose schema carries the column types of the result set.
"""

from typing import Protocol

import duckdb
import polars as pl

from peq.database_type_mappings import create_polars_schema_from_description
from peq.database_utils import create_data_source_connection


class QueryExecutor(Protocol):
    def execute(self, sql: str) -> pl.DataFrame:
        ...


class DuckDBQueryExecutor:
    """Runs queries on a DuckDB connection; DuckDB returns typed Polars frames itself"""

    def __init__(self, connection: duckdb.DuckDBPyConnection):
        self.connection = connection

    def execute(self, sql: str) -> pl.DataFrame:
        return self.connection.execute(sql).pl()

    def close(self):
        self.connection.close()


class DbApiQueryExecutor:
    """
    Runs queries on a DB-API connection (psycopg2, vertica_python)

    Column types are read from cursor.description and mapped to Polars types
    """

    db_type = 'postgresql'

    def __init__(self, connection):
        self.connection = connection

    def execute(self, sql: str) -> pl.DataFrame:
        cursor = self.connection.cursor()
        try:
            cursor.execute(sql)
            schema = create_polars_schema_from_description(cursor.description, self.db_type)
            rows = cursor.fetchall()
        finally:
            cursor.close()

        columns = list(zip(*rows)) if rows else [() for _ in schema]
        # Drivers return Decimal for numeric columns, let Polars coerce
        return pl.DataFrame([
            pl.Series(name, list(values), dtype=dtype, strict=False)
            for (name, dtype), values in zip(schema.items(), columns)
        ])

    def close(self):
        self.connection.close()


class PostgresQueryExecutor(DbApiQueryExecutor):
    """psycopg2 connections to PostgreSQL or Greenplum"""
    db_type = 'postgresql'


class VerticaQueryExecutor(DbApiQueryExecutor):
    """vertica_python connections"""
    db_type = 'vertica'


def wrap_connection(connection, db_type):
    """
    Wrap an open connection in the executor matching its database type

    Args:
        connection: Open database connection
        db_type: Database type ('postgresql', 'greenplum', 'vertica', 'duckdb')

    Returns:
        QueryExecutor
    """
    db_type_lower = db_type.lower()
    if db_type_lower in ['postgresql', 'greenplum']:
        return PostgresQueryExecutor(connection)
    elif db_type_lower == 'vertica':
        return VerticaQueryExecutor(connection)
    elif db_type_lower == 'duckdb':
        return DuckDBQueryExecutor(connection)
    raise ValueError(f"Unsupported database type: {db_type}")


def create_query_executor(db_config, db_type):
    """Open a connection from db_config and wrap it in a QueryExecutor"""
    return wrap_connection(create_data_source_connection(db_config, db_type), db_type)
