"""
Database utility functions for the parallel export query builder.

Opens the source connection the bounds probe runs against.
"""

import duckdb
import psycopg2
import vertica_python

from peq.enhanced_logger import logger
from peq.export_config import get_default_port


SUPPORTED_DB_TYPES = ('postgresql', 'greenplum', 'vertica', 'duckdb')


def create_data_source_connection(db_config, db_type):
    """
    Create database connection for data source (PostgreSQL/Greenplum/Vertica/DuckDB)

    Args:
        db_config: Database configuration dictionary
        db_type: Database type ('postgresql', 'greenplum', 'vertica', 'duckdb')

    Returns:
        Database connection object
    """
    db_type_lower = db_type.lower()
    if db_type_lower in ['postgresql', 'greenplum']:
        logger.debug(f"Connecting to {db_type_lower} at {db_config['host']}")
        return psycopg2.connect(
            host=db_config['host'],
            port=db_config.get('port') or get_default_port(db_type_lower),
            database=db_config['database'],
            user=db_config['username'],
            password=db_config['password']
        )
    elif db_type_lower == 'vertica':
        logger.debug(f"Connecting to vertica at {db_config['host']}")
        return vertica_python.connect(
            host=db_config['host'],
            port=db_config.get('port') or get_default_port(db_type_lower),
            database=db_config['database'],
            user=db_config['username'],
            password=db_config['password']
        )
    elif db_type_lower == 'duckdb':
        database = db_config.get('database')
        if not database:
            return duckdb.connect(':memory:')
        return duckdb.connect(database, read_only=db_config.get('read_only', False))
    else:
        raise ValueError(f"Unsupported database type for data source: {db_type}")
