#!/usr/bin/env python3
"""
Query Builder Configuration for Parallel Exports
Defaults for bounds probing, base query wrapping, partition windows and logging
"""

import os
from typing import Dict, Any, Tuple

# QUERY BUILDER CONFIGURATION
QUERY_BUILDER_CONFIG = {
    # Aggregate query used to find the split column range
    'bounds_probe': {
        'min_column_name': 'min_s',
        'max_column_name': 'max_s',
        'subquery_alias': 'limits_query',
    },

    # Raw SQL is wrapped in a sub-select so predicates can be appended
    'base_query': {
        'raw_sql_alias': 'user_sql_query',
    },

    # Partition window settings (polars offset strings)
    'partitioning': {
        'default_period': '1d',
        'allowed_units': ('d', 'w', 'mo', 'q', 'y'),
    },

    'logging': {
        'level': os.getenv('PEQ_LOG_LEVEL', 'INFO'),
        'file_path': os.getenv('PEQ_LOG_FILE', '/tmp/peq.log'),
    },

    'connection': {
        'default_ports': {
            'postgresql': 5432,
            'greenplum': 5432,
            'vertica': 5433,
        },
    },
}


def get_probe_column_names() -> Tuple[str, str]:
    """Column aliases of the min/max values returned by the bounds probe"""
    config = QUERY_BUILDER_CONFIG['bounds_probe']
    return config['min_column_name'], config['max_column_name']


def get_default_partition_period() -> str:
    return QUERY_BUILDER_CONFIG['partitioning']['default_period']


def get_log_settings() -> Dict[str, Any]:
    """
    Get logging settings

    Returns:
        Dict with 'level' and 'file_path' (empty file_path disables file logging)
    """
    return dict(QUERY_BUILDER_CONFIG['logging'])


def get_default_port(db_type: str) -> int:
    """
    Get default port for a database type

    Args:
        db_type: Database type ('postgresql', 'greenplum', 'vertica')

    Returns:
        Default port number
    """
    ports = QUERY_BUILDER_CONFIG['connection']['default_ports']
    db_type_lower = db_type.lower()
    if db_type_lower not in ports:
        raise ValueError(f"No default port known for database type: {db_type}")
    return ports[db_type_lower]
