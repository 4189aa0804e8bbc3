#!/usr/bin/env python3
"""
Command line entry point: print the queries of a parallel export

Usage:
    peq-build-queries --table users
    peq-build-queries --db-type duckdb --database data.duckdb --table users \\
        --split-column id --query-parallelism 4
    peq-build-queries --db-type postgresql --host db --database app --username export \\
        --sql-file orders.sql --table orders --partition-column created \\
        --partition 2027-01-01 --partition-period 1mo --split-column id --query-parallelism 8

The database password is read from PEQ_DB_PASSWORD.
"""

import argparse
import json
import os
import sys
from pathlib import Path

import duckdb
import psycopg2
import vertica_python

from peq.bounds_probe import BoundsProbeError
from peq.database_utils import SUPPORTED_DB_TYPES
from peq.export_query_spec import ExportQuerySpec
from peq.query_executors import create_query_executor


def build_parser():
    parser = argparse.ArgumentParser(
        prog='peq-build-queries',
        description='Build the queries of a parallel table export'
    )
    source = parser.add_argument_group('source database')
    source.add_argument('--db-type', choices=SUPPORTED_DB_TYPES, default='postgresql')
    source.add_argument('--host')
    source.add_argument('--port', type=int)
    source.add_argument('--database', help='database name, or file path for duckdb')
    source.add_argument('--username')

    query = parser.add_argument_group('export query')
    query.add_argument('--table', required=True)
    query.add_argument('--sql-file', type=Path, help='file holding a SELECT used instead of the table')
    query.add_argument('--limit', type=int)
    query.add_argument('--partition-column')
    query.add_argument('--partition', help='first day of the partition window (YYYY-MM-DD)')
    query.add_argument('--partition-period', help="window length, e.g. 1d, 1mo or P1M (default 1d)")
    query.add_argument('--split-column')
    query.add_argument('--query-parallelism', type=int)

    parser.add_argument('--format', choices=['text', 'json'], default='text')
    return parser


def spec_from_args(args) -> ExportQuerySpec:
    sql_query = args.sql_file.read_text() if args.sql_file else None
    return ExportQuerySpec.create(
        args.table,
        sql_query=sql_query,
        limit=args.limit,
        partition_column=args.partition_column,
        partition=args.partition,
        partition_period=args.partition_period,
        split_column=args.split_column,
        parallelism=args.query_parallelism,
    )


def db_config_from_args(args):
    return {
        'host': args.host,
        'port': args.port,
        'database': args.database,
        'username': args.username,
        'password': os.getenv('PEQ_DB_PASSWORD', ''),
        'read_only': True,
    }


def main(argv=None):
    args = build_parser().parse_args(argv)

    executor = None
    try:
        spec = spec_from_args(args)
        # Only the bounds probe needs a connection
        if spec.is_split:
            executor = create_query_executor(db_config_from_args(args), args.db_type)
        queries = spec.build_queries(executor)
    except (ValueError, OSError, BoundsProbeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (psycopg2.Error, vertica_python.Error, duckdb.Error) as e:
        print(f"Error: {type(e).__name__}: {e}", file=sys.stderr)
        return 1
    finally:
        if executor is not None:
            executor.close()

    if args.format == 'json':
        print(json.dumps(queries, indent=2))
    else:
        for query in queries:
            print(query)
    return 0


if __name__ == '__main__':
    sys.exit(main())
