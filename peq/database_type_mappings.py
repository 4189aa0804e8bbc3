"""
Database Type Mappings for Probe Result Schemas

This module maps driver type codes to database type names, and database type
names to Polars types, for PostgreSQL, Greenplum and Vertica result sets.
The bounds probe uses the Polars type to decide whether a split column is integral.
"""

import polars as pl

# psycopg2 reports column types as PostgreSQL type OIDs
POSTGRESQL_TYPE_OIDS = {
    16: 'boolean',
    20: 'bigint',
    21: 'smallint',
    23: 'integer',
    25: 'text',
    700: 'real',
    701: 'double precision',
    790: 'money',
    1042: 'character',
    1043: 'character varying',
    1082: 'date',
    1083: 'time',
    1114: 'timestamp',
    1184: 'timestamptz',
    1700: 'numeric',
    2950: 'uuid',
}

# vertica_python reports Vertica type ids
VERTICA_TYPE_CODES = {
    5: 'boolean',
    6: 'integer',
    7: 'float',
    8: 'char',
    9: 'varchar',
    10: 'date',
    11: 'time',
    12: 'timestamp',
    13: 'timestamptz',
    14: 'interval',
    15: 'time with time zone',
    16: 'numeric',
    17: 'varbinary',
    20: 'uuid',
    115: 'long varchar',
    116: 'long varbinary',
    117: 'binary',
}

# Polars types for the PostgreSQL/Greenplum type names above
POSTGRESQL_TYPE_MAPPING = {
    # Integer types
    'smallint': pl.Int16,
    'integer': pl.Int32,
    'bigint': pl.Int64,

    # Floating point and decimal types
    'real': pl.Float32,
    'double precision': pl.Float64,
    'numeric': pl.Float64,

    'boolean': pl.Boolean,

    # Date/Time types
    'date': pl.Date,
    'time': pl.Time,
    'timestamp': pl.Datetime,
    'timestamptz': pl.Datetime,

    # String types (psycopg2 returns money as formatted text)
    'character varying': pl.String,
    'character': pl.String,
    'text': pl.String,
    'money': pl.String,
    'uuid': pl.String,
}

# Polars types for the Vertica type names above (Vertica integers are always 64-bit)
VERTICA_TYPE_MAPPING = {
    'integer': pl.Int64,
    'float': pl.Float64,
    'numeric': pl.Float64,
    'boolean': pl.Boolean,
    'date': pl.Date,
    'time': pl.Time,
    'timestamp': pl.Datetime,
    'timestamptz': pl.Datetime,
    'char': pl.String,
    'varchar': pl.String,
    'long varchar': pl.String,
    'uuid': pl.String,
    'binary': pl.Binary,
    'varbinary': pl.Binary,
    'long varbinary': pl.Binary,
}


def get_type_mapping(db_type):
    """
    Get the appropriate type mapping dictionary for a database type

    Args:
        db_type (str): Database type ('postgresql', 'greenplum', 'vertica')

    Returns:
        dict: Mapping from database types to Polars types
    """
    if db_type.lower() == 'vertica':
        return VERTICA_TYPE_MAPPING
    return POSTGRESQL_TYPE_MAPPING


def get_type_code_mapping(db_type):
    """Mapping from driver type codes to database type names"""
    if db_type.lower() == 'vertica':
        return VERTICA_TYPE_CODES
    return POSTGRESQL_TYPE_OIDS


def type_name_from_code(type_code, db_type='postgresql'):
    """
    Resolve a DB-API cursor.description type_code to a database type name

    Unknown codes resolve to 'unknown'
    """
    return get_type_code_mapping(db_type).get(type_code, 'unknown')


def map_database_type_to_polars(database_type, db_type='postgresql'):
    """
    Map a single database type to its corresponding Polars type

    Args:
        database_type (str): Database type name, as produced by type_name_from_code
        db_type (str): The database system type

    Returns:
        polars.DataType: The corresponding Polars data type
    """
    # Types without a mapping keep the driver's Python values untouched
    return get_type_mapping(db_type).get(database_type, pl.Object)


def create_polars_schema_from_description(description, db_type='postgresql'):
    """
    Create a Polars schema dictionary from DB-API cursor.description

    Args:
        description: Sequence of column descriptors (name, type_code, ...)
        db_type (str): Database type for proper type mapping

    Returns:
        dict: Dictionary mapping column names to Polars types
    """
    schema = {}
    for column in description:
        # psycopg2 and vertica_python expose attributes, plain tuples do not
        name = getattr(column, 'name', None) or column[0]
        type_code = getattr(column, 'type_code', None) or column[1]
        type_name = type_name_from_code(type_code, db_type)
        schema[name] = map_database_type_to_polars(type_name, db_type)
    return schema


def is_integral_dtype(dtype) -> bool:
    """True for signed and unsigned Polars integer types"""
    return dtype.is_integer()
