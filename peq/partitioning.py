"""
Partition window helpers

A partition is a date and a period; the export reads the half-open window
[partition, partition + period) of the partition column. Periods are Polars
offset strings limited to date units, e.g. '1d', '1w', '1mo', '1q', '1y'.
"""

import re
from datetime import date, datetime
from typing import Union

import polars as pl

from peq.export_config import QUERY_BUILDER_CONFIG


ISO_PERIOD_PATTERN = re.compile(
    r'^P(?:(?P<y>\d+)Y)?(?:(?P<mo>\d+)M)?(?:(?P<w>\d+)W)?(?:(?P<d>\d+)D)?$'
)


def _offset_pattern():
    units = '|'.join(QUERY_BUILDER_CONFIG['partitioning']['allowed_units'])
    return re.compile(rf'^(?:\d+(?:{units}))+$')


def normalize_partition_period(period: str) -> str:
    """
    Validate a partition period and return it as a Polars offset string

    Accepts Polars offsets ('1d', '1mo', '1y2mo') and ISO-8601 date periods
    ('P1D', 'P1M', 'P2W', 'P1Y').
    """
    if not period or not isinstance(period, str):
        raise ValueError(f"Invalid partition period: {period!r}")

    period = period.strip()
    iso_match = ISO_PERIOD_PATTERN.match(period.upper())
    if iso_match and any(iso_match.groupdict().values()):
        period = ''.join(
            f"{int(amount)}{unit}"
            for unit, amount in iso_match.groupdict().items()
            if amount
        )

    if not _offset_pattern().match(period):
        raise ValueError(f"Invalid partition period: {period!r}")

    # A period adding nothing would give an empty window
    if all(int(n) == 0 for n in re.findall(r'\d+', period)):
        raise ValueError(f"Partition period must be positive: {period!r}")
    return period


def to_partition_date(partition: Union[date, datetime, str]) -> date:
    """Truncate a datetime or parse an ISO date string to a date"""
    if isinstance(partition, datetime):
        return partition.date()
    if isinstance(partition, date):
        return partition
    if isinstance(partition, str):
        try:
            return datetime.fromisoformat(partition.strip()).date()
        except ValueError:
            raise ValueError(f"Invalid partition date: {partition!r}") from None
    raise ValueError(f"Invalid partition date: {partition!r}")


def next_partition(partition: date, period: str) -> date:
    """
    First date after the partition window

    Month, quarter and year offsets are calendar aware, e.g.
    2027-01-31 + 1mo = 2027-02-28
    """
    return pl.Series([partition], dtype=pl.Date).dt.offset_by(period).item()
