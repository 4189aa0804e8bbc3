#!/usr/bin/env python3
"""
Range-Based Chunking for Parallel Table Exports
Splits the [min, max] range of an integer split column into contiguous ranges,
never more than the requested parallelism
"""

from typing import List
from dataclasses import dataclass

from peq.enhanced_logger import logger


class RangeInvariantError(RuntimeError):
    """More ranges were generated than the requested parallelism"""


@dataclass(frozen=True)
class SplitRange:
    """One range of split column values: lower is inclusive, upper inclusive only for the last range"""
    lower: int
    upper: int
    upper_inclusive: bool = False


class RangeChunker:
    """
    Calculates contiguous, non-overlapping ranges covering [min_value, max_value]
    """

    def __init__(self, min_value: int, max_value: int, parallelism: int):
        if parallelism <= 0:
            raise ValueError(f"Parallelism must be a positive number, got {parallelism}")
        self.min_value = min_value
        self.max_value = max_value
        self.parallelism = parallelism

    @property
    def bucket_size(self) -> int:
        """
        Span of values assigned to each range

        Rounded up so the ranges never outnumber the parallelism. When
        max <= min the span is not positive, so it is forced to 1 to still produce one range.
        """
        span = self.max_value - self.min_value
        bucket_size = -(-span // self.parallelism)
        return bucket_size if bucket_size > 0 else 1

    def calculate_ranges(self) -> List[SplitRange]:
        """
        Calculate range boundaries

        Returns:
            List of SplitRange; all ranges are half-open except the last one,
            which includes max_value
        """
        bucket_size = self.bucket_size
        ranges = []

        i = self.min_value
        while i + bucket_size < self.max_value:
            ranges.append(SplitRange(i, i + bucket_size, upper_inclusive=False))
            i += bucket_size

        # Last range gets the remaining values including max
        ranges.append(SplitRange(i, self.max_value, upper_inclusive=True))

        # If parallelism is higher than max - min this generates fewer ranges,
        # but never more
        if len(ranges) > self.parallelism:
            raise RangeInvariantError(
                f"Generated {len(ranges)} ranges for parallelism {self.parallelism} "
                f"(min={self.min_value}, max={self.max_value})"
            )

        logger.ranges_calculated(len(ranges), bucket_size)
        return ranges


def calculate_ranges(min_value: int, max_value: int, parallelism: int) -> List[SplitRange]:
    """
    Split [min_value, max_value] into at most `parallelism` contiguous ranges

    Args:
        min_value: Smallest split column value
        max_value: Largest split column value
        parallelism: Maximum number of ranges

    Returns:
        Ordered list of SplitRange
    """
    return RangeChunker(min_value, max_value, parallelism).calculate_ranges()
