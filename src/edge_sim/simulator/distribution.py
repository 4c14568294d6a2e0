"""Histogram of terminal outcomes."""

from __future__ import annotations

from bisect import bisect_right
from typing import Sequence

from edge_sim.simulator.models import DistributionBucket

DEFAULT_BUCKET_COUNT = 20


def bucketize(values: Sequence[float], bucket_count: int = DEFAULT_BUCKET_COUNT) -> list[DistributionBucket]:
    """Split values into equal-width buckets spanning [min, max].

    Buckets are half-open except the last, which also holds the maximum.
    A zero range gets unit width. Empty buckets are kept.
    """
    if bucket_count < 1:
        raise ValueError("bucket_count must be at least 1")
    if len(values) == 0:
        return []

    low = float(min(values))
    high = float(max(values))
    width = (high - low) / bucket_count if high > low else 1.0

    edges = [low + i * width for i in range(bucket_count + 1)]
    counts = [0] * bucket_count
    for value in values:
        index = bisect_right(edges, value) - 1
        counts[min(max(index, 0), bucket_count - 1)] += 1

    total = len(values)
    return [
        DistributionBucket(
            range_start=edges[i],
            range_end=edges[i + 1],
            count=count,
            percentage=count / total * 100.0,
        )
        for i, count in enumerate(counts)
    ]
