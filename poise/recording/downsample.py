"""Uniform-stride downsampling of sample series for charts."""

import math
from typing import List, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_TARGET_COUNT = 180


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def downsample(samples: Sequence[T], target_count: int = DEFAULT_TARGET_COUNT) -> List[T]:
    """Reduce samples to target_count points by uniform stride.

    The first and last samples are always kept. Sequences already at or
    below target_count, or a target_count of 1 or less, come back unchanged.

    Args:
        samples: Ordered samples
        target_count: Maximum number of points to return

    Returns:
        List of selected samples in their original order
    """
    count = len(samples)
    if target_count <= 1 or count <= target_count:
        return list(samples)

    step = (count - 1) / (target_count - 1)
    return [samples[_round_half_up(i * step)] for i in range(target_count)]
