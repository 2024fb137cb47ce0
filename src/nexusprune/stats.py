"""Integer latency statistics for the ``[PERF]`` log lines.

Millisecond samples are small integers, so everything stays in integer
arithmetic.
"""

from __future__ import annotations

from typing import Sequence


def arithmetic_mean(values: Sequence[int]) -> int:
    """Return the mean of ``values`` truncated toward zero.

    Raises ``ZeroDivisionError`` for an empty sequence.
    """

    total = sum(values)
    quotient = abs(total) // len(values)
    return quotient if total >= 0 else -quotient


def median(values: Sequence[int]) -> int:
    """Return the median of ``values`` without reordering them.

    Even-length input yields the truncated mean of the two middle values.
    """

    if not values:
        raise ValueError("median requires at least one value")
    ordered = sorted(values)
    middle = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return arithmetic_mean(ordered[middle - 1 : middle + 1])
    return ordered[middle]


__all__ = ["arithmetic_mean", "median"]
