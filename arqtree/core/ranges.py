from __future__ import annotations

from typing import Any, List, Optional, Tuple

import numpy as np


def clamp_range(low: int, high: int, size: int) -> Optional[Tuple[int, int]]:
    """Clamp the closed range ``[low, high]`` to ``[0, size)``.

    Returns the equivalent half-open bounds, or ``None`` when the clamped range
    is empty (inverted, or entirely outside the domain).
    """

    start = max(int(low), 0)
    stop = min(int(high), size - 1) + 1
    if start >= stop:
        return None
    return start, stop


def as_value_list(values: Any) -> List[Any]:
    """Materialise ``values`` as a list of Python objects.

    Numpy arrays are converted element-wise to native scalars so algebras can
    rely on plain Python arithmetic.
    """

    if isinstance(values, np.ndarray):
        if values.ndim != 1:
            raise ValueError("Expected a 1-D array of values.")
        return values.tolist()
    return list(values)


def split(lo: int, hi: int) -> int:
    return (lo + hi) // 2
