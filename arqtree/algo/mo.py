from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Iterable, Sequence, Tuple, Union

import numpy as np

from arqtree import config as arq_config
from arqtree.core.ranges import as_value_list, clamp_range
from arqtree.logging import get_logger

LOGGER = get_logger("algo.mo")


@dataclass(frozen=True)
class MoQuery:
    """Closed range ``[low, high]`` tagged with an opaque identifier."""

    low: int
    high: int
    id: Hashable


QueryLike = Union[MoQuery, Tuple[int, int, Hashable]]


@dataclass(frozen=True)
class MoResult:
    answers: Dict[Hashable, Any]
    order: Any
    moves: int
    block_size: int


class MoState(ABC):
    """Incremental window state driven by :func:`solve_state`."""

    @abstractmethod
    def add(self, position: int) -> None:
        """Extend the window to include ``position``."""

    @abstractmethod
    def remove(self, position: int) -> None:
        """Shrink the window to exclude ``position``."""

    @abstractmethod
    def answer(self) -> Any:
        """Answer for the current window."""


class DistinctCounter(MoState):
    """Counts distinct values inside the window."""

    def __init__(self, values: Iterable[Hashable]) -> None:
        self.values = as_value_list(values)
        self._counts: Counter = Counter()
        self._distinct = 0

    def add(self, position: int) -> None:
        value = self.values[position]
        if self._counts[value] == 0:
            self._distinct += 1
        self._counts[value] += 1

    def remove(self, position: int) -> None:
        value = self.values[position]
        self._counts[value] -= 1
        if self._counts[value] == 0:
            self._distinct -= 1

    def answer(self) -> int:
        return self._distinct


def _as_query(query: QueryLike) -> MoQuery:
    if isinstance(query, MoQuery):
        return query
    low, high, query_id = query
    return MoQuery(int(low), int(high), query_id)


def default_block_size(n: int, q: int) -> int:
    """``ceil(n / sqrt(q))``, at least one."""

    if n <= 0 or q <= 0:
        return 1
    return max(1, math.ceil(n / math.sqrt(q)))


def _normalise_bounds(query: MoQuery, n: int) -> Tuple[int, int]:
    bounds = clamp_range(query.low, query.high, n)
    if bounds is None:
        start = min(max(int(query.low), 0), n)
        return start, start - 1
    return bounds[0], bounds[1] - 1


def order_queries(
    queries: Sequence[QueryLike], block_size: int, *, alternate: bool = True
) -> np.ndarray:
    """Permutation visiting ``queries`` in block order.

    Queries are sorted by ``(low // block_size, high)``; with ``alternate`` the
    ``high`` key is reversed on odd blocks so the right pointer sweeps back and
    forth instead of rewinding. Ties keep input order.
    """

    if block_size < 1:
        raise ValueError(f"Block size must be positive, got {block_size}.")
    if len(queries) == 0:
        return np.zeros((0,), dtype=np.int64)
    parsed = [_as_query(query) for query in queries]
    lows = np.asarray([query.low for query in parsed], dtype=np.int64)
    highs = np.asarray([query.high for query in parsed], dtype=np.int64)
    blocks = np.maximum(lows, 0) // block_size
    if alternate:
        highs = np.where(blocks % 2 == 1, -highs, highs)
    # lexsort orders by the last key first and is stable.
    return np.lexsort((highs, blocks))


def run_mo(
    n: int,
    queries: Sequence[QueryLike],
    add: Callable[[int], None],
    remove: Callable[[int], None],
    answer: Callable[[], Any],
    *,
    block_size: int | None = None,
    alternate: bool | None = None,
) -> MoResult:
    """Answer a static batch of range queries by sweeping a two-pointer window.

    The window starts empty. For each query, in block order, the window is
    first extended and then shrunk one position at a time through ``add`` and
    ``remove`` until it matches the query, and ``answer()`` is recorded.
    Ranges are closed and clamped to ``[0, n)``; empty ranges are answered on an
    empty window.
    """

    if n < 0:
        raise ValueError(f"Sequence length must be non-negative, got {n}.")
    runtime = arq_config.runtime_config()
    parsed = [_as_query(query) for query in queries]
    if block_size is None:
        block_size = runtime.mo_block_size or default_block_size(n, len(parsed))
    if alternate is None:
        alternate = runtime.mo_alternate

    order = order_queries(parsed, block_size, alternate=alternate)
    answers: Dict[Hashable, Any] = {}
    cur_low, cur_high = 0, -1
    moves = 0
    for idx in order.tolist():
        query = parsed[idx]
        low, high = _normalise_bounds(query, n)
        while cur_high < high:
            cur_high += 1
            add(cur_high)
            moves += 1
        while cur_low > low:
            cur_low -= 1
            add(cur_low)
            moves += 1
        while cur_high > high:
            remove(cur_high)
            cur_high -= 1
            moves += 1
        while cur_low < low:
            remove(cur_low)
            cur_low += 1
            moves += 1
        answers[query.id] = answer()

    LOGGER.debug(
        "Mo sweep answered %d queries over n=%d with block size %d in %d pointer moves",
        len(parsed),
        n,
        block_size,
        moves,
    )
    return MoResult(answers=answers, order=order, moves=moves, block_size=block_size)


def solve(
    n: int,
    queries: Sequence[QueryLike],
    add: Callable[[int], None],
    remove: Callable[[int], None],
    answer: Callable[[], Any],
    *,
    block_size: int | None = None,
    alternate: bool | None = None,
) -> Dict[Hashable, Any]:
    """Map each query id to its answer. See :func:`run_mo`."""

    return run_mo(
        n, queries, add, remove, answer, block_size=block_size, alternate=alternate
    ).answers


def solve_state(
    n: int,
    queries: Sequence[QueryLike],
    state: MoState,
    *,
    block_size: int | None = None,
    alternate: bool | None = None,
) -> Dict[Hashable, Any]:
    return solve(
        n,
        queries,
        state.add,
        state.remove,
        state.answer,
        block_size=block_size,
        alternate=alternate,
    )


__all__ = [
    "DistinctCounter",
    "MoQuery",
    "MoResult",
    "MoState",
    "default_block_size",
    "order_queries",
    "run_mo",
    "solve",
    "solve_state",
]
