from __future__ import annotations

from typing import Any, Callable, Iterable, List, Optional

from arqtree.core.algebra import Algebra, ensure_algebra
from arqtree.core.ranges import as_value_list, clamp_range, split
from arqtree.logging import get_logger

LOGGER = get_logger("core.static_tree")


def _capacity_for(size: int) -> int:
    capacity = 1
    while capacity < size:
        capacity <<= 1
    return 2 * capacity


class StaticArq:
    """Array-backed range-query tree over a fixed number of elements.

    Nodes are heap-indexed (root ``1``, children ``2i`` and ``2i + 1``) and
    cover half-open spans split at their midpoint, so every span counts only
    real elements. Both backing lists are allocated once, at construction.

    Ranges passed to :meth:`update` and :meth:`query` are closed ``[low,
    high]`` and clamped to the structure; empty ranges are no-ops for updates
    and return ``algebra.identity_value`` for queries.
    """

    def __init__(self, algebra: Algebra, values: Iterable[Any] = ()) -> None:
        self.algebra = ensure_algebra(algebra)
        leaves = as_value_list(values)
        self._size = len(leaves)
        capacity = _capacity_for(max(self._size, 1))
        self._values: List[Any] = [algebra.identity_value] * capacity
        self._pending: List[Any] = [algebra.identity_update] * capacity
        if self._size:
            self._build(1, 0, self._size, leaves)
        LOGGER.debug("Built static tree over %d elements (%d slots)", self._size, capacity)

    @classmethod
    def build(cls, values: Iterable[Any], algebra: Algebra) -> "StaticArq":
        return cls(algebra, values)

    @classmethod
    def from_size(cls, size: int, algebra: Algebra, fill: Any = None) -> "StaticArq":
        if size < 0:
            raise ValueError(f"Tree size must be non-negative, got {size}.")
        value = algebra.identity_value if fill is None else fill
        return cls(algebra, [value] * size)

    def __len__(self) -> int:
        return self._size

    def __getitem__(self, index: int) -> Any:
        return self.point_query(index)

    def __repr__(self) -> str:
        return f"StaticArq(size={self._size}, algebra={self.algebra!r})"

    def _build(self, node: int, lo: int, hi: int, leaves: List[Any]) -> None:
        if hi - lo == 1:
            self._values[node] = leaves[lo]
            return
        mid = split(lo, hi)
        self._build(2 * node, lo, mid, leaves)
        self._build(2 * node + 1, mid, hi, leaves)
        self._pull(node)

    def _pull(self, node: int) -> None:
        self._values[node] = self.algebra.combine(
            self._values[2 * node], self._values[2 * node + 1]
        )

    def _apply(self, node: int, lo: int, hi: int, update: Any) -> None:
        algebra = self.algebra
        self._values[node] = algebra.apply(update, self._values[node], hi - lo)
        if hi - lo > 1:
            self._pending[node] = algebra.compose(self._pending[node], update)

    def _push(self, node: int, lo: int, hi: int) -> None:
        update = self._pending[node]
        if self.algebra.is_identity_update(update):
            return
        mid = split(lo, hi)
        self._apply(2 * node, lo, mid, update)
        self._apply(2 * node + 1, mid, hi, update)
        self._pending[node] = self.algebra.identity_update

    def update(self, low: int, high: int, update: Any) -> None:
        """Apply ``update`` to every element of ``[low, high]``."""

        bounds = clamp_range(low, high, self._size)
        if bounds is None:
            return
        self._update(1, 0, self._size, bounds[0], bounds[1], update)

    def _update(self, node: int, lo: int, hi: int, left: int, right: int, update: Any) -> None:
        if right <= lo or hi <= left:
            return
        if left <= lo and hi <= right:
            self._apply(node, lo, hi, update)
            return
        self._push(node, lo, hi)
        mid = split(lo, hi)
        self._update(2 * node, lo, mid, left, right, update)
        self._update(2 * node + 1, mid, hi, left, right, update)
        self._pull(node)

    def query(self, low: int, high: int) -> Any:
        """Return the ordered aggregate of ``[low, high]``."""

        bounds = clamp_range(low, high, self._size)
        if bounds is None:
            return self.algebra.identity_value
        return self._query(1, 0, self._size, bounds[0], bounds[1])

    def _query(self, node: int, lo: int, hi: int, left: int, right: int) -> Any:
        if right <= lo or hi <= left:
            return self.algebra.identity_value
        if left <= lo and hi <= right:
            return self._values[node]
        self._push(node, lo, hi)
        mid = split(lo, hi)
        return self.algebra.combine(
            self._query(2 * node, lo, mid, left, right),
            self._query(2 * node + 1, mid, hi, left, right),
        )

    def point_query(self, index: int) -> Any:
        return self.query(index, index)

    def find_prefix(self, predicate: Callable[[Any], bool]) -> Optional[int]:
        """Smallest ``r`` with ``predicate(query(0, r))`` true, or ``None``.

        ``predicate`` must be monotone along prefixes: once it holds for some
        prefix it holds for every longer one.
        """

        if self._size == 0 or not predicate(self._values[1]):
            return None
        algebra = self.algebra
        node, lo, hi = 1, 0, self._size
        prefix = algebra.identity_value
        while hi - lo > 1:
            self._push(node, lo, hi)
            mid = split(lo, hi)
            candidate = algebra.combine(prefix, self._values[2 * node])
            if predicate(candidate):
                node, hi = 2 * node, mid
            else:
                prefix = candidate
                node, lo = 2 * node + 1, mid
        return lo

    def to_list(self) -> List[Any]:
        """Return every element, pushing all pending updates to the leaves."""

        leaves: List[Any] = []
        if self._size:
            self._collect(1, 0, self._size, leaves)
        return leaves

    def _collect(self, node: int, lo: int, hi: int, out: List[Any]) -> None:
        if hi - lo == 1:
            out.append(self._values[node])
            return
        self._push(node, lo, hi)
        mid = split(lo, hi)
        self._collect(2 * node, lo, mid, out)
        self._collect(2 * node + 1, mid, hi, out)


__all__ = ["StaticArq"]
