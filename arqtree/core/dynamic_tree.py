from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable, List, Optional

from arqtree.core.algebra import Algebra, ensure_algebra
from arqtree.core.ranges import as_value_list, clamp_range, split
from arqtree.logging import get_logger

LOGGER = get_logger("core.dynamic_tree")


@dataclass(eq=False)
class ArqNode:
    """Pointer-based tree node.

    ``value`` already reflects ``pending``; ``pending`` is what the children
    have not seen yet. An absent child stands for a subtree of identity values.
    """

    value: Any
    pending: Any
    left: Optional["ArqNode"] = None
    right: Optional["ArqNode"] = None

    def clone(self) -> "ArqNode":
        return ArqNode(self.value, self.pending, self.left, self.right)


@dataclass
class DynamicArq:
    """Sparse, optionally persistent range-query tree over ``size`` elements.

    Nodes are created only when an update path enters them, so the index
    domain may be far larger than the number of touched elements.

    In persistent mode an instance is an immutable version: :meth:`update`
    copies the nodes on its path and returns a new ``DynamicArq`` sharing every
    untouched subtree with ``self``. Old versions stay valid for as long as they
    are referenced. In the default, non-persistent mode updates mutate nodes in
    place and return ``None``.

    Queries never mutate nodes in either mode: pending updates are composed on
    the way down instead of being pushed.
    """

    algebra: Algebra
    size: int
    root: Optional[ArqNode] = None
    persistent: bool = False

    def __post_init__(self) -> None:
        ensure_algebra(self.algebra)
        if self.size < 0:
            raise ValueError(f"Tree size must be non-negative, got {self.size}.")

    @classmethod
    def sparse(cls, size: int, algebra: Algebra, *, persistent: bool = False) -> "DynamicArq":
        """Tree over ``size`` identity elements with nothing materialised."""

        return cls(algebra=algebra, size=size, persistent=persistent)

    @classmethod
    def build(
        cls, values: Iterable[Any], algebra: Algebra, *, persistent: bool = False
    ) -> "DynamicArq":
        ensure_algebra(algebra)
        leaves = as_value_list(values)
        root = _build_nodes(algebra, leaves, 0, len(leaves)) if leaves else None
        LOGGER.debug("Built dynamic tree over %d elements (persistent=%s)", len(leaves), persistent)
        return cls(algebra=algebra, size=len(leaves), root=root, persistent=persistent)

    @classmethod
    def merge(cls, left: "DynamicArq", right: "DynamicArq") -> "DynamicArq":
        """Concatenate two persistent versions of equal size.

        Both roots become children of a new root, so neither input is copied
        and both remain valid.
        """

        if not (left.persistent and right.persistent):
            raise ValueError("Only persistent trees can be merged.")
        if left.size != right.size:
            raise ValueError(f"Cannot merge trees of sizes {left.size} and {right.size}.")
        if left.algebra != right.algebra:
            raise ValueError("Cannot merge trees built over different algebras.")
        algebra = left.algebra
        if left.size == 0:
            return cls(algebra=algebra, size=0, persistent=True)
        value = algebra.combine(_value_of(algebra, left.root), _value_of(algebra, right.root))
        root = ArqNode(value, algebra.identity_update, left.root, right.root)
        LOGGER.debug("Merged two versions of size %d", left.size)
        return cls(algebra=algebra, size=2 * left.size, root=root, persistent=True)

    @property
    def is_persistent(self) -> bool:
        return self.persistent

    def persist(self) -> "DynamicArq":
        """Persistent view sharing this tree's nodes.

        The non-persistent original must not be updated afterwards, since its
        in-place mutations would leak into the returned version.
        """

        return replace(self, persistent=True)

    def __len__(self) -> int:
        return self.size

    def __repr__(self) -> str:
        return (
            f"DynamicArq(size={self.size}, algebra={self.algebra!r}, "
            f"persistent={self.persistent})"
        )

    def _new_node(self) -> ArqNode:
        return ArqNode(self.algebra.identity_value, self.algebra.identity_update)

    def _own(self, node: Optional[ArqNode], owned: bool) -> ArqNode:
        if node is None:
            return self._new_node()
        if owned or not self.persistent:
            return node
        return node.clone()

    def _apply(self, node: ArqNode, size: int, update: Any) -> None:
        algebra = self.algebra
        node.value = algebra.apply(update, node.value, size)
        if size > 1:
            node.pending = algebra.compose(node.pending, update)

    def _push(self, node: ArqNode, lo: int, hi: int) -> bool:
        update = node.pending
        if self.algebra.is_identity_update(update):
            return False
        mid = split(lo, hi)
        node.left = self._own(node.left, owned=False)
        node.right = self._own(node.right, owned=False)
        self._apply(node.left, mid - lo, update)
        self._apply(node.right, hi - mid, update)
        node.pending = self.algebra.identity_update
        return True

    def _pull(self, node: ArqNode) -> None:
        algebra = self.algebra
        node.value = algebra.combine(
            _value_of(algebra, node.left), _value_of(algebra, node.right)
        )

    def update(self, low: int, high: int, update: Any) -> Optional["DynamicArq"]:
        """Apply ``update`` to every element of ``[low, high]``.

        Returns the new version in persistent mode (``self`` when the range is
        empty) and ``None`` otherwise.
        """

        bounds = clamp_range(low, high, self.size)
        if bounds is None:
            return self if self.persistent else None
        root = self._update(self.root, 0, self.size, bounds[0], bounds[1], update, owned=False)
        if self.persistent:
            return replace(self, root=root)
        self.root = root
        return None

    def _update(
        self,
        node: Optional[ArqNode],
        lo: int,
        hi: int,
        left: int,
        right: int,
        update: Any,
        *,
        owned: bool,
    ) -> Optional[ArqNode]:
        if right <= lo or hi <= left:
            return node
        node = self._own(node, owned)
        if left <= lo and hi <= right:
            self._apply(node, hi - lo, update)
            return node
        # Children freshly copied by the push belong to this version already.
        pushed = self._push(node, lo, hi)
        mid = split(lo, hi)
        node.left = self._update(node.left, lo, mid, left, right, update, owned=pushed)
        node.right = self._update(node.right, mid, hi, left, right, update, owned=pushed)
        self._pull(node)
        return node

    def query(self, low: int, high: int) -> Any:
        """Return the ordered aggregate of ``[low, high]``."""

        bounds = clamp_range(low, high, self.size)
        if bounds is None:
            return self.algebra.identity_value
        return self._query(
            self.root, 0, self.size, bounds[0], bounds[1], self.algebra.identity_update
        )

    def _query(
        self, node: Optional[ArqNode], lo: int, hi: int, left: int, right: int, carried: Any
    ) -> Any:
        algebra = self.algebra
        if right <= lo or hi <= left:
            return algebra.identity_value
        if node is None:
            covered = min(hi, right) - max(lo, left)
            return algebra.apply(carried, algebra.identity_value, covered)
        if left <= lo and hi <= right:
            return algebra.apply(carried, node.value, hi - lo)
        carried = algebra.compose(node.pending, carried)
        mid = split(lo, hi)
        return algebra.combine(
            self._query(node.left, lo, mid, left, right, carried),
            self._query(node.right, mid, hi, left, right, carried),
        )

    def point_query(self, index: int) -> Any:
        return self.query(index, index)

    def __getitem__(self, index: int) -> Any:
        return self.point_query(index)

    def find_prefix(self, predicate: Callable[[Any], bool]) -> Optional[int]:
        """Smallest ``r`` with ``predicate(query(0, r))`` true, or ``None``.

        ``predicate`` must be monotone along prefixes. Runs in O(log size)
        without materialising any node.
        """

        algebra = self.algebra
        if self.size == 0 or not predicate(_value_of(algebra, self.root)):
            return None
        node, lo, hi = self.root, 0, self.size
        carried = algebra.identity_update
        prefix = algebra.identity_value
        while hi - lo > 1:
            mid = split(lo, hi)
            if node is not None:
                carried = algebra.compose(node.pending, carried)
                left_child, right_child = node.left, node.right
            else:
                left_child = right_child = None
            left_value = algebra.apply(carried, _value_of(algebra, left_child), mid - lo)
            candidate = algebra.combine(prefix, left_value)
            if predicate(candidate):
                node, hi = left_child, mid
            else:
                prefix = candidate
                node, lo = right_child, mid
        return lo

    def to_list(self) -> List[Any]:
        """Return every element in order. Materialises nothing."""

        out: List[Any] = []
        if self.size:
            self._collect(self.root, 0, self.size, self.algebra.identity_update, out)
        return out

    def _collect(
        self, node: Optional[ArqNode], lo: int, hi: int, carried: Any, out: List[Any]
    ) -> None:
        algebra = self.algebra
        if node is None:
            out.extend([algebra.apply(carried, algebra.identity_value, 1)] * (hi - lo))
            return
        if hi - lo == 1:
            out.append(algebra.apply(carried, node.value, 1))
            return
        carried = algebra.compose(node.pending, carried)
        mid = split(lo, hi)
        self._collect(node.left, lo, mid, carried, out)
        self._collect(node.right, mid, hi, carried, out)

    def node_count(self) -> int:
        """Number of distinct nodes reachable from this version."""

        seen: set[int] = set()
        stack = [self.root] if self.root is not None else []
        while stack:
            node = stack.pop()
            if id(node) in seen:
                continue
            seen.add(id(node))
            for child in (node.left, node.right):
                if child is not None:
                    stack.append(child)
        return len(seen)


def _value_of(algebra: Algebra, node: Optional[ArqNode]) -> Any:
    return algebra.identity_value if node is None else node.value


def _build_nodes(algebra: Algebra, leaves: List[Any], lo: int, hi: int) -> ArqNode:
    if hi - lo == 1:
        return ArqNode(leaves[lo], algebra.identity_update)
    mid = split(lo, hi)
    left = _build_nodes(algebra, leaves, lo, mid)
    right = _build_nodes(algebra, leaves, mid, hi)
    return ArqNode(algebra.combine(left.value, right.value), algebra.identity_update, left, right)


__all__ = ["ArqNode", "DynamicArq"]
