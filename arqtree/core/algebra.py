"""Operation algebras driving the range-query trees.

An algebra bundles an associative ``combine`` over aggregate values, an
associative ``compose`` over pending updates, and an ``apply`` mapping an
update onto the aggregate of a span of ``size`` elements. The trees never
assume ``combine`` is commutative: left operands always come from lower
indices.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from itertools import product
from typing import Any, Callable, Iterable, List, Sequence


class Algebra(ABC):
    """Contract every tree instantiation relies on.

    Subclasses provide ``identity_value`` and ``identity_update`` (as class or
    instance attributes) and must satisfy::

        combine(identity_value, v) == v == combine(v, identity_value)
        apply(identity_update, v, n) == v
        apply(compose(u1, u2), v, n) == apply(u2, apply(u1, v, n), n)
        apply(u, combine(a, b), na + nb) == combine(apply(u, a, na), apply(u, b, nb))

    Violations are not detected at runtime; they silently corrupt aggregates.
    Use :func:`check_algebra_laws` to validate a new algebra offline.
    """

    identity_value: Any
    identity_update: Any

    @abstractmethod
    def combine(self, left: Any, right: Any) -> Any:
        """Merge the aggregates of two adjacent spans, ``left`` first."""

    @abstractmethod
    def compose(self, first: Any, second: Any) -> Any:
        """Return a single update equivalent to applying ``first`` then ``second``."""

    @abstractmethod
    def apply(self, update: Any, value: Any, size: int) -> Any:
        """Apply ``update`` to the aggregate ``value`` of ``size`` elements."""

    def is_identity_update(self, update: Any) -> bool:
        return update == self.identity_update

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and vars(self) == vars(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class AddSum(Algebra):
    """Range sum with range add."""

    identity_value = 0
    identity_update = 0

    def combine(self, left, right):
        return left + right

    def compose(self, first, second):
        return first + second

    def apply(self, update, value, size):
        return value + update * size


class AddMin(Algebra):
    """Range minimum with range add."""

    identity_value = math.inf
    identity_update = 0

    def combine(self, left, right):
        return min(left, right)

    def compose(self, first, second):
        return first + second

    def apply(self, update, value, size):
        return value + update


class AddMax(Algebra):
    """Range maximum with range add."""

    identity_value = -math.inf
    identity_update = 0

    def combine(self, left, right):
        return max(left, right)

    def compose(self, first, second):
        return first + second

    def apply(self, update, value, size):
        return value + update


def _compose_assignments(first: Any, second: Any) -> Any:
    return first if second is None else second


class AssignSum(Algebra):
    """Range sum with range assignment. ``None`` is the no-op update."""

    identity_value = 0
    identity_update = None

    def combine(self, left, right):
        return left + right

    def compose(self, first, second):
        return _compose_assignments(first, second)

    def apply(self, update, value, size):
        return value if update is None else update * size

    def is_identity_update(self, update):
        return update is None


class AssignMin(Algebra):
    """Range minimum with range assignment. ``None`` is the no-op update."""

    identity_value = math.inf
    identity_update = None

    def combine(self, left, right):
        return min(left, right)

    def compose(self, first, second):
        return _compose_assignments(first, second)

    def apply(self, update, value, size):
        return value if update is None else update

    def is_identity_update(self, update):
        return update is None


class AssignMax(AssignMin):
    """Range maximum with range assignment. ``None`` is the no-op update."""

    identity_value = -math.inf

    def combine(self, left, right):
        return max(left, right)


class AffineSum(Algebra):
    """Range sum under affine maps ``x -> a * x + b`` stored as ``(a, b)``.

    Composition of affine maps does not commute, which makes this algebra a
    useful check on update ordering.
    """

    identity_value = 0
    identity_update = (1, 0)

    def combine(self, left, right):
        return left + right

    def compose(self, first, second):
        a1, b1 = first
        a2, b2 = second
        return (a1 * a2, a2 * b1 + b2)

    def apply(self, update, value, size):
        a, b = update
        return a * value + b * size


class MonoidAlgebra(Algebra):
    """Wrap a plain monoid ``(op, identity)`` with point assignment updates.

    ``op`` only has to be associative, so string concatenation or matrix
    products work. Assignments replace the aggregate wholesale, so updates are
    only meaningful on single-element ranges.
    """

    identity_update = None

    def __init__(self, op: Callable[[Any, Any], Any], identity: Any) -> None:
        self.op = op
        self.identity_value = identity

    def combine(self, left, right):
        return self.op(left, right)

    def compose(self, first, second):
        return _compose_assignments(first, second)

    def apply(self, update, value, size):
        return value if update is None else update

    def is_identity_update(self, update):
        return update is None

    def __repr__(self) -> str:
        name = getattr(self.op, "__name__", repr(self.op))
        return f"MonoidAlgebra(op={name}, identity={self.identity_value!r})"


def ensure_algebra(algebra: Any) -> Algebra:
    if not isinstance(algebra, Algebra):
        raise TypeError(f"Expected an Algebra instance, got {type(algebra).__name__}.")
    return algebra


def check_algebra_laws(
    algebra: Algebra,
    values: Iterable[Any],
    updates: Iterable[Any],
    *,
    sizes: Sequence[int] = (1, 2, 3),
) -> List[str]:
    """Evaluate the algebra laws on sample elements.

    Returns the names of the violated laws in a stable order; an empty list
    means every sampled instance held.
    """

    values = list(values)
    updates = list(updates)
    e_val = algebra.identity_value
    e_upd = algebra.identity_update
    violated: List[str] = []

    def record(name: str, holds: bool) -> None:
        if not holds and name not in violated:
            violated.append(name)

    for v in values:
        record(
            "combine_identity",
            algebra.combine(e_val, v) == v and algebra.combine(v, e_val) == v,
        )
    for a, b, c in product(values, repeat=3):
        record(
            "combine_associativity",
            algebra.combine(algebra.combine(a, b), c) == algebra.combine(a, algebra.combine(b, c)),
        )
    for v, n in product(values, sizes):
        record("apply_identity", algebra.apply(e_upd, v, n) == v)
    for u, v, n in product(updates, values, sizes):
        expected = algebra.apply(u, v, n)
        record(
            "compose_identity",
            algebra.apply(algebra.compose(e_upd, u), v, n) == expected
            and algebra.apply(algebra.compose(u, e_upd), v, n) == expected,
        )
    for u1, u2, v, n in product(updates, updates, values, sizes):
        record(
            "apply_compose",
            algebra.apply(algebra.compose(u1, u2), v, n)
            == algebra.apply(u2, algebra.apply(u1, v, n), n),
        )
    for u1, u2, u3, v in product(updates, updates, updates, values):
        left = algebra.compose(algebra.compose(u1, u2), u3)
        right = algebra.compose(u1, algebra.compose(u2, u3))
        record(
            "compose_associativity",
            algebra.apply(left, v, 1) == algebra.apply(right, v, 1),
        )
    for u, a, b, na, nb in product(updates, values, values, sizes, sizes):
        record(
            "apply_distributes",
            algebra.apply(u, algebra.combine(a, b), na + nb)
            == algebra.combine(algebra.apply(u, a, na), algebra.apply(u, b, nb)),
        )
    return violated
