"""Arqtree: associative range queries over user-supplied algebras.

Quick Start
-----------
>>> from arqtree import AddSum, StaticArq, DynamicArq
>>>
>>> # Range add / range sum over a fixed sequence
>>> tree = StaticArq(AddSum(), [1, 3, 5, 7])
>>> tree.update(1, 2, 10)
>>> tree.query(0, 1)
14
>>>
>>> # Sparse persistent tree over a huge domain
>>> v0 = DynamicArq.sparse(10**9, AddSum(), persistent=True)
>>> v1 = v0.update(500_000, 500_000, 5)
>>> v0.query(0, 10**9 - 1), v1.query(0, 10**9 - 1)
(0, 5)

Classes
-------
StaticArq : Array-backed tree over a known number of elements.
DynamicArq : Sparse pointer-based tree with optional persistence.
Algebra : Contract for combine / compose / apply and their identities.
"""

from importlib.metadata import version as _pkg_version

try:
    __version__ = _pkg_version("arqtree")
except Exception:  # pragma: no cover - best effort during local development
    __version__ = "0.0.1"

from .core import (
    AddMax,
    AddMin,
    AddSum,
    AffineSum,
    Algebra,
    ArqNode,
    AssignMax,
    AssignMin,
    AssignSum,
    DynamicArq,
    MonoidAlgebra,
    StaticArq,
    check_algebra_laws,
)
from .algo import DistinctCounter, MoQuery, MoResult, MoState, run_mo, solve, solve_state

__all__ = [
    "__version__",
    # Trees
    "StaticArq",
    "DynamicArq",
    "ArqNode",
    # Algebras
    "Algebra",
    "AddSum",
    "AddMin",
    "AddMax",
    "AssignSum",
    "AssignMin",
    "AssignMax",
    "AffineSum",
    "MonoidAlgebra",
    "check_algebra_laws",
    # Mo's algorithm
    "MoQuery",
    "MoResult",
    "MoState",
    "DistinctCounter",
    "run_mo",
    "solve",
    "solve_state",
]
