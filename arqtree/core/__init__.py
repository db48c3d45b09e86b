"""Core data structures and operation algebras for range queries."""

from .algebra import (
    AddMax,
    AddMin,
    AddSum,
    AffineSum,
    Algebra,
    AssignMax,
    AssignMin,
    AssignSum,
    MonoidAlgebra,
    check_algebra_laws,
)
from .dynamic_tree import ArqNode, DynamicArq
from .static_tree import StaticArq

__all__ = [
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
    "ArqNode",
    "DynamicArq",
    "StaticArq",
]
