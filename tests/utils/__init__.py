"""Shared test utilities for arqtree."""

from .naive import NaiveArray, random_operations

__all__ = ["NaiveArray", "random_operations"]
