"""Offline range-query algorithms."""

from .mo import (
    DistinctCounter,
    MoQuery,
    MoResult,
    MoState,
    default_block_size,
    order_queries,
    run_mo,
    solve,
    solve_state,
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
