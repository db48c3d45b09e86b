from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Literal

import numpy as np
from numpy.random import Generator, default_rng

from arqtree import config as arq_config
from arqtree.algo import DistinctCounter, MoQuery, solve_state
from arqtree.core import (
    AddMax,
    AddMin,
    AddSum,
    AffineSum,
    Algebra,
    AssignMax,
    AssignMin,
    AssignSum,
    DynamicArq,
    StaticArq,
)
from arqtree.logging import get_logger

LOGGER = get_logger("cli.workloads")

Variant = Literal["static", "dynamic", "persistent"]

ALGEBRAS: Dict[str, Callable[[], Algebra]] = {
    "add-sum": AddSum,
    "add-min": AddMin,
    "add-max": AddMax,
    "assign-sum": AssignSum,
    "assign-min": AssignMin,
    "assign-max": AssignMax,
    "affine-sum": AffineSum,
}


@dataclass(frozen=True)
class WorkloadResult:
    variant: str
    algebra: str
    size: int
    updates: int
    queries: int
    elapsed_seconds: float
    operations_per_second: float
    nodes: int | None = None


@dataclass(frozen=True)
class VerificationReport:
    checks: int
    mismatches: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.mismatches


def resolve_seed(seed: int | None) -> int:
    if seed is not None:
        return seed
    return arq_config.runtime_config().seed or 0


def _random_update(rng: Generator, algebra_name: str) -> Any:
    if algebra_name == "affine-sum":
        return (int(rng.integers(-2, 3)), int(rng.integers(-5, 6)))
    return int(rng.integers(-10, 11))


def _random_range(rng: Generator, size: int) -> tuple[int, int]:
    low, high = sorted(int(x) for x in rng.integers(0, size, size=2))
    return low, high


def build_tree(variant: Variant, algebra: Algebra, values: np.ndarray) -> Any:
    if variant == "static":
        return StaticArq.build(values, algebra)
    if variant == "dynamic":
        return DynamicArq.build(values, algebra)
    if variant == "persistent":
        return DynamicArq.build(values, algebra, persistent=True)
    raise ValueError(f"Unknown tree variant '{variant}'.")


def run_workload(
    *,
    size: int,
    operations: int,
    algebra: str = "add-sum",
    variant: Variant = "static",
    seed: int | None = None,
) -> WorkloadResult:
    """Time a random interleaving of range updates and range queries."""

    if size < 1:
        raise ValueError(f"Workload size must be positive, got {size}.")
    if algebra not in ALGEBRAS:
        raise ValueError(f"Unknown algebra '{algebra}'. Expected one of {sorted(ALGEBRAS)}.")
    rng = default_rng(resolve_seed(seed))
    instance = ALGEBRAS[algebra]()
    values = rng.integers(-100, 101, size=size)
    tree = build_tree(variant, instance, values)

    updates = queries = 0
    start = time.perf_counter()
    for _ in range(operations):
        low, high = _random_range(rng, size)
        if rng.random() < 0.5:
            result = tree.update(low, high, _random_update(rng, algebra))
            if variant == "persistent":
                tree = result
            updates += 1
        else:
            tree.query(low, high)
            queries += 1
    elapsed = time.perf_counter() - start
    throughput = operations / elapsed if elapsed > 0 else float("inf")
    nodes = tree.node_count() if isinstance(tree, DynamicArq) else None
    LOGGER.debug("Workload %s/%s finished in %.4fs", variant, algebra, elapsed)
    return WorkloadResult(
        variant=variant,
        algebra=algebra,
        size=size,
        updates=updates,
        queries=queries,
        elapsed_seconds=elapsed,
        operations_per_second=throughput,
        nodes=nodes,
    )


def _check_trees(rng: Generator, size: int, operations: int, mismatches: List[str]) -> int:
    algebra = AddSum()
    values = rng.integers(-50, 51, size=size)
    naive = values.tolist()
    static = StaticArq.build(values, algebra)
    dynamic = DynamicArq.build(values, algebra)
    persistent = DynamicArq.build(values, algebra, persistent=True)
    initial_version, initial_values = persistent, list(naive)
    checks = 0

    for step in range(operations):
        low, high = _random_range(rng, size)
        if step % 2 == 0:
            delta = int(rng.integers(-10, 11))
            for idx in range(low, high + 1):
                naive[idx] += delta
            static.update(low, high, delta)
            dynamic.update(low, high, delta)
            persistent = persistent.update(low, high, delta)
            continue
        expected = sum(naive[low : high + 1])
        for name, tree in (("static", static), ("dynamic", dynamic), ("persistent", persistent)):
            got = tree.query(low, high)
            checks += 1
            if got != expected:
                mismatches.append(f"{name} query [{low}, {high}]: expected {expected}, got {got}")
        got = initial_version.query(low, high)
        checks += 1
        if got != sum(initial_values[low : high + 1]):
            mismatches.append(f"initial version changed on [{low}, {high}]")
    return checks


def _check_mo(rng: Generator, size: int, count: int, mismatches: List[str]) -> int:
    values = rng.integers(0, max(1, size // 4), size=size).tolist()
    queries = []
    for query_id in range(count):
        low, high = _random_range(rng, size)
        queries.append(MoQuery(low, high, query_id))
    answers = solve_state(size, queries, DistinctCounter(values))
    for query in queries:
        expected = len(set(values[query.low : query.high + 1]))
        if answers[query.id] != expected:
            mismatches.append(
                f"mo query {query.id} [{query.low}, {query.high}]: expected {expected}, got {answers[query.id]}"
            )
    return len(queries)


def verify_against_naive(*, size: int, queries: int, seed: int | None = None) -> VerificationReport:
    """Cross-check every structure against a plain list model."""

    if size < 1:
        raise ValueError(f"Verification size must be positive, got {size}.")
    rng = default_rng(resolve_seed(seed))
    mismatches: List[str] = []
    checks = _check_trees(rng, size, 2 * queries, mismatches)
    checks += _check_mo(rng, size, queries, mismatches)
    return VerificationReport(checks=checks, mismatches=mismatches)


__all__ = [
    "ALGEBRAS",
    "VerificationReport",
    "WorkloadResult",
    "build_tree",
    "resolve_seed",
    "run_workload",
    "verify_against_naive",
]
