from __future__ import annotations

import json
from dataclasses import asdict
from typing import Optional

import typer

from arqtree import config as arq_config

from .workloads import ALGEBRAS, run_workload, verify_against_naive

_HELP = """Associative range query (ARQ) command line interface.

Subcommands cover benchmarking, verification, and runtime configuration."""

app = typer.Typer(
    add_completion=False,
    pretty_exceptions_enable=False,
    context_settings={"help_option_names": ["-h", "--help"]},
    help=_HELP,
)


@app.callback()
def arq_callback() -> None:
    """Root callback reserved for shared options (none yet)."""
    pass


@app.command("bench")
def bench(
    size: int = typer.Option(1024, "--size", min=1, help="Number of elements."),
    operations: int = typer.Option(10_000, "--operations", min=0, help="Random updates and queries."),
    algebra: str = typer.Option("add-sum", "--algebra", help=f"One of {', '.join(sorted(ALGEBRAS))}."),
    variant: str = typer.Option("static", "--variant", help="static, dynamic or persistent."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Overrides ARQTREE_SEED."),
    as_json: bool = typer.Option(False, "--json", help="Emit the result as JSON."),
) -> None:
    """Time a random interleaved update/query workload."""

    if algebra not in ALGEBRAS:
        raise typer.BadParameter(f"unknown algebra '{algebra}'", param_hint="--algebra")
    if variant not in ("static", "dynamic", "persistent"):
        raise typer.BadParameter(f"unknown variant '{variant}'", param_hint="--variant")
    result = run_workload(
        size=size,
        operations=operations,
        algebra=algebra,
        variant=variant,  # type: ignore[arg-type]
        seed=seed,
    )
    if as_json:
        typer.echo(json.dumps(asdict(result), indent=2, sort_keys=True))
        return
    typer.echo(
        f"{result.variant}/{result.algebra} n={result.size}: "
        f"{result.updates} updates, {result.queries} queries in {result.elapsed_seconds:.4f}s "
        f"({result.operations_per_second:,.0f} ops/s)"
    )
    if result.nodes is not None:
        typer.echo(f"materialised nodes: {result.nodes}")


@app.command("verify")
def verify(
    size: int = typer.Option(64, "--size", min=1, help="Number of elements."),
    queries: int = typer.Option(200, "--queries", min=0, help="Queries per structure."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Overrides ARQTREE_SEED."),
) -> None:
    """Cross-check every structure against a naive list model."""

    report = verify_against_naive(size=size, queries=queries, seed=seed)
    for mismatch in report.mismatches:
        typer.echo(f"MISMATCH {mismatch}", err=True)
    if not report.ok:
        typer.echo(f"{len(report.mismatches)} of {report.checks} checks failed")
        raise typer.Exit(code=1)
    typer.echo(f"all {report.checks} checks passed")


@app.command("config")
def show_config() -> None:
    """Print the resolved runtime configuration."""

    typer.echo(json.dumps(arq_config.runtime_config().describe(), indent=2, sort_keys=True))


def main() -> None:
    app()


__all__ = ["app", "main"]
