"""Command line front-end for arqtree benchmarks and verification."""

from .main import app, main

__all__ = ["app", "main"]
