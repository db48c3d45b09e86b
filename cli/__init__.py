"""Command line entrypoints shared by the arqtree tooling."""
