"""bumpgraph command line interface."""

from bumpgraph.cli.app import app, main

__all__ = ["app", "main"]
