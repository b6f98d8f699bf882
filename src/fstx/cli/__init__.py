"""CLI entrypoints for fstx."""

from fstx.cli.run import app as run_app

__all__ = ["run_app"]
