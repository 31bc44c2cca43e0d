"""
opledger CLI — Typer application.

Entry point::

    opledger --help
"""

from opledger.cli.app import app

__all__ = ["app"]
