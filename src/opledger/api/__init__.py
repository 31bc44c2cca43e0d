"""
REST API layer for opledger.

Quick start::

    from opledger.api import create_app

    app = create_app()  # ready for uvicorn

This package owns the HTTP composition root only. Lifecycle rules live in
``opledger.operations``; the router lives beside the registry it serves.
"""

from opledger.api.app import create_app

__all__ = ["create_app"]
