"""
opledger - operation lifecycle engine for managed resources.

Records long-running actions (deploy, update, delete, invoke custom action)
against managed resources, aggregates the progress executors report, and
classifies every status for consumers.

- opledger.core:       errors, logging, settings, timestamps
- opledger.operations: taxonomy, step ledger, aggregator, registry
- opledger.api:        FastAPI application factory
- opledger.cli:        ``opledger`` command line
"""

__version__ = "0.1.0"
