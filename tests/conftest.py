"""
Shared pytest fixtures for opledger tests.

This module provides:
- A deterministic clock so timestamps can be asserted exactly
- Registries over memory and SQLite stores
- Step factory helpers

Usage:
    def test_something(registry, make_step):
        op = registry.create_operation("ws-1", "/workspaces/ws-1", 1, "deploy")
        registry.record_step_update(op.id, make_step("vm", "deploying"))
"""

import sys
from pathlib import Path

import pytest

# Ensure opledger package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from opledger.core.settings import get_settings
from opledger.operations import MemoryOperationStore, OperationRegistry, OperationStep, SQLiteOperationStore


class FakeClock:
    """Callable clock that advances one second per reading."""

    def __init__(self, start: float = 1_700_000_000.0, step: float = 1.0) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        return value


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry(clock) -> OperationRegistry:
    return OperationRegistry(MemoryOperationStore(), clock=clock)


@pytest.fixture
def sqlite_store():
    store = SQLiteOperationStore(":memory:")
    yield store
    store.close()


@pytest.fixture
def make_step():
    """Factory for OperationStep with sensible defaults."""

    def _make(step_id: str, status: str, message: str = "", **kw) -> OperationStep:
        kw.setdefault("step_title", f"Step {step_id}")
        kw.setdefault("updated_when", 1_700_000_000.0)
        return OperationStep(step_id=step_id, status=status, message=message, **kw)

    return _make


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
