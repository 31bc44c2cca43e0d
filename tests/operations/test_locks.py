"""Tests for KeyedLock per-key mutual exclusion."""

import threading
import time

from opledger.operations.locks import KeyedLock


class TestKeyedLock:
    def test_hold_and_release(self):
        locks = KeyedLock()
        with locks.hold("op-1"):
            assert locks.is_locked("op-1")
            assert locks.active_keys() == ["op-1"]
        assert not locks.is_locked("op-1")
        assert locks.active_keys() == []

    def test_released_on_exception(self):
        locks = KeyedLock()
        try:
            with locks.hold("op-1"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert not locks.is_locked("op-1")
        assert locks.active_keys() == []

    def test_different_keys_do_not_block(self):
        locks = KeyedLock()
        entered = threading.Event()

        def other():
            with locks.hold("op-2"):
                entered.set()

        with locks.hold("op-1"):
            t = threading.Thread(target=other)
            t.start()
            assert entered.wait(timeout=2)
            t.join(timeout=2)

    def test_same_key_serializes(self):
        locks = KeyedLock()
        inside = 0
        max_inside = 0
        guard = threading.Lock()

        def worker():
            nonlocal inside, max_inside
            with locks.hold("op-1"):
                with guard:
                    inside += 1
                    max_inside = max(max_inside, inside)
                time.sleep(0.001)
                with guard:
                    inside -= 1

        threads = [threading.Thread(target=worker) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert max_inside == 1
        assert locks.active_keys() == []
