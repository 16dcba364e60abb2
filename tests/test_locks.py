"""Tests for KeyedLock."""

import threading
import time

from azorch.locks import KeyedLock


def test_same_key_is_exclusive():
    locks = KeyedLock()
    active = []
    overlaps = []

    def work():
        with locks.hold("p"):
            active.append(1)
            if len(active) > 1:
                overlaps.append(True)
            time.sleep(0.01)
            active.pop()

    threads = [threading.Thread(target=work) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert overlaps == []


def test_different_keys_do_not_block():
    locks = KeyedLock()
    entered = threading.Event()

    def other():
        with locks.hold("b"):
            entered.set()

    with locks.hold("a"):
        thread = threading.Thread(target=other)
        thread.start()
        assert entered.wait(timeout=1)
        thread.join()


def test_locks_dropped_after_use():
    locks = KeyedLock()

    with locks.hold("a"):
        assert len(locks) == 1

    assert len(locks) == 0


def test_released_on_error():
    locks = KeyedLock()

    try:
        with locks.hold("a"):
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    assert len(locks) == 0
    with locks.hold("a"):
        pass
