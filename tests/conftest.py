"""
Shared fixtures: a controllable clock and an in-memory store
"""
import pytest

from courtage.cache.manager import CacheManager, set_cache_manager
from courtage.cache.store import MemoryKeyValueStore


class FakeClock:
    """Epoch-millisecond clock advanced by hand"""

    def __init__(self, now: int = 1_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, millis: int) -> None:
        self.now += millis


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryKeyValueStore()


@pytest.fixture
def cache(store, clock):
    return CacheManager(store, clock=clock)


@pytest.fixture(autouse=True)
def reset_default_manager():
    """Keep tests from sharing (or connecting) the process-wide manager"""
    set_cache_manager(None)
    yield
    set_cache_manager(None)
