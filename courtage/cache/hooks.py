"""
Cache-aware fetch resources
Bind an async fetch function to a cache key and expose data/loading/error state
"""
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, List, Optional, TypeVar

from .config import CacheConfig, CacheTTL
from .manager import CacheManager, get_cache_manager

logger = logging.getLogger(__name__)

T = TypeVar("T")

FetchFn = Callable[[], Awaitable[T]]

_UNSET: Any = object()


@dataclass(frozen=True)
class ResourceState(Generic[T]):
    """Snapshot of a resource's observable state"""

    data: Optional[T]
    loading: bool
    error: Optional[Exception]


StateListener = Callable[[ResourceState], None]


class CachedResource(Generic[T]):
    """Fetch-through-cache resource with activate/deactivate lifecycle

    Consumers call ``activate()`` when they start showing the data and
    ``deactivate()`` when they stop. Changing the key (or ``enabled``,
    ``invalidate_on_mount``, the fetch function) through ``update()`` while
    active runs the activation again.

    A failed fetch keeps the previous ``data`` and sets ``error``, so a view
    can keep showing stale data next to the error message.
    """

    def __init__(
        self,
        fetch_fn: FetchFn,
        key: str,
        ttl: int = CacheTTL.MEDIUM,
        enabled: bool = True,
        invalidate_on_mount: bool = False,
        cache: Optional[CacheManager] = None,
    ):
        self.fetch_fn = fetch_fn
        self.key = key
        self.ttl = CacheConfig.validate_ttl(ttl)
        self.enabled = enabled
        self.invalidate_on_mount = invalidate_on_mount
        self.cache = cache or get_cache_manager()

        self.data: Optional[T] = None
        self.loading = True
        self.error: Optional[Exception] = None

        self.active = False
        self._generation = 0
        self._listeners: List[StateListener] = []

    @property
    def state(self) -> ResourceState:
        return ResourceState(data=self.data, loading=self.loading, error=self.error)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a state listener; returns a function removing it"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, **changes: Any) -> None:
        for name, value in changes.items():
            setattr(self, name, value)
        snapshot = self.state
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"State listener failed for key {self.key}: {e}")

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def activate(self) -> None:
        """Mount: optionally drop the cached entry, then load"""
        self.active = True
        self._generation += 1
        if self.invalidate_on_mount:
            self.cache.clear_cached_data(self.key)
        await self.load()

    def deactivate(self) -> None:
        """Unmount: results of loads still in flight are ignored"""
        self.active = False
        self._generation += 1
        if self.loading:
            self._set_state(loading=False)

    async def update(
        self,
        key: Optional[str] = None,
        ttl: Optional[int] = None,
        enabled: Optional[bool] = None,
        invalidate_on_mount: Optional[bool] = None,
        fetch_fn: Any = _UNSET,
    ) -> None:
        """Apply new options, re-activating when an identity-relevant one changed"""
        if ttl is not None:
            ttl = CacheConfig.validate_ttl(ttl)
        changed = False
        if key is not None and key != self.key:
            self.key = key
            changed = True
        if enabled is not None and enabled != self.enabled:
            self.enabled = enabled
            changed = True
        if invalidate_on_mount is not None and invalidate_on_mount != self.invalidate_on_mount:
            self.invalidate_on_mount = invalidate_on_mount
            changed = True
        if fetch_fn is not _UNSET and fetch_fn is not self.fetch_fn:
            self.fetch_fn = fetch_fn
            changed = True
        if ttl is not None:
            self.ttl = ttl

        if changed and self.active:
            await self.activate()

    async def load(self, use_cache: bool = True) -> None:
        """Serve from the cache when allowed, otherwise fetch and cache"""
        generation = self._generation
        key = self.key
        self._set_state(loading=True, error=None)

        try:
            if self.enabled and use_cache:
                cached = self.cache.get_cached_data(key)
                if cached is not None:
                    logger.debug(f"Serving {key} from cache")
                    self._set_state(data=cached)
                    return

            result = await self.fetch_fn()

            if self.enabled:
                self.cache.set_cached_data(key, result, self.ttl)

            if self._is_current(generation):
                self._set_state(data=result)
        except Exception as e:
            logger.error(f"Error fetching data for key {key}: {e}")
            if self._is_current(generation):
                self._set_state(error=e)
        finally:
            if self._is_current(generation):
                self._set_state(loading=False)

    async def refresh(self) -> None:
        """Force a live fetch, skipping the cache read"""
        await self.load(use_cache=False)

    def invalidate(self) -> None:
        """Drop the cached entry and the current data without fetching"""
        self.cache.clear_cached_data(self.key)
        self._set_state(data=None)


class ManualCache(Generic[T]):
    """Cache access for one key without a lifecycle; callers decide when to fetch"""

    def __init__(self, key: str, ttl: int = CacheTTL.MEDIUM, cache: Optional[CacheManager] = None):
        self.key = key
        self.ttl = CacheConfig.validate_ttl(ttl)
        self.cache = cache or get_cache_manager()
        self.data: Optional[T] = self.cache.get_cached_data(key)

    def set_cache(self, value: T) -> None:
        self.cache.set_cached_data(self.key, value, self.ttl)
        self.data = value

    def get_cache(self) -> Optional[T]:
        return self.cache.get_cached_data(self.key)

    def clear_cache(self) -> None:
        self.cache.clear_cached_data(self.key)
        self.data = None

    async def refresh_cache(self, fetch_fn: FetchFn) -> T:
        """Fetch live data, cache it and return it; fetch errors are re-raised"""
        try:
            result = await fetch_fn()
        except Exception as e:
            logger.error(f"Error refreshing cache for key {self.key}: {e}")
            raise
        self.cache.set_cached_data(self.key, result, self.ttl)
        self.data = result
        return result
