"""
TTL Cache Manager for the Alliance Courtage client
Memoizes JSON-serializable values in a shared key-value store with per-entry expiry
"""
import logging
import time
from typing import Any, Callable, Optional

from pydantic import ValidationError

from .config import CacheConfig
from .models import CacheEntry, CacheStats
from .serialization import JsonSerializer, Serializer
from .store import KeyValueStore, MemoryKeyValueStore, StorageQuotaExceeded

logger = logging.getLogger(__name__)

WriteFailedCallback = Callable[[str, Exception], None]


def current_millis() -> int:
    """Milliseconds since the epoch"""
    return int(time.time() * 1000)


class CacheManager:
    """Key-value cache manager with TTL expiry and quota recovery

    Every entry lives under ``CacheConfig.NAMESPACE + key`` so the store can be
    shared with unrelated client data (the auth token, for instance). Cache
    failures never propagate: the cache is an optimization, the caller keeps
    the value it fetched.
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        serializer: Optional[Serializer] = None,
        clock: Optional[Callable[[], int]] = None,
        config: Optional[CacheConfig] = None,
        on_cache_write_failed: Optional[WriteFailedCallback] = None,
    ):
        """Initialize cache manager; without a store every operation is a no-op"""
        self.store = store
        self.serializer = serializer or JsonSerializer()
        self.clock = clock or current_millis
        self.config = config or CacheConfig()
        self.on_cache_write_failed = on_cache_write_failed
        self.enabled = store is not None

        if not self.enabled:
            logger.warning("Cache manager initialized without a store - caching disabled")

    def _generate_key(self, key: str) -> str:
        """Generate store key with the namespace prefix"""
        return self.config.get_namespaced_key(key)

    def _namespaced_keys(self) -> list:
        return [k for k in self.store.keys(self.config.NAMESPACE) if self.config.is_namespaced(k)]

    def _parse_entry(self, raw: str) -> CacheEntry:
        """Deserialize a stored string; raises ValueError/TypeError on corrupt data"""
        document = self.serializer.deserialize(raw)
        if not isinstance(document, dict):
            raise ValueError("Cache entry is not an object")
        return CacheEntry.model_validate(document)

    def _encode_entry(self, data: Any, ttl: int) -> str:
        entry = CacheEntry.build(data, self.clock(), ttl)
        return self.serializer.serialize(entry.to_document())

    def _report_write_failure(self, key: str, error: Exception) -> None:
        if self.on_cache_write_failed is None:
            return
        try:
            self.on_cache_write_failed(key, error)
        except Exception as e:
            logger.error(f"Cache write-failure callback raised for {key}: {e}")

    def get_cached_data(self, key: str) -> Optional[Any]:
        """Get cached data if it exists and is not expired"""
        cache_key = self._generate_key(key)
        if not self.enabled:
            return None

        try:
            raw = self.store.get_item(cache_key)
        except Exception as e:
            logger.error(f"Cache GET error for {key}: {e}")
            return None

        if raw is None:
            logger.debug(f"Cache MISS: {cache_key}")
            return None

        try:
            entry = self._parse_entry(raw)
        except (ValueError, TypeError, ValidationError) as e:
            logger.warning(f"Discarding corrupt cache entry {cache_key}: {e}")
            self._remove(cache_key)
            return None

        if entry.is_expired(self.clock()):
            logger.debug(f"Cache EXPIRED: {cache_key}")
            self._remove(cache_key)
            return None

        logger.debug(f"Cache HIT: {cache_key}")
        return entry.data

    def set_cached_data(self, key: str, data: Any, ttl: Optional[int] = None) -> None:
        """Set cached data with expiration; ttl is in milliseconds"""
        cache_key = self._generate_key(key)
        ttl = self.config.validate_ttl(self.config.DEFAULT_TTL if ttl is None else ttl)
        if not self.enabled:
            return

        try:
            entry_string = self._encode_entry(data, ttl)
        except Exception as e:
            logger.error(f"Cache SET error for {key}: value is not serializable: {e}")
            self._report_write_failure(key, e)
            return

        entry_size = len(entry_string.encode("utf-8"))
        if entry_size > self.config.MAX_ENTRY_BYTES:
            logger.warning(
                f"Skipping cache for key {key}: data too large ({entry_size / 1024 / 1024:.2f}MB)"
            )
            self._report_write_failure(key, ValueError(f"Entry of {entry_size} bytes exceeds cache limit"))
            return

        try:
            self.store.set_item(cache_key, entry_string)
            logger.debug(f"Cache SET: {cache_key} (TTL: {ttl}ms)")
            return
        except StorageQuotaExceeded as e:
            logger.warning(f"Quota exceeded writing {cache_key}, clearing old cache entries: {e}")
        except Exception as e:
            logger.error(f"Cache SET error for {key}: {e}")
            self._report_write_failure(key, e)
            return

        evicted = self.clear_old_cache_entries()
        logger.info(f"Evicted {evicted} cache entries, retrying write for {cache_key}")

        try:
            # Rebuilt so createdAt reflects the actual write
            self.store.set_item(cache_key, self._encode_entry(data, ttl))
            logger.debug(f"Cache SET after eviction: {cache_key} (TTL: {ttl}ms)")
        except Exception as e:
            logger.warning(f"Failed to set cache for {key} after clearing old entries, skipping cache: {e}")
            self._report_write_failure(key, e)

    def clear_cached_data(self, key: str) -> None:
        """Clear cached data for a specific key"""
        cache_key = self._generate_key(key)
        if not self.enabled:
            return
        self._remove(cache_key)
        logger.debug(f"Cache DELETE: {cache_key}")

    def clear_all_cache(self) -> int:
        """Clear every namespaced entry, leaving other store data untouched"""
        if not self.enabled:
            return 0

        try:
            cache_keys = self._namespaced_keys()
        except Exception as e:
            logger.error(f"Error listing cache entries: {e}")
            return 0

        for cache_key in cache_keys:
            self._remove(cache_key)
        logger.info(f"Cache CLEAR: {len(cache_keys)} entries removed")
        return len(cache_keys)

    def clear_old_cache_entries(self) -> int:
        """Remove entries older than the eviction horizon, expired or unreadable

        Returns the number of removed entries.
        """
        if not self.enabled:
            return 0

        now = self.clock()
        threshold = now - self.config.EVICTION_HORIZON
        removed = 0

        try:
            cache_keys = self._namespaced_keys()
        except Exception as e:
            logger.error(f"Error clearing old cache entries: {e}")
            return 0

        for cache_key in cache_keys:
            try:
                raw = self.store.get_item(cache_key)
                if raw is None:
                    continue
                entry = self._parse_entry(raw)
                stale = entry.created_at < threshold or entry.is_expired(now)
            except (ValueError, TypeError, ValidationError):
                stale = True
            except Exception as e:
                logger.error(f"Error reading cache entry {cache_key} during eviction: {e}")
                continue

            if stale and self._remove(cache_key):
                removed += 1

        return removed

    def get_cache_stats(self) -> CacheStats:
        """Get cache statistics; unreadable entries are skipped"""
        stats = CacheStats()
        if not self.enabled:
            return stats

        try:
            cache_keys = self._namespaced_keys()
        except Exception as e:
            logger.error(f"Error getting cache stats: {e}")
            return stats

        for cache_key in cache_keys:
            try:
                raw = self.store.get_item(cache_key)
                if raw is None:
                    continue
                entry = self._parse_entry(raw)
            except Exception:
                continue

            stats.total_entries += 1
            stats.total_size_bytes += len(raw)
            if stats.oldest_entry_timestamp is None or entry.created_at < stats.oldest_entry_timestamp:
                stats.oldest_entry_timestamp = entry.created_at
            if stats.newest_entry_timestamp is None or entry.created_at > stats.newest_entry_timestamp:
                stats.newest_entry_timestamp = entry.created_at

        return stats

    def _remove(self, cache_key: str) -> bool:
        try:
            self.store.remove_item(cache_key)
            return True
        except Exception as e:
            logger.error(f"Cache DELETE error for {cache_key}: {e}")
            return False

    # Health and monitoring
    def health_check(self) -> dict:
        """Check cache health and return status"""
        if not self.enabled:
            return {"status": "disabled", "store_available": False}

        try:
            stats = self.get_cache_stats()
            return {
                "status": "healthy",
                "store_available": True,
                "store": type(self.store).__name__,
                "entries": stats.total_entries,
                "size_bytes": stats.total_size_bytes,
            }
        except Exception as e:
            logger.error(f"Cache health check failed: {e}")
            return {"status": "error", "store_available": False, "error": str(e)}


_default_manager: Optional[CacheManager] = None


def get_cache_manager() -> CacheManager:
    """Get the process-wide cache manager, backed by redis when it is reachable"""
    global _default_manager
    if _default_manager is None:
        from .connection import get_redis
        from .store import RedisKeyValueStore

        redis_client = get_redis()
        if redis_client is not None:
            _default_manager = CacheManager(RedisKeyValueStore(redis_client))
        else:
            logger.warning("Redis not available - using in-memory cache store")
            _default_manager = CacheManager(MemoryKeyValueStore())
    return _default_manager


def set_cache_manager(manager: Optional[CacheManager]) -> None:
    """Replace the process-wide cache manager; ``None`` rebuilds it lazily"""
    global _default_manager
    _default_manager = manager


def get_cached_data(key: str) -> Optional[Any]:
    return get_cache_manager().get_cached_data(key)


def set_cached_data(key: str, data: Any, ttl: Optional[int] = None) -> None:
    get_cache_manager().set_cached_data(key, data, ttl)


def clear_cached_data(key: str) -> None:
    get_cache_manager().clear_cached_data(key)


def clear_all_cache() -> int:
    return get_cache_manager().clear_all_cache()


def get_cache_stats() -> CacheStats:
    return get_cache_manager().get_cache_stats()
