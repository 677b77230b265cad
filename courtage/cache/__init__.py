"""
Cache module for the Alliance Courtage client
Provides TTL caching over a shared key-value store and cache-aware fetch resources
"""

from .config import CacheConfig, CacheKeys, CacheTTL
from .decorators import cache_result, invalidate_cache_on_update
from .hooks import CachedResource, ManualCache, ResourceState
from .manager import (
    CacheManager,
    clear_all_cache,
    clear_cached_data,
    get_cache_manager,
    get_cache_stats,
    get_cached_data,
    set_cache_manager,
    set_cached_data,
)
from .models import CacheEntry, CacheStats
from .store import KeyValueStore, MemoryKeyValueStore, RedisKeyValueStore, StorageQuotaExceeded

__all__ = [
    'CacheConfig',
    'CacheKeys',
    'CacheTTL',
    'CacheManager',
    'CacheEntry',
    'CacheStats',
    'CachedResource',
    'ManualCache',
    'ResourceState',
    'KeyValueStore',
    'MemoryKeyValueStore',
    'RedisKeyValueStore',
    'StorageQuotaExceeded',
    'cache_result',
    'invalidate_cache_on_update',
    'get_cache_manager',
    'set_cache_manager',
    'get_cached_data',
    'set_cached_data',
    'clear_cached_data',
    'clear_all_cache',
    'get_cache_stats',
]
