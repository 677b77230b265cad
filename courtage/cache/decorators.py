"""
Cache decorators for API fetchers and data-changing calls
"""
import functools
import hashlib
import inspect
import json
import logging
from typing import Any, Callable, Optional

from .manager import CacheManager, get_cache_manager

logger = logging.getLogger(__name__)


def _resolve_cache_key(func: Callable, key: Optional[str], key_func: Optional[Callable], args, kwargs) -> str:
    if key_func:
        return key_func(*args, **kwargs)
    if key:
        return key
    # Default key generation from function name and args
    params = json.dumps({"args": args, "kwargs": kwargs}, sort_keys=True, default=str)
    return f"{func.__name__}_{hashlib.md5(params.encode()).hexdigest()}"


def cache_result(
    key: Optional[str] = None,
    ttl: Optional[int] = None,
    key_func: Optional[Callable] = None,
    cache: Optional[CacheManager] = None,
):
    """
    Generic cache decorator for sync and async function results

    Args:
        key: Fixed cache key (one of ``CacheKeys``)
        ttl: Time to live in milliseconds
        key_func: Function to generate cache key from function args
        cache: Cache manager, the process-wide one by default
    """
    def decorator(func: Callable) -> Callable:
        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs) -> Any:
                cache_manager = cache or get_cache_manager()

                if not cache_manager.enabled:
                    return await func(*args, **kwargs)

                cache_key = _resolve_cache_key(func, key, key_func, args, kwargs)
                cached_result = cache_manager.get_cached_data(cache_key)
                if cached_result is not None:
                    logger.debug(f"Cache hit for {cache_key}")
                    return cached_result

                result = await func(*args, **kwargs)
                cache_manager.set_cached_data(cache_key, result, ttl)
                logger.debug(f"Cached result for {cache_key}")
                return result

            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            cache_manager = cache or get_cache_manager()

            if not cache_manager.enabled:
                return func(*args, **kwargs)

            cache_key = _resolve_cache_key(func, key, key_func, args, kwargs)
            cached_result = cache_manager.get_cached_data(cache_key)
            if cached_result is not None:
                logger.debug(f"Cache hit for {cache_key}")
                return cached_result

            result = func(*args, **kwargs)
            cache_manager.set_cached_data(cache_key, result, ttl)
            logger.debug(f"Cached result for {cache_key}")
            return result

        return wrapper
    return decorator


def invalidate_cache_on_update(*keys: str, cache: Optional[CacheManager] = None):
    """
    Decorator to invalidate cache entries when data is updated
    Use on create/update/delete calls; entries are cleared only if the call succeeds
    """
    def clear(cache_manager: CacheManager) -> None:
        for cache_key in keys:
            cache_manager.clear_cached_data(cache_key)
        logger.debug(f"Invalidated cache keys {list(keys)} due to data update")

    def decorator(func: Callable) -> Callable:
        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs) -> Any:
                result = await func(*args, **kwargs)
                clear(cache or get_cache_manager())
                return result

            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            result = func(*args, **kwargs)
            clear(cache or get_cache_manager())
            return result

        return wrapper
    return decorator
