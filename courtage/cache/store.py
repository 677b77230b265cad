"""
Key-value stores backing the cache
A narrow synchronous get/set/remove/keys contract, shaped after browser local storage
"""
import logging
import re
from typing import Dict, List, Optional, Protocol

import redis

logger = logging.getLogger(__name__)


class StorageQuotaExceeded(Exception):
    """Raised by a store when a write does not fit in the available capacity"""

    def __init__(self, key: str, message: str = "Storage quota exceeded"):
        super().__init__(f"{message} while writing '{key}'")
        self.key = key


class KeyValueStore(Protocol):
    """String-keyed persistent store shared by the cache and other client data"""

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def keys(self, prefix: Optional[str] = None) -> List[str]:
        """Stored keys, limited to those starting with ``prefix`` when given"""
        ...


class MemoryKeyValueStore:
    """Process-local store with an optional capacity limit

    The quota counts the characters of every key and value, the same way
    browsers account for local storage usage.
    """

    def __init__(self, quota_bytes: Optional[int] = None):
        self._items: Dict[str, str] = {}
        self.quota_bytes = quota_bytes

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            previous = self._items.get(key)
            used = self.used_bytes()
            if previous is not None:
                used -= len(key) + len(previous)
            if used + len(key) + len(value) > self.quota_bytes:
                raise StorageQuotaExceeded(key)
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self, prefix: Optional[str] = None) -> List[str]:
        return [k for k in self._items if prefix is None or k.startswith(prefix)]

    def used_bytes(self) -> int:
        """Characters currently stored, keys included"""
        return sum(len(k) + len(v) for k, v in self._items.items())

    def __len__(self) -> int:
        return len(self._items)


class RedisKeyValueStore:
    """Store backed by a redis client created with ``decode_responses=True``"""

    def __init__(self, redis_client: redis.Redis, scan_count: int = 500):
        self.redis_client = redis_client
        self.scan_count = scan_count

    def get_item(self, key: str) -> Optional[str]:
        return self.redis_client.get(key)

    def set_item(self, key: str, value: str) -> None:
        try:
            self.redis_client.set(key, value)
        except redis.exceptions.OutOfMemoryError as e:
            logger.warning(f"Redis refused write for {key}: {e}")
            raise StorageQuotaExceeded(key, str(e)) from e

    def remove_item(self, key: str) -> None:
        self.redis_client.delete(key)

    def keys(self, prefix: Optional[str] = None) -> List[str]:
        # SCAN instead of KEYS so large databases are not blocked
        if prefix is None:
            return list(self.redis_client.scan_iter(count=self.scan_count))
        match = re.sub(r"([*?\[\]\\])", r"\\\1", prefix) + "*"
        return list(self.redis_client.scan_iter(match=match, count=self.scan_count))
