"""
Cache data models
"""
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

T = TypeVar("T")


class CacheEntry(BaseModel, Generic[T]):
    """One memoized value with its write time and expiry, both in epoch milliseconds"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    data: T
    created_at: int = Field(alias="createdAt")
    expires_at: int = Field(alias="expiresAt")

    @model_validator(mode="after")
    def check_expiry_after_creation(self) -> "CacheEntry[T]":
        if self.expires_at <= self.created_at:
            raise ValueError("expiresAt must be later than createdAt")
        return self

    @classmethod
    def build(cls, data: Any, now: int, ttl: int) -> "CacheEntry[Any]":
        return cls(data=data, created_at=now, expires_at=now + ttl)

    def is_expired(self, now: int) -> bool:
        return now > self.expires_at

    def to_document(self) -> dict:
        """Stored shape: ``{"data", "createdAt", "expiresAt"}``"""
        return self.model_dump(mode="json", by_alias=True)


class CacheStats(BaseModel):
    """Diagnostic summary of the cache namespace"""

    total_entries: int = 0
    total_size_bytes: int = 0
    oldest_entry_timestamp: Optional[int] = None
    newest_entry_timestamp: Optional[int] = None
