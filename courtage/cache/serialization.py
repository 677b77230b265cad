"""
Serializers converting cache entry documents to and from stored strings
"""
import json
from typing import Any, Protocol


class Serializer(Protocol):
    """Protocol for serializing and deserializing cache documents"""

    def serialize(self, value: Any) -> str:
        """Convert a document to a string for storage"""
        ...

    def deserialize(self, data: str) -> Any:
        """Convert a stored string back to the document"""
        ...


class JsonSerializer:
    """JSON serializer, the format the web client writes to local storage"""

    def __init__(self, ensure_ascii: bool = False):
        self.ensure_ascii = ensure_ascii

    def serialize(self, value: Any) -> str:
        return json.dumps(value, default=str, ensure_ascii=self.ensure_ascii)

    def deserialize(self, data: str) -> Any:
        return json.loads(data)
