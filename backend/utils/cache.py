# backend/utils/cache.py
import copy
import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from models.cache import CacheEntry

logger = logging.getLogger(__name__)


# Generic TTL key-value store; values must be JSON-serialisable
class Cache(ABC):
    @abstractmethod
    def get(self, key: str) -> Optional[Any]: ...

    @abstractmethod
    def set(self, key: str, value: Any, ttl_seconds: int) -> None: ...

    @abstractmethod
    def delete(self, key: str) -> None: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SqlCache(Cache):
    """Cache rows in the cache_entries table, sharing the request's session."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = _utcnow):
        self.db = db
        self.clock = clock

    def get(self, key: str) -> Optional[Any]:
        entry = self.db.get(CacheEntry, key)
        if entry is None:
            return None
        if entry.expires_at <= self.clock():
            # Expired rows are purged lazily on read
            self.db.delete(entry)
            self.db.commit()
            logger.debug(f"Cache entry expired: {key}")
            return None
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        expires_at = self.clock() + timedelta(seconds=ttl_seconds)
        self.db.merge(CacheEntry(key=key, value=value, expires_at=expires_at))
        self.db.commit()

    def delete(self, key: str) -> None:
        entry = self.db.get(CacheEntry, key)
        if entry is not None:
            self.db.delete(entry)
            self.db.commit()


class MemoryCache(Cache):
    """Process-local cache; entries are copied in and out like a remote store."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self.clock():
            del self._entries[key]
            return None
        return copy.deepcopy(value)

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        self._entries[key] = (copy.deepcopy(value), self.clock() + ttl_seconds)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)
