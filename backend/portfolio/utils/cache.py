import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

class TTLCache(Generic[T]):
    """In-process cache whose entries expire a fixed time after they were stored.

    Entries are not persisted; a process restart starts empty.
    """

    def __init__(self, name: str, ttl: timedelta = timedelta(hours=1), clock: Callable[[], datetime] = datetime.now):
        self.name = name
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, Dict[str, Any]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def is_valid(self, entry: Optional[Dict[str, Any]]) -> bool:
        if not entry:
            return False
        created_time = entry.get("created_time")
        if not created_time:
            return False
        return self._clock() - created_time < self.ttl

    def get(self, key: str) -> Optional[T]:
        entry = self._entries.get(key)
        if self.is_valid(entry):
            logger.debug(f"cache hit: {self.name}:{key}")
            return entry["data"]
        return None

    def set(self, key: str, data: T) -> None:
        self._entries[key] = {
            "data": data,
            "created_time": self._clock(),
        }
        logger.debug(f"cache store: {self.name}:{key}")

    def prune_expired(self) -> int:
        """Drop expired entries and return how many were removed."""
        expired = [key for key, entry in self._entries.items() if not self.is_valid(entry)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.info(f"cache pruned: {self.name}, removed {len(expired)} entries")
        return len(expired)

    def get_status(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "entries": len(self._entries),
            "ttl_seconds": int(self.ttl.total_seconds()),
        }
