"""WaterWise — API Response Cache.

A single TTL check on read: entries older than the TTL are deleted and
reported as a miss. Writes always replace the previous value for a key.
"""

import json
import time
from typing import Any, Optional

from sqlmodel import Session, select

from waterwise.models.records import CacheEntry
from waterwise.repositories.base import store_errors
from waterwise.core.logging import get_logger

logger = get_logger("repositories.cache")


def _now_ms() -> int:
    return int(time.time() * 1000)


class CacheStore:
    """Key → JSON value store backed by the ``cache`` table."""

    def __init__(self, session: Session, clock=_now_ms):
        self.session = session
        self._clock = clock

    def get(self, key: str, ttl_minutes: int = 60) -> Optional[Any]:
        with store_errors(self.session, "read cache"):
            entry = self.session.get(CacheEntry, key)
        if entry is None:
            return None

        age = self._clock() - entry.timestamp
        if age > ttl_minutes * 60 * 1000:
            logger.debug(f"Cache expired: {key}", extra={"cache_key": key})
            self.delete(key)
            return None
        return json.loads(entry.value)

    def set(self, key: str, value: Any) -> None:
        payload = json.dumps(value)
        with store_errors(self.session, "write cache"):
            entry = self.session.get(CacheEntry, key)
            if entry is None:
                entry = CacheEntry(key=key, value=payload, timestamp=self._clock())
            else:
                entry.value = payload
                entry.timestamp = self._clock()
            self.session.add(entry)
            self.session.commit()

    def delete(self, key: str) -> None:
        with store_errors(self.session, "delete cache"):
            entry = self.session.get(CacheEntry, key)
            if entry is not None:
                self.session.delete(entry)
                self.session.commit()

    def clear_old(self, max_age_minutes: int = 360) -> int:
        """Drop entries written more than ``max_age_minutes`` ago."""
        cutoff = self._clock() - max_age_minutes * 60 * 1000
        with store_errors(self.session, "purge cache"):
            stale = self.session.exec(
                select(CacheEntry).where(CacheEntry.timestamp < cutoff)
            ).all()
            for entry in stale:
                self.session.delete(entry)
            self.session.commit()
        removed = len(stale)
        logger.info(f"Purged {removed} cache entries older than {max_age_minutes} min")
        return removed

    def clear_all(self) -> None:
        with store_errors(self.session, "clear cache"):
            for entry in self.session.exec(select(CacheEntry)).all():
                self.session.delete(entry)
            self.session.commit()
