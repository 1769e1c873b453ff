# =================================================================
# scraper/cache.py - TTL key-value stores
# =================================================================

import time
import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional, Tuple

import pytz
from supabase import create_client

logger = logging.getLogger(__name__)


class CacheStore:
    """Key-value store with per-key expiry.

    Writes are full replacements; no read-modify-write is ever needed.
    Implementations enforce expiry themselves.
    """

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def put(self, key: str, value: str, ttl_seconds: int):
        raise NotImplementedError


class MemoryCacheStore(CacheStore):
    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self.clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def put(self, key: str, value: str, ttl_seconds: int):
        with self._lock:
            self._entries[key] = (value, self.clock() + ttl_seconds)


class SupabaseCacheStore(CacheStore):
    """Cache rows in a Supabase table: key (primary key), value, expires_at"""

    def __init__(self, config, client=None, clock: Callable[[], datetime] = None):
        self.client = client or create_client(config.supabase_url, config.supabase_key)
        self.table = config.cache_table
        self.clock = clock or (lambda: datetime.now(pytz.UTC))

    def get(self, key: str) -> Optional[str]:
        """Get a non-expired value by key"""
        result = self.client.table(self.table)\
            .select('value,expires_at')\
            .eq('key', key)\
            .gt('expires_at', self.clock().isoformat())\
            .execute()
        return result.data[0]['value'] if result.data else None

    def put(self, key: str, value: str, ttl_seconds: int):
        """Upsert a value with a fresh expiry"""
        expires_at = self.clock() + timedelta(seconds=ttl_seconds)
        self.client.table(self.table)\
            .upsert({'key': key, 'value': value, 'expires_at': expires_at.isoformat()})\
            .execute()


def build_cache_store(config) -> Optional[CacheStore]:
    """Cache store for the configured backend, or None when none is bound"""
    backend = config.cache_backend
    if backend == "memory":
        return MemoryCacheStore()
    if backend == "supabase":
        if not config.supabase_url or not config.supabase_key:
            logger.error("Supabase cache backend selected but SUPABASE_URL/SUPABASE_KEY are missing")
            return None
        return SupabaseCacheStore(config)
    if backend not in ("none", ""):
        logger.error(f"Unknown cache backend '{backend}'")
    return None
