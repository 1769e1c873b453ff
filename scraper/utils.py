# =================================================================
# scraper/utils.py - Utility functions
# =================================================================

import json
import hashlib
from datetime import datetime
from typing import Optional

import pendulum
import pytz


def calculate_hash(data) -> str:
    """Calculate hash for change detection"""
    json_str = json.dumps(data, sort_keys=True, ensure_ascii=False)
    return hashlib.sha256(json_str.encode('utf-8')).hexdigest()


def cache_keys(target_url: str):
    """Result and cooldown keys for a resolved target URL"""
    base = f"reviews:{calculate_hash(target_url)[:16]}"
    return base, f"{base}:cooldown"


def utc_now() -> datetime:
    return datetime.now(pytz.UTC)


def describe_remaining(since: datetime, ttl_seconds: int, now: Optional[datetime] = None) -> str:
    """Human readable time left of a TTL window, e.g. '12 minutes'"""
    now = now or utc_now()
    ends = pendulum.instance(since.astimezone(pytz.UTC)).add(seconds=ttl_seconds)
    remaining = ends - pendulum.instance(now.astimezone(pytz.UTC))
    if remaining.total_seconds() <= 0:
        return "0 seconds"
    return remaining.in_words()


def preview(value: Optional[str], length: int = 6) -> Optional[str]:
    """Partial preview of a configured identifier, never the full value"""
    if not value:
        return None
    if len(value) <= length:
        return value[:2] + "…"
    return value[:length] + "…"
