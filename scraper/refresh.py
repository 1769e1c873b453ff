# =================================================================
# scraper/refresh.py - Cache, cooldown and fallback policy
# =================================================================

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from pydantic import ValidationError

from .assembler import ReviewAssembler
from .errors import ScrapeError
from .extractor import EmbeddedDataExtractor
from .parser import ReviewTupleParser
from .schemas import CooldownMarker, Review, ScrapeResult, fallback_result
from .target import TargetResolver
from .utils import cache_keys, calculate_hash, describe_remaining, utc_now
from .web_scraper import WebScraper

logger = logging.getLogger(__name__)


class CacheState(str, Enum):
    CACHE_HIT = "CACHE_HIT"
    CACHE_MISS_COOLING = "CACHE_MISS_COOLING"
    CACHE_MISS_FETCHING = "CACHE_MISS_FETCHING"


@dataclass(frozen=True)
class ReviewsOutcome:
    result: ScrapeResult
    state: CacheState
    fallback: bool = False


class RefreshCoordinator:
    """Decides per request whether to serve cache, re-scrape, or fall back.

    Never fails the caller for scrape problems: every recoverable error ends
    in cached data or the fallback payload. Only ConfigurationError escapes.

    Concurrent cache misses may each scrape synchronously; only background
    refreshes are coalesced (one in flight per cache key).
    """

    def __init__(
        self,
        config,
        store,
        scraper=None,
        extractor=None,
        parser=None,
        assembler=None,
        now: Callable = utc_now,
        fallback_reviews: Tuple[Review, ...] = ()
    ):
        self.config = config
        self.store = store
        self.resolver = TargetResolver(config)
        self.scraper = scraper or WebScraper(config)
        self.extractor = extractor or EmbeddedDataExtractor()
        self.parser = parser or ReviewTupleParser(config.min_field_length)
        self.assembler = assembler or ReviewAssembler(config.max_reviews)
        self.now = now
        self.fallback = fallback_result(fallback_reviews)
        self._in_flight: Dict[str, asyncio.Task] = {}

    # -----------------------------------------------------------------
    # Request entry point
    # -----------------------------------------------------------------

    async def get_reviews(self) -> ReviewsOutcome:
        url = self.resolver.resolve()
        result_key, cooldown_key = cache_keys(url)

        cached = self._load_cached(result_key)
        cooldown = self._active_cooldown(cooldown_key)

        if cached is not None:
            if cooldown is None:
                self.schedule_refresh(url)
            return ReviewsOutcome(cached, CacheState.CACHE_HIT)

        if cooldown is not None:
            logger.info(
                f"⏳ Cache empty and cooling down for another "
                f"{describe_remaining(cooldown.last_rate_limited_at, self.config.cooldown_ttl, self.now())}, serving fallback"
            )
            return ReviewsOutcome(self.fallback, CacheState.CACHE_MISS_COOLING, fallback=True)

        try:
            result = await self.refresh(url)
        except ScrapeError as e:
            logger.warning(f"❌ Synchronous scrape failed, serving fallback: {e}")
            return ReviewsOutcome(self.fallback, CacheState.CACHE_MISS_FETCHING, fallback=True)
        except Exception:
            logger.exception("❌ Unexpected error during synchronous scrape, serving fallback")
            return ReviewsOutcome(self.fallback, CacheState.CACHE_MISS_FETCHING, fallback=True)

        return ReviewsOutcome(result, CacheState.CACHE_MISS_FETCHING)

    # -----------------------------------------------------------------
    # Scrape pipeline
    # -----------------------------------------------------------------

    async def scrape(self, url: str) -> ScrapeResult:
        """fetch -> extract -> parse -> assemble, without touching the cache"""
        html = await self.scraper.fetch(url)
        tree = self.extractor.extract(html)
        tuples = self.parser.parse(tree)
        reviews = self.assembler.assemble(tuples)
        if not reviews:
            logger.warning(f"⚠️ Scrape of {url} produced no reviews")
        return ScrapeResult(ok=True, updated_at=self.now(), reviews=reviews)

    async def refresh(self, url: Optional[str] = None) -> ScrapeResult:
        """Scrape and write-through; start a cooldown on rate-limit and re-raise"""
        url = url or self.resolver.resolve()
        result_key, cooldown_key = cache_keys(url)

        try:
            result = await self.scrape(url)
        except ScrapeError as e:
            if e.is_rate_limited:
                self._start_cooldown(cooldown_key)
            raise

        previous = self._load_cached(result_key)
        if previous is not None and _content_hash(previous) == _content_hash(result):
            logger.info(f"✅ Reviews unchanged ({len(result.reviews)}), refreshing timestamp")
        else:
            logger.info(f"✅ Stored {len(result.reviews)} reviews")
        self._write(result_key, result.to_json(), self.config.cache_ttl)
        return result

    # -----------------------------------------------------------------
    # Background refresh
    # -----------------------------------------------------------------

    def schedule_refresh(self, url: str) -> Optional[asyncio.Task]:
        """Fire-and-forget refresh; skipped while one is already running for this key"""
        result_key, _ = cache_keys(url)
        running = self._in_flight.get(result_key)
        if running is not None and not running.done():
            logger.debug(f"Background refresh already running for {result_key}")
            return None

        task = asyncio.create_task(self._background_refresh(url))
        self._in_flight[result_key] = task
        task.add_done_callback(lambda t, key=result_key: self._forget(key, t))
        return task

    async def _background_refresh(self, url: str):
        logger.info(f"🔄 Background refresh of {url}")
        try:
            await self.refresh(url)
        except ScrapeError as e:
            logger.warning(f"🔄 Background refresh failed, keeping stale cache: {e}")
        except Exception:
            logger.exception("🔄 Unexpected error in background refresh")

    def _forget(self, key: str, task: asyncio.Task):
        if self._in_flight.get(key) is task:
            del self._in_flight[key]

    @property
    def pending(self):
        return [task for task in self._in_flight.values() if not task.done()]

    async def wait_for_background(self):
        """Wait for every running background refresh to finish"""
        if self.pending:
            await asyncio.gather(*self.pending, return_exceptions=True)

    async def aclose(self):
        """Cancel running background refreshes (shutdown)"""
        tasks = self.pending
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # -----------------------------------------------------------------
    # Store access
    # -----------------------------------------------------------------

    def _read(self, key: str) -> Optional[str]:
        try:
            return self.store.get(key)
        except Exception as e:
            logger.error(f"❌ Cache read failed for {key}: {e}")
            return None

    def _write(self, key: str, value: str, ttl_seconds: int):
        try:
            self.store.put(key, value, ttl_seconds)
        except Exception as e:
            logger.error(f"❌ Cache write failed for {key}: {e}")

    def _load_cached(self, key: str) -> Optional[ScrapeResult]:
        raw = self._read(key)
        if raw is None:
            return None
        try:
            return ScrapeResult.from_json(raw)
        except ValidationError as e:
            logger.error(f"❌ Ignoring corrupt cache entry {key}: {e.error_count()} error(s)")
            return None

    def _active_cooldown(self, key: str) -> Optional[CooldownMarker]:
        raw = self._read(key)
        if raw is None:
            return None
        try:
            return CooldownMarker.model_validate_json(raw)
        except ValidationError:
            # Unreadable but present: still honor it until it expires
            return CooldownMarker(last_rate_limited_at=self.now())

    def _start_cooldown(self, key: str):
        marker = CooldownMarker(last_rate_limited_at=self.now())
        logger.warning(f"⏳ Rate limited upstream, cooling down for {self.config.cooldown_ttl}s")
        self._write(key, marker.to_json(), self.config.cooldown_ttl)


def _content_hash(result: ScrapeResult) -> str:
    return calculate_hash([review.to_public() for review in result.reviews])
