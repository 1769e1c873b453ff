# =================================================================
# scraper/config.py - All configuration in one place
# =================================================================

import os
from dotenv import load_dotenv


def _first_env(*names: str) -> str:
    """Return the first non-blank value among several env var aliases"""
    for name in names:
        value = os.getenv(name)
        if value and value.strip():
            return value.strip()
    return ""


class Config:
    def __init__(self, load_env: bool = True):
        if load_env:
            load_dotenv()

        # Target listing
        self.maps_url = _first_env("GOOGLE_MAPS_URL", "MAPS_URL")
        self.maps_cid = _first_env("GOOGLE_MAPS_CID", "MAPS_CID", "GOOGLE_PLACE_CID")
        self.maps_base_url = "https://www.google.com/maps"
        self.locale = os.getenv("REVIEWS_LOCALE", "de")

        # Scraping
        self.user_agent = os.getenv(
            "REVIEWS_USER_AGENT",
            'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
        )
        self.request_timeout = float(os.getenv("REVIEWS_REQUEST_TIMEOUT", 10))
        self.retry_attempts = int(os.getenv("REVIEWS_RETRY_ATTEMPTS", 2))
        self.min_field_length = int(os.getenv("REVIEWS_MIN_FIELD_LENGTH", 6))
        self.max_reviews = int(os.getenv("REVIEWS_MAX_COUNT", 30))

        # Cache policy (seconds)
        self.cache_ttl = int(os.getenv("REVIEWS_CACHE_TTL", 6 * 60 * 60))
        self.cooldown_ttl = int(os.getenv("REVIEWS_COOLDOWN_TTL", 15 * 60))

        # Cache backend: memory | supabase | none
        self.cache_backend = os.getenv("REVIEWS_CACHE_BACKEND", "memory").strip().lower()
        self.supabase_url = os.getenv("SUPABASE_URL")
        self.supabase_key = os.getenv("SUPABASE_KEY")
        self.cache_table = os.getenv("REVIEWS_CACHE_TABLE", "review_cache")

        # Static reviews served while no live data is available
        self.fallback_file = os.getenv("REVIEWS_FALLBACK_FILE")

        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def accept_language(self) -> str:
        """Accept-Language favoring the configured locale with an English fallback"""
        region = self.locale.upper() if len(self.locale) == 2 else self.locale
        return f"{self.locale}-{region},{self.locale};q=0.9,en;q=0.8"
