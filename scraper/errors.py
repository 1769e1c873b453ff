# =================================================================
# scraper/errors.py - Error taxonomy
# =================================================================

RATE_LIMIT_STATUS = 429


class ReviewsError(Exception):
    """Base class for every error raised by the reviews service"""


class ConfigurationError(ReviewsError):
    """Missing or malformed configuration. Fatal for the current request only."""


class ScrapeError(ReviewsError):
    """A recoverable failure of a single scrape attempt"""

    @property
    def is_rate_limited(self) -> bool:
        return False


class UpstreamHttpError(ScrapeError):
    def __init__(self, status: int, url: str = ""):
        self.status = status
        self.url = url
        super().__init__(f"Upstream returned HTTP {status}" + (f" for {url}" if url else ""))

    @property
    def is_rate_limited(self) -> bool:
        return self.status == RATE_LIMIT_STATUS


class UpstreamUnavailableError(ScrapeError):
    """Connection-level failure (DNS, refused, reset, timeout)"""


class ExtractionError(ScrapeError):
    """No embedded data block found: the page layout changed or access was blocked"""


class ParseError(ScrapeError):
    """An embedded data block was found but could not be decoded"""
