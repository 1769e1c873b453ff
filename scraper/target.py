# =================================================================
# scraper/target.py - Resolve the listing page to scrape
# =================================================================

from urllib.parse import quote

from .errors import ConfigurationError


class TargetResolver:
    def __init__(self, config):
        self.config = config

    def resolve(self) -> str:
        """Build the page URL; an explicit URL wins over a bare listing identifier"""
        maps_url = (self.config.maps_url or "").strip()
        maps_cid = (self.config.maps_cid or "").strip()

        if maps_url:
            base = maps_url
        elif maps_cid:
            base = f"{self.config.maps_base_url}?cid={quote(maps_cid, safe='')}"
        else:
            raise ConfigurationError("Neither GOOGLE_MAPS_URL nor GOOGLE_MAPS_CID is configured")

        separator = "&" if "?" in base else "?"
        return f"{base}{separator}hl={quote(self.config.locale, safe='')}"
