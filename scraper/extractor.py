# =================================================================
# scraper/extractor.py - Locate and decode embedded data blocks
# =================================================================

import json
import re
import logging
from typing import List

from .errors import ExtractionError, ParseError

logger = logging.getLogger(__name__)

# AF_initDataCallback({key: 'ds:1', hash: '2', data:[...], sideChannel: {}});
CALLBACK_PATTERN = re.compile(
    r"AF_initDataCallback\(\{.*?\bdata:\s*(.*?),\s*sideChannel:",
    re.DOTALL
)
HEX_ESCAPE_PATTERN = re.compile(r"\\x([0-9a-fA-F]{2})")


def find_candidates(html: str) -> List[str]:
    """All embedded data literals that look like arrays, in page order"""
    candidates = []
    for match in CALLBACK_PATTERN.finditer(html or ""):
        literal = match.group(1).strip()
        if literal.startswith("["):
            candidates.append(literal)
    return candidates


def repair_escapes(literal: str) -> str:
    """Rewrite JS hex escapes (\\x3d) as JSON unicode escapes (\\u003d)"""
    return HEX_ESCAPE_PATTERN.sub(lambda m: "\\u00" + m.group(1), literal)


def decode_literal(literal: str):
    try:
        return json.loads(literal)
    except json.JSONDecodeError as first_error:
        logger.debug(f"Direct decode failed ({first_error}), retrying after escape repair")

    repaired = repair_escapes(literal)
    try:
        return json.loads(repaired)
    except json.JSONDecodeError as e:
        raise ParseError(f"Embedded data block is not decodable: {e}") from e


class EmbeddedDataExtractor:
    """Picks the most information-dense embedded block out of a page.

    The page embeds many independent payloads; the one carrying review
    content has so far always been the largest.
    """

    def select(self, html: str) -> str:
        candidates = find_candidates(html)
        if not candidates:
            raise ExtractionError("No embedded data blocks found (layout changed or access blocked)")

        candidates.sort(key=len, reverse=True)
        logger.info(f"Found {len(candidates)} embedded data block(s), largest has {len(candidates[0])} characters")
        return candidates[0]

    def extract(self, html: str):
        return decode_literal(self.select(html))
