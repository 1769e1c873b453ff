# =================================================================
# scraper/parser.py - Heuristic review tuple classifier
# =================================================================
#
# The embedded payload is an untyped nest of arrays with no published
# schema. Instead of indexing fixed positions, every array is sniffed for
# the shape of a single review: a small integer rating next to a couple of
# meaningful strings. This survives field reordering and unknown extra
# fields, but it will occasionally pick up a non-review array (false
# positive) or miss a review whose strings are unusually short (false
# negative). Swap ReviewTupleParser out if the source ever stabilizes.

import re
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Union

logger = logging.getLogger(__name__)

JsonValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]

RELATIVE_TIME_PATTERN = re.compile(
    r"\b(ago|just now|yesterday|vor|gestern|seit)\b|"
    r"\b(minute|hour|day|week|month|year)s?\b|"
    r"\b(Minute|Stunde|Tag|Woche|Monat|Jahr)(n|en|e)?\b",
    re.IGNORECASE
)


@dataclass(frozen=True)
class ReviewTuple:
    author: str
    rating: int
    text: str
    relative_time: Optional[str] = None


def _as_rating(value) -> Optional[int]:
    # bool is an int subclass; True would read as a 1-star rating
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    if 1 <= value <= 5:
        return int(value)
    return None


def iter_arrays(tree: JsonValue) -> Iterator[list]:
    """Pre-order walk yielding every array node exactly once"""
    stack = [tree]
    while stack:
        node = stack.pop()
        if isinstance(node, list):
            yield node
            children = node
        elif isinstance(node, dict):
            children = list(node.values())
        else:
            continue
        stack.extend(child for child in reversed(children) if isinstance(child, (list, dict)))


class ReviewTupleParser:
    def __init__(self, min_field_length: int = 6):
        self.min_field_length = min_field_length

    def match(self, node: list) -> Optional[ReviewTuple]:
        """Classify one array node as a review tuple, or None"""
        rating = None
        for element in node:
            rating = _as_rating(element)
            if rating is not None:
                break
        if rating is None:
            return None

        strings = [element.strip() for element in node if isinstance(element, str)]
        qualifying = [s for s in strings if len(s) >= self.min_field_length]
        if not qualifying:
            return None

        text = max(qualifying, key=len)
        author = min(qualifying, key=len)
        if author == text:
            return None

        relative_time = next(
            (s for s in strings if s not in (author, text) and RELATIVE_TIME_PATTERN.search(s)),
            None
        )
        return ReviewTuple(author=author, rating=rating, text=text, relative_time=relative_time)

    def parse(self, tree: JsonValue) -> List[ReviewTuple]:
        """All review-shaped tuples in traversal order, duplicates included"""
        matches = []
        visited = 0
        for node in iter_arrays(tree):
            visited += 1
            found = self.match(node)
            if found is not None:
                matches.append(found)
        logger.info(f"Visited {visited} arrays, {len(matches)} looked like reviews")
        return matches
