# =================================================================
# scraper/assembler.py - Dedup, cap and normalize parsed reviews
# =================================================================

import logging
from typing import Iterable, List, Tuple

from pydantic import ValidationError

from .parser import ReviewTuple
from .schemas import Review

logger = logging.getLogger(__name__)

MAX_REVIEWS = 30
DEDUP_PREFIX_LENGTH = 40


class ReviewAssembler:
    def __init__(self, max_reviews: int = MAX_REVIEWS):
        self.max_reviews = min(max_reviews, MAX_REVIEWS)

    def assemble(self, tuples: Iterable[ReviewTuple]) -> Tuple[Review, ...]:
        """Keep the first occurrence of each (author, text prefix), in traversal order"""
        seen = set()
        reviews: List[Review] = []
        duplicates = 0

        for item in tuples:
            key = (item.author, item.text[:DEDUP_PREFIX_LENGTH])
            if key in seen:
                duplicates += 1
                continue
            seen.add(key)

            try:
                reviews.append(Review(
                    author=item.author,
                    rating=item.rating,
                    text=item.text,
                    relative_time=item.relative_time
                ))
            except ValidationError as e:
                logger.warning(f"⚠️ Dropping malformed review tuple by {item.author!r}: {e.error_count()} error(s)")
                continue

            if len(reviews) >= self.max_reviews:
                break

        logger.info(f"Assembled {len(reviews)} reviews ({duplicates} duplicates skipped)")
        return tuple(reviews)
