# =================================================================
# scraper/schemas.py - Review models and fallback loading
# =================================================================

import json
import logging
from datetime import datetime
from typing import Optional, Tuple, List

import pytz
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

logger = logging.getLogger(__name__)

FALLBACK_UPDATED_AT = datetime(1970, 1, 1, tzinfo=pytz.UTC)


class Review(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    author: str = Field(alias="author_name", min_length=1)
    rating: int = Field(ge=1, le=5)
    text: str = Field(min_length=1)
    relative_time: Optional[str] = None

    @field_validator("author", "text")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @model_validator(mode="after")
    def author_differs_from_text(self):
        if self.author == self.text:
            raise ValueError("author and text must differ")
        return self

    @property
    def dedup_key(self) -> Tuple[str, str]:
        return (self.author, self.text[:40])

    def to_public(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ScrapeResult(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ok: bool = True
    updated_at: datetime = Field(alias="updatedAt")
    reviews: Tuple[Review, ...] = Field(default=(), max_length=30)

    def to_public(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    @classmethod
    def from_json(cls, raw: str) -> "ScrapeResult":
        return cls.model_validate_json(raw)


class CooldownMarker(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    last_rate_limited_at: datetime = Field(alias="lastRateLimitedAt")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


def fallback_result(reviews: Tuple[Review, ...] = ()) -> ScrapeResult:
    """Deterministic placeholder served when no real data can be produced"""
    return ScrapeResult(ok=False, updated_at=FALLBACK_UPDATED_AT, reviews=reviews)


def load_fallback_reviews(filename: Optional[str]) -> Tuple[Review, ...]:
    """Load static public-shape reviews from a JSON file, skipping invalid entries"""
    if not filename:
        return ()
    try:
        with open(filename, 'r', encoding='utf-8') as file:
            data = json.load(file)
    except FileNotFoundError:
        logger.error(f"Fallback reviews file {filename} not found")
        return ()
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Invalid fallback reviews file {filename}: {e}")
        return ()

    if not isinstance(data, list):
        logger.error(f"Fallback reviews file {filename} must hold a JSON list")
        return ()

    reviews: List[Review] = []
    for index, entry in enumerate(data):
        try:
            reviews.append(Review.model_validate(entry))
        except ValidationError as e:
            logger.warning(f"⚠️ Skipping fallback review #{index}: {e.error_count()} validation error(s)")
    return tuple(reviews[:30])
