from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
import logging

from ..dependencies import get_coordinator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["reviews"])

LIVE_CACHE_CONTROL = "public, max-age=0, s-maxage=600"
FALLBACK_CACHE_CONTROL = "public, max-age=0, s-maxage=60"


@router.get("/reviews")
async def get_reviews(coordinator=Depends(get_coordinator)):
    """Cached reviews, refreshed in the background; never a 5xx for scrape failures"""
    outcome = await coordinator.get_reviews()

    headers = {"cache-control": LIVE_CACHE_CONTROL}
    if outcome.fallback:
        headers = {
            "cache-control": FALLBACK_CACHE_CONTROL,
            "x-reviews-fallback": "1",
        }
    logger.info(f"/reviews served {len(outcome.result.reviews)} reviews ({outcome.state.value})")

    return JSONResponse(outcome.result.to_public(), headers=headers)
