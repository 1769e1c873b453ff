from fastapi import APIRouter, Depends, Request

from scraper.utils import preview
from ..dependencies import get_config

router = APIRouter(tags=["debug"])


def describe_identifier(value):
    return {
        "present": bool(value),
        "length": len(value) if value else 0,
        "preview": preview(value),
    }


@router.get("/__env")
async def get_env(request: Request, config=Depends(get_config)):
    """Which identifiers are configured, without revealing them"""
    return {
        "maps_url": describe_identifier(config.maps_url),
        "maps_cid": describe_identifier(config.maps_cid),
        "locale": config.locale,
        "cache_backend": config.cache_backend,
        "has_cache_binding": request.app.state.coordinator is not None,
    }
