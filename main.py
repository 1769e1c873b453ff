# main.py - Simple entry point
import argparse
import asyncio
import json
import logging

from scraper.cache import build_cache_store
from scraper.config import Config
from scraper.errors import ReviewsError
from scraper.refresh import RefreshCoordinator

logger = logging.getLogger(__name__)


async def scrape_once(config):
    """Scrape the listing and print the result, bypassing the cache"""
    coordinator = RefreshCoordinator(config, store=None)
    url = coordinator.resolver.resolve()
    result = await coordinator.scrape(url)
    print(json.dumps(result.to_public(), indent=2, ensure_ascii=False))


async def warm_cache(config):
    """Scrape and write-through to the configured cache store"""
    store = build_cache_store(config)
    if store is None:
        raise ReviewsError("No cache store bound (check REVIEWS_CACHE_BACKEND)")
    if config.cache_backend == "memory":
        logger.warning("⚠️ Warming an in-process memory cache only helps this process")

    coordinator = RefreshCoordinator(config, store)
    result = await coordinator.refresh()
    logger.info(f"✅ Cache warmed with {len(result.reviews)} reviews")


def serve(config, host: str, port: int):
    import uvicorn

    uvicorn.run("api.main:app", host=host, port=port, log_level=config.log_level.lower())


def main():
    parser = argparse.ArgumentParser(description="Scrape and serve map listing reviews")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=8000)

    subparsers.add_parser("scrape", help="Scrape once and print the reviews as JSON")
    subparsers.add_parser("warm", help="Scrape once and store the result in the cache")

    args = parser.parse_args()

    config = Config()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.command == "serve":
        serve(config, args.host, args.port)
        return

    try:
        if args.command == "scrape":
            asyncio.run(scrape_once(config))
        else:
            asyncio.run(warm_cache(config))
    except ReviewsError as e:
        logger.error(f"❌ {e}")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
