from contextlib import asynccontextmanager
import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env'))

from scraper.cache import build_cache_store
from scraper.config import Config
from scraper.errors import ConfigurationError
from scraper.refresh import RefreshCoordinator
from scraper.schemas import load_fallback_reviews
from .routers import reviews, debug  # Relative import

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "access-control-allow-origin": "*",
    "access-control-allow-methods": "GET, OPTIONS",
    "access-control-allow-headers": "content-type",
}


def create_app(config=None, store=None, scraper=None) -> FastAPI:
    config = config or Config()
    if store is None:
        store = build_cache_store(config)

    coordinator = None
    if store is not None:
        coordinator = RefreshCoordinator(
            config,
            store,
            scraper=scraper,
            fallback_reviews=load_fallback_reviews(config.fallback_file)
        )
    else:
        logger.error("❌ No cache store bound; /reviews will answer 500")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if app.state.coordinator is not None:
            await app.state.coordinator.aclose()

    app = FastAPI(
        title="Maps Reviews API",
        version="1.0.0",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )
    app.state.config = config
    app.state.coordinator = coordinator

    app.include_router(reviews.router)
    app.include_router(debug.router)

    @app.middleware("http")
    async def allow_all_origins(request: Request, call_next):
        response = await call_next(request)
        response.headers["access-control-allow-origin"] = "*"
        return response

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(request: Request, exc: ConfigurationError):
        logger.error(f"❌ Configuration error on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={"ok": False, "error": str(exc)},
            headers={"access-control-allow-origin": "*"}
        )

    @app.options("/{path:path}")
    async def preflight(path: str):
        return Response(status_code=204, headers=CORS_HEADERS)

    @app.get("/")
    def health_check():
        return {"status": "running", "version": app.version}

    return app


app = create_app()
