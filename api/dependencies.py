# api/dependencies.py
from fastapi import Request

from scraper.errors import ConfigurationError
from scraper.refresh import RefreshCoordinator


def get_config(request: Request):
    return request.app.state.config


def get_coordinator(request: Request) -> RefreshCoordinator:
    coordinator = request.app.state.coordinator

    if coordinator is None:
        raise ConfigurationError("No cache store is bound (check REVIEWS_CACHE_BACKEND)")

    return coordinator
