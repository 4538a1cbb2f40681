"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from starpulse.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from starpulse.application.use_cases import (
        DayAggregator,
        EnrichmentEngine,
        PopularRepositoriesUseCase,
        WindowAggregator,
    )
    from starpulse.domain.ports import CachePort, FanOutDispatcherPort
    from starpulse.infrastructure.cache import CacheStore


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    cache: CachePort
    store: CacheStore
    http_client: httpx.AsyncClient
    dispatcher: FanOutDispatcherPort

    # Use cases
    day_aggregator: DayAggregator
    window_aggregator: WindowAggregator
    enrichment: EnrichmentEngine
    popular: PopularRepositoriesUseCase
