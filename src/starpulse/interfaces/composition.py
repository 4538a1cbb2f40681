"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from starpulse.application.use_cases import (
    DayAggregator,
    EnrichmentEngine,
    PopularRepositoriesUseCase,
    WindowAggregator,
)
from starpulse.domain.entities import RefreshPolicy
from starpulse.domain.ports import FanOutDispatcherPort
from starpulse.infrastructure.activity import HttpxActivityClient
from starpulse.infrastructure.cache import CacheStore, create_cache
from starpulse.infrastructure.common import RetryPolicy
from starpulse.infrastructure.config.schema import AppConfig
from starpulse.infrastructure.dispatch import (
    DispatchLimits,
    LocalFanOutDispatcher,
    RemoteFanOutDispatcher,
)
from starpulse.infrastructure.metadata import (
    HttpxPopularClient,
    MetadataServiceSource,
)
from starpulse.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


def build_dispatcher(
    config: AppConfig, http_client: httpx.AsyncClient
) -> FanOutDispatcherPort:
    """Local worker pool by default; remote worker pool when an endpoint is set."""
    dispatch = config.dispatch
    limits = DispatchLimits(
        max_items=dispatch.max_items,
        max_item_bytes=dispatch.max_item_bytes,
        max_batch_bytes=dispatch.max_batch_bytes,
        max_result_bytes=dispatch.max_result_bytes,
        max_total_result_bytes=dispatch.max_total_result_bytes,
    )
    if dispatch.endpoint:
        log.info("dispatcher_remote", endpoint=dispatch.endpoint)
        return RemoteFanOutDispatcher(
            http_client=http_client,
            endpoint=dispatch.endpoint,
            api_key=dispatch.api_key,
            limits=limits,
            retry=RetryPolicy(
                max_attempts=dispatch.retry_max_attempts,
                initial_delay=dispatch.retry_initial_delay,
                backoff_factor=dispatch.retry_backoff_factor,
            ),
        )

    log.info(
        "dispatcher_local",
        max_concurrent=dispatch.max_concurrent,
        requests_per_second=dispatch.requests_per_second,
    )
    return LocalFanOutDispatcher(
        http_client=http_client,
        max_concurrent=dispatch.max_concurrent,
        requests_per_second=dispatch.requests_per_second,
        limits=limits,
    )


def wire_use_cases(state: AppState) -> None:
    """Build the use cases from already-initialized infrastructure."""
    config = state.config

    state.day_aggregator = DayAggregator(
        HttpxActivityClient(
            http_client=state.http_client,
            url_template=config.upstream.activity_url_template,
        ),
        state.store,
        schema_version=config.cache.schema_version,
        ttl_seconds=config.cache.day_ttl_seconds,
    )
    state.window_aggregator = WindowAggregator(
        state.day_aggregator,
        state.store,
        schema_version=config.cache.schema_version,
        ttl_seconds=config.cache.window_ttl_seconds,
        window_days={
            "week": config.windows.week_days,
            "month": config.windows.month_days,
        },
        max_parallel=config.windows.max_parallel_days,
    )
    state.enrichment = EnrichmentEngine(
        state.store,
        MetadataServiceSource(url_template=config.upstream.metadata_url_template),
        state.dispatcher,
        schema_version=config.cache.schema_version,
    )
    state.popular = PopularRepositoriesUseCase(
        HttpxPopularClient(
            http_client=state.http_client,
            url=config.upstream.popular_url,
            retry=RetryPolicy(
                max_attempts=config.dispatch.retry_max_attempts,
                initial_delay=config.dispatch.retry_initial_delay,
                backoff_factor=config.dispatch.retry_backoff_factor,
            ),
        ),
        state.store,
        cache_key=config.cache.popular_cache_key,
        ttl_seconds=config.cache.popular_ttl_seconds,
        policy=RefreshPolicy(
            refresh_hour=config.refresh.refresh_hour,
            refresh_buffer_minutes=config.refresh.refresh_buffer_minutes,
        ),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. Cache (every use case reads through it)
        2. HTTP client (shared by all upstream clients and the dispatcher)
        3. Fan-out dispatcher
        4. Use cases
    """
    state = cast(AppState, app.state)
    config = state.config

    # 1) Cache
    cache = create_cache(
        backend=config.cache.backend,
        directory=str(config.cache.directory),
        redis_url=config.cache.redis_url,
        ttl_seconds=config.cache.day_ttl_seconds,
        max_concurrent=config.cache.max_concurrent,
    )
    await cache.__aenter__()
    state.cache = cache
    state.store = CacheStore(cache)
    log.info(
        "cache_initialized",
        backend=config.cache.backend,
        schema_version=config.cache.schema_version,
    )

    # 2) HTTP client
    state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout_seconds),
        headers={"User-Agent": config.http_user_agent},
        follow_redirects=config.http_follow_redirects,
    )
    log.info("http_client_initialized", timeout=config.http_timeout_seconds)

    # 3) Dispatcher
    state.dispatcher = build_dispatcher(config, state.http_client)

    # 4) Use cases
    wire_use_cases(state)

    log.info("app_startup_complete")

    try:
        yield
    finally:
        await state.http_client.aclose()
        log.info("http_client_closed")

        await state.cache.aclose()
        log.info("cache_closed")

        log.info("app_shutdown_complete")
