"""Trends service FastAPI application."""

import asyncio
import contextlib
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse

from trendfeed import __version__
from trendfeed.core.logging import get_logger, setup_logging
from trendfeed.core.settings import Settings, get_settings
from trendfeed.core.time import format_last_updated
from trendfeed.ingestor.rss import FeedFetchError, TrendsFetcher
from trendfeed.trender.cache import TrendCache
from trendfeed.trender.history import HistoryStore
from trendfeed.trender.pipeline import TrendPipeline

logger = get_logger(__name__)

FETCH_ERROR_BODY = {"error": "Failed to fetch trends"}

LANDING_PAGE = """
<h1>Google Trends Parser</h1>
<p>Access the JSON data at: <a href="/trends">/trends</a></p>
<p>Metrics only: <a href="/trends/metrics">/trends/metrics</a></p>
<p>Last updated: {last_updated}</p>
"""


def get_cache(request: Request) -> TrendCache:
    """Cache owned by the running application."""
    return request.app.state.cache


def build_cache(settings: Settings, fetcher=None) -> TrendCache:
    """Wire fetcher, history, pipeline and cache from settings."""
    fetcher = fetcher or TrendsFetcher(
        url=settings.feed_url,
        geo=settings.geo,
        timeout=settings.fetch_timeout_seconds,
        max_attempts=settings.fetch_max_attempts,
    )
    history = HistoryStore(
        window_hours=settings.history_window_hours,
        evict_after_cycles=settings.history_evict_after_cycles,
    )
    pipeline = TrendPipeline(fetcher, history)
    return TrendCache(pipeline, refresh_interval_seconds=settings.refresh_interval_minutes * 60)


def create_app(
    settings: Optional[Settings] = None,
    fetcher=None,
    start_refresher: bool = True,
) -> FastAPI:
    """Create the trends application with its own cache and history."""
    settings = settings or get_settings()
    setup_logging("trendfeed", settings)

    cache = build_cache(settings, fetcher)

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Starting trends service",
            extra={
                "port": settings.port,
                "geo": settings.geo,
                "refresh_interval_minutes": settings.refresh_interval_minutes,
            }
        )
        task = asyncio.create_task(cache.run_periodic()) if start_refresher else None
        try:
            yield
        finally:
            if task is not None:
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
            fetcher_close = getattr(cache.pipeline.fetcher, "aclose", None)
            if fetcher_close is not None:
                await fetcher_close()
            logger.info("Trends service stopped")

    app = FastAPI(
        title=f"{settings.app_name}",
        description="Trending searches with traffic, age and velocity metrics",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.cache = cache
    app.state.settings = settings

    @app.get("/health", response_class=PlainTextResponse)
    async def health_check():
        """Health check endpoint."""
        return "OK"

    @app.get("/", response_class=HTMLResponse)
    async def root(cache: TrendCache = Depends(get_cache)):
        """Landing page with the last update time."""
        snapshot = cache.get()
        last_updated = format_last_updated(snapshot.last_updated if snapshot else None)
        return LANDING_PAGE.format(last_updated=last_updated)

    @app.get("/trends")
    async def get_trends(cache: TrendCache = Depends(get_cache)):
        """Latest snapshot, fetching first when the cache is cold."""
        try:
            snapshot = await cache.get_or_refresh()
        except FeedFetchError:
            return JSONResponse(status_code=500, content=FETCH_ERROR_BODY)
        return snapshot.model_dump(mode="json", by_alias=True)

    @app.get("/trends/metrics")
    async def get_trend_metrics(cache: TrendCache = Depends(get_cache)):
        """Title, traffic and derived metrics for every cached trend."""
        try:
            snapshot = await cache.get_or_refresh()
        except FeedFetchError:
            return JSONResponse(status_code=500, content=FETCH_ERROR_BODY)
        return [view.model_dump(mode="json", by_alias=True) for view in snapshot.metrics_view()]

    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    logger.info(f"Server running on port {settings.port}")
    uvicorn.run(
        "trendfeed.trender.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
