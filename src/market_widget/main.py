"""
FastAPI application entry point for the Market Widget API.

Proxies metals-api, Yahoo Finance and NewsAPI for the dashboard client:
API keys stay on the server, responses are cached per source, and the
client always gets a well-formed JSON envelope.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from .api import router as api_router
from .core.config import Settings, get_settings
from .core.exceptions import AppError
from .services.data_manager.cache import CacheStore
from .services.data_manager.manager import MarketDataManager
from .services.market_data.metals import MetalsAPIClient
from .services.market_data.news import NewsAPIClient
from .services.market_data.yahoo import YahooFinanceClient

# Set the root logger level to INFO so we can see detailed logs
logging.basicConfig(level=logging.INFO)

logger = structlog.get_logger()


def build_data_manager(settings: Settings) -> MarketDataManager:
    """Wire the cache store and upstream clients for one process."""
    cache = CacheStore(
        default_ttl=settings.cache_ttl,
        ttl_table=settings.cache_ttl_table(),
    )
    return MarketDataManager(
        cache=cache,
        metals_client=MetalsAPIClient(settings),
        yahoo_client=YahooFinanceClient(settings),
        news_client=NewsAPIClient(settings),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan management for the cache and upstream clients."""
    settings: Settings = app.state.settings

    logger.info(
        "Starting Market Widget API",
        environment=settings.environment,
        port=settings.port,
        cache_ttl=settings.cache_ttl,
    )

    data_manager = build_data_manager(settings)
    app.state.data_manager = data_manager

    try:
        yield
    finally:
        await data_manager.close()
        logger.info("Upstream clients closed", cache=data_manager.cache.stats())


def mount_client_bundle(app: FastAPI, static_dir: Path) -> None:
    """
    Serve the built dashboard from ``static_dir``.

    ``/static/*`` is served as files, existing top-level files (favicon,
    manifest) by path, and every other non-API GET falls back to
    ``index.html`` so client-side routes resolve.
    """
    index_file = static_dir / "index.html"
    assets_dir = static_dir / "static"
    if assets_dir.is_dir():
        app.mount("/static", StaticFiles(directory=assets_dir), name="static")

    root = static_dir.resolve()

    @app.get("/{full_path:path}", include_in_schema=False)
    async def client_app(full_path: str) -> FileResponse:
        if full_path == "api" or full_path.startswith("api/"):
            raise HTTPException(status_code=404, detail="Not Found")

        candidate = (static_dir / full_path).resolve()
        if full_path and candidate.is_file() and candidate.is_relative_to(root):
            return FileResponse(candidate)
        return FileResponse(index_file)

    logger.info("Serving client bundle", static_dir=str(static_dir))


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Market Widget API",
        description="Cached metals, index and news proxy for the market dashboard",
        version="0.1.0",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    # Routes resolve settings through get_settings; serve this app's instance
    app.dependency_overrides[get_settings] = lambda: settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # Global exception handler for custom app errors
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        """Map any AppError that escapes a route to its status code."""
        error_dict = exc.to_dict()

        logger.error(
            "Application error occurred",
            path=request.url.path,
            method=request.method,
            **error_dict,
        )

        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.message, "error_type": exc.error_type},
        )

    app.include_router(api_router)

    static_dir = Path(settings.static_dir)
    if settings.is_production:
        if (static_dir / "index.html").is_file():
            mount_client_bundle(app, static_dir)
        else:
            logger.warning("Client bundle not found", static_dir=str(static_dir))

    return app


# Create app instance
app = create_app()


def run() -> None:
    """Start the API server with uvicorn."""
    import uvicorn

    settings = get_settings()
    logger.info(
        "Market Widget API server",
        url=f"http://localhost:{settings.port}",
        cache_ttl_seconds=settings.cache_ttl,
    )
    uvicorn.run(
        "market_widget.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_config=None,  # Use structlog configuration
    )


if __name__ == "__main__":
    run()
