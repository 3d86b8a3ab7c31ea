"""Main FastAPI application with all middleware"""

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from pathlib import Path
import logging

from storefront.core.cache import cache
from storefront.core.config import settings
from storefront.core.events import lifespan
from storefront.core.exceptions import register_exception_handlers
from storefront.core.middleware import setup_middleware
from storefront.core.monitoring import setup_monitoring
from storefront.core.rate_limit import limiter, rate_limit_exceeded_handler
from storefront.api import api_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build the application"""
    app = FastAPI(
        title=settings.APP_NAME,
        description="Storefront promotions API: coupons, gift cards, free gifts and promo banners",
        version=settings.APP_VERSION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan
    )

    # Add rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    register_exception_handlers(app)
    setup_middleware(app)

    if settings.PROMETHEUS_ENABLED:
        setup_monitoring(app)

    # Locally stored uploads
    upload_dir = Path(settings.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=upload_dir), name="uploads")

    # Include routers
    app.include_router(api_router, prefix="/api")

    # Health check
    @app.get("/health")
    async def health_check():
        cache_ok = await cache.ping()
        return {
            "status": "healthy" if cache_ok else "degraded",
            "version": settings.APP_VERSION,
            "cache": "redis" if cache.redis_client else "memory",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "storefront.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
