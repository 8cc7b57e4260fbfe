"""
CMS Sync - Main Application Entry Point
Mirrors Sanity locations, tenants and translations into the document store
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import structlog

from cms_sync.api import popular_times, sanity
from cms_sync.core.config import get_settings
from cms_sync.core.dependencies import build_services
from cms_sync.core.logging_config import configure_logging

settings = get_settings()
configure_logging(settings.LOG_LEVEL)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info("Initializing CMS sync service", store=settings.STORE_BACKEND)
    app.state.services = build_services(settings)

    yield

    # Shutdown
    logger.info("Shutting down CMS sync service")
    await app.state.services.aclose()


# Create FastAPI application
app = FastAPI(
    title="CMS Sync API",
    description="Synchronizes CMS content into the front-end document store",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure middleware stack
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(sanity.router, prefix=f"{settings.API_V1_PREFIX}/sanity", tags=["sanity"])
app.include_router(
    popular_times.router,
    prefix=f"{settings.API_V1_PREFIX}/popular-times",
    tags=["popular-times"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "cms-sync-api"}


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "CMS Sync API",
        "version": "1.0.0",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "cms_sync.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level="info",
    )
