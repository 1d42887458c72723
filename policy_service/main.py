"""Main FastAPI application"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.error_handlers import register_error_handlers
from .api.v1.routers import router as v1_router
from .core.config import logger, settings
from .core.container import build_container
from .infrastructure.persistence.database import (
    close_db,
    get_session_factory,
    init_database,
    init_db,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting Policy Service...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Version: {settings.version}")

    # Startup logic
    try:
        init_database(settings.db_url)
        await init_db()
        logger.info("✓ Database initialized")

        app.state.container = build_container(get_session_factory(), settings)
        logger.info("✓ Event bus and subscribers wired")

    except Exception as e:
        logger.error(f"Failed to initialize: {e}")
        raise

    yield

    # Shutdown logic
    logger.info("Shutting down Policy Service...")
    await app.state.container.event_bus.drain()
    await close_db()


# Create FastAPI application
app = FastAPI(
    title="Policy Service",
    description="Policy lifecycle, approval orchestration and translations",
    version=settings.version,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.is_development else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return JSONResponse(
        content={
            "status": "healthy",
            "version": settings.version,
            "environment": settings.environment,
        }
    )


app.include_router(v1_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "policy_service.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
