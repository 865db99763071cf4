"""FastAPI application for the Zeyra maternity directory backend."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from zeyra.config import get_settings
from zeyra.database import check_db_ready
from zeyra.exceptions import ConfigurationError
from zeyra.rate_limit import limiter
from zeyra.routers import account_router, health_router, sync_router
from zeyra.tasks.scheduler import setup_scheduler, shutdown_scheduler

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    logger.info("Starting Zeyra backend...")

    # Verify database is ready
    try:
        await check_db_ready()
        logger.info("Database ready")
    except Exception as e:
        logger.error(f"Database not ready: {e}")
        raise

    setup_scheduler()

    yield

    # Shutdown
    shutdown_scheduler()
    logger.info("Zeyra backend shut down")


# Create FastAPI app
app = FastAPI(
    title="Zeyra API",
    description="Maternity unit directory backend - CQC sync and account services",
    version="0.1.0",
    lifespan=lifespan,
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    """Missing credentials are a setup failure: no work has been attempted."""
    logger.error(f"Configuration error: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": str(exc), "errors": [str(exc)]},
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unhandled exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"},
    )


# Include routers
app.include_router(health_router)
app.include_router(sync_router, prefix=settings.api_v1_prefix)
app.include_router(account_router, prefix=settings.api_v1_prefix)


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Zeyra API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "zeyra.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
