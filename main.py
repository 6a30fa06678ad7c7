"""
FastAPI Application - Product Catalog Service
Public product reads, admin-gated writes, PostgreSQL storage
"""

# Load environment variables from .env file FIRST before any other imports
from dotenv import load_dotenv
load_dotenv()

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import health, products
from app.core.config import config, validate_config
from app.core.errors import (
    ErrorResponse,
    error_response_handler,
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from app.core.logger import logger
from app.core.telemetry import instrument_app
from app.db.postgres import close_postgres_connection, connect_to_postgres
from app.flags import DaprConfigurationSource, FlagPoller, flag_store
from app.middleware import OfflineMiddleware, RequestContextMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup: configuration and database faults abort the process
    logger.info("Starting Product Catalog Service...")
    validate_config(config)
    await connect_to_postgres()

    poller = None
    if config.flags_enabled:
        poller = FlagPoller(DaprConfigurationSource(), flag_store, config.flags_poll_interval)
        snapshot = await poller.refresh()
        logger.info(
            "Feature flags ready",
            metadata={"event": "flags_ready", "offline": snapshot.offline, "log_level": snapshot.log_level}
        )
        poller.start()

    logger.info(
        "Product Catalog Service started successfully",
        metadata={
            "service_name": config.service_name,
            "version": config.service_version,
            "environment": config.environment,
            "port": config.port,
            "log_level": logger.get_level(),
        }
    )

    yield

    # Shutdown
    logger.info("Shutting down Product Catalog Service...")
    if poller is not None:
        await poller.stop()
    await close_postgres_connection()


# Create FastAPI application with lifespan management
app = FastAPI(
    title="Product Catalog Service",
    description="Product catalog with role-gated administration",
    version=config.service_version,
    lifespan=lifespan
)

# Instrument app with OpenTelemetry for automatic tracing
instrument_app(app)

# Configure error handlers
app.add_exception_handler(ErrorResponse, error_response_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# Offline gate runs inside the request context so rejected requests are still logged
app.add_middleware(OfflineMiddleware)
app.add_middleware(RequestContextMiddleware)

# Include API routers
app.include_router(health.router, tags=["health"])
app.include_router(products.router, prefix="/products", tags=["products"])
app.include_router(products.admin_router, prefix="/products", tags=["products"])


if __name__ == "__main__":
    import uvicorn

    logger.info(
        f"Starting {config.service_name} on port {config.port}",
        metadata={
            "service_name": config.service_name,
            "version": config.service_version,
            "environment": config.environment,
            "port": config.port
        }
    )

    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.environment == "development"
    )
