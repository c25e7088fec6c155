"""FastAPI application for mongo-lifecycle."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
import os
import sys

from mongo_lifecycle.backup import BackupManager
from mongo_lifecycle.config import BackupConfig
from mongo_lifecycle._storage import MongoClusterRegistry, create_config_store
from .config import settings
from .routers import backup, health

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Attach an app-managed stdout handler to the package logger.

    Set DISABLE_APP_LOGGING=true to leave logging to the server instead.
    """
    package_logger = logging.getLogger("mongo-lifecycle")

    if os.getenv("DISABLE_APP_LOGGING", "false").lower() == "true":
        package_logger.propagate = True
        return

    package_logger.setLevel(logging.INFO)
    package_logger.propagate = False
    package_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s - [%(name)s] - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    package_logger.addHandler(console_handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage registry, configuration store and backup manager lifecycle."""
    configure_logging()
    logger.info("Initializing backup manager...")

    config = BackupConfig.from_env()

    registry = MongoClusterRegistry()
    for name, uri in settings.clusters.items():
        registry.add_cluster(name, uri)

    config_store = await create_config_store(config)

    try:
        app.state.backup_manager = BackupManager(registry, config_store, config=config)
        await app.state.backup_manager.initialize()
        logger.info("Backup manager initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize backup manager: {e}")
        raise

    yield

    # Cleanup
    logger.info("Shutting down backup manager...")
    await app.state.backup_manager.shutdown()
    await registry.close()
    if hasattr(config_store, "close"):
        await config_store.close()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs",
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(backup.router, prefix=settings.api_prefix)
    app.include_router(health.router, prefix=settings.api_prefix)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": settings.api_title,
            "version": settings.api_version,
            "docs": f"{settings.api_prefix}/docs"
        }

    return app


# Create default app instance
app = create_app()
