"""
pkgdiff Backend - FastAPI Application Entry Point
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pkgdiff.logging_config import setup_logging
from pkgdiff.routers import config, diff, versions
from pkgdiff.services.config_manager import ConfigManager
from pkgdiff.services.package_diff import get_package_diff_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - startup and shutdown logic"""
    config_manager = ConfigManager.get_instance()
    setup_logging(config_manager.get("logLevel"))
    logger.info("Starting pkgdiff backend")

    service = get_package_diff_service()
    logger.info(
        "Extraction limits: %d bytes per archive, %d files, %d bytes per file",
        service.limits.max_archive_size,
        service.limits.max_files,
        service.limits.max_file_size,
    )

    yield
    logger.info("Shutting down pkgdiff backend")


app = FastAPI(
    title="pkgdiff",
    description="Compare published versions of npm packages and WordPress plugins",
    version="1.0.0",
    lifespan=lifespan,
)

# The diff viewer frontend is served from a different origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "PUT"],
    allow_headers=["*"],
)

# Include routers
app.include_router(versions.router, prefix="/api/versions", tags=["versions"])
app.include_router(diff.router, prefix="/api/diff", tags=["diff"])
app.include_router(config.router, prefix="/api/config", tags=["config"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "pkgdiff"}


def run():
    """Console entry point"""
    import uvicorn

    server = ConfigManager.get_instance().get("server", {})
    uvicorn.run(app, host=server.get("host", "0.0.0.0"), port=server.get("port", 8000))


if __name__ == "__main__":
    run()
