"""
FastAPI application entry point.

This module initializes the FastAPI application, configures middleware,
and registers all API routers.
"""
import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.logging_config import configure_logging
from .api.routers import admin_users, auth, catalogs, geography

# Ensure logging is configured before the application starts serving requests.
configure_logging(settings.log_level)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup unless SKIP_DB_INIT=1."""
    if os.getenv("SKIP_DB_INIT") == "1":
        logger.info("SKIP_DB_INIT=1 detected; skipping database bootstrap during startup")
        yield
        return

    from .db.session import init_database

    try:
        init_database()
    except Exception:
        logger.exception("Failed to initialize database tables; the application cannot start")
        raise

    yield


app = FastAPI(
    title="Master Data Backoffice API",
    version="1.0.0",
    description="Administration of shared catalogs and the territorial division hierarchy",
    lifespan=lifespan,
)

allowed_origins = [origin.strip() for origin in settings.allowed_origins.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(catalogs.router)
app.include_router(geography.router)
app.include_router(admin_users.router)


@app.get("/health")
async def health_check():
    """Health check endpoint for deployment monitoring."""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "service": "backoffice-api",
    }
