"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from clubroll.config import get_settings
from clubroll.db.database import init_db
from clubroll.dependencies import DbSession

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events.

    Args:
        app: FastAPI application instance.
    """
    # Startup
    init_db()
    yield
    # Shutdown (cleanup if needed)


app = FastAPI(
    title=settings.app_name,
    description="Club membership register with DONMAN CSV import and export",
    version="0.1.0",
    lifespan=lifespan,
    debug=settings.debug,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Import and include routers
from clubroll.exports.router import router as exports_router
from clubroll.imports.router import router as imports_router

# API routes
app.include_router(imports_router, prefix="/api", tags=["imports"])
app.include_router(exports_router, prefix="/api", tags=["exports"])


@app.get("/health")
async def health_check(db: DbSession):
    """Health check endpoint for Docker/Kubernetes.

    Returns:
        dict: Health status and database connectivity.
    """
    try:
        db.execute(text("SELECT 1"))
        database = "connected"
    except SQLAlchemyError as e:
        logger.warning(f"Health check could not reach the database: {e}")
        database = "unavailable"

    return {"status": "healthy", "app": settings.app_name, "database": database}
