"""
Mortgage Calculator - monthly payment calculator with saved properties

Main FastAPI application entry point. Configures routes, static files,
and application lifecycle events.

Version: 1.0.0
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

# Import logging configuration (initializes logging)
from mortgage_calculator.logging_config import get_logger
from mortgage_calculator import __version__
from mortgage_calculator.config import STATIC_DIR
from mortgage_calculator.db import init_db

# Import route modules
from mortgage_calculator.routes import calculator
from mortgage_calculator.routes import properties
from mortgage_calculator.routes import compare
from mortgage_calculator.routes import mortgage_rate

# Get logger for this module
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifecycle manager.

    Creates missing tables on startup and logs start/stop.
    """
    logger.info("=" * 60)
    logger.info("Mortgage Calculator Starting")
    logger.info(f"Version: {app.version}")
    logger.info("=" * 60)

    init_db()

    yield  # Application runs here

    logger.info("Mortgage Calculator Shutting Down")
    logger.info("=" * 60)


app = FastAPI(
    title="Mortgage Calculator",
    description="Monthly mortgage payment calculator with live rate estimates and saved property comparison.",
    version=__version__,
    lifespan=lifespan
)

app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

app.include_router(calculator.router, tags=["Calculator"])
app.include_router(properties.router, tags=["Saved Properties"])
app.include_router(compare.router, tags=["Compare"])
app.include_router(mortgage_rate.router, tags=["Mortgage Rate"])

logger.info("All routes registered successfully")


def run():
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run("mortgage_calculator.main:app", host="127.0.0.1", port=8000)
