"""
Verdant API - Main application entry point.

Plant care tracking: schedules, reminders and guided care sessions.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from verdant.core.config import get_settings
from verdant.core.database import Database
from verdant.core.middleware import MaxBodySizeMiddleware
from verdant.care.service import CareSessionService
from verdant.care.views import router as care_router
from verdant.plants.views import router as plants_router

settings = get_settings()
API_PREFIX = "/api/v1"

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events."""
    # Startup
    await Database.connect()
    yield
    # Shutdown
    await CareSessionService.shutdown()
    await Database.disconnect()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""
## Verdant API

Keep track of your houseplants.

### Features

- 🌱 **Plants**: Register plants with a photo and notes
- 📅 **Schedules**: Daily, weekly, every-2-weeks or monthly watering, rotation and fertilizing
- ✅ **Care Sessions**: Walk through every plant that needs care today, one task at a time
    """,
    lifespan=lifespan,
    docs_url=f"{API_PREFIX}/docs",
    redoc_url=f"{API_PREFIX}/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(MaxBodySizeMiddleware)

# Include routers
routers = [
    plants_router,
    care_router,
]

for router in routers:
    app.include_router(router, prefix=API_PREFIX)


@app.get("/", tags=["Health"])
async def root():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "database": "connected" if Database.client else "disconnected",
        "version": settings.APP_VERSION,
    }
