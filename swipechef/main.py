"""SwipeChef API - FastAPI Application."""

import logging

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from swipechef.config import get_settings

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("swipechef")

# Initialize Sentry for error monitoring
if settings.sentry_dsn:
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        # Performance monitoring (20% sample)
        traces_sample_rate=0.2,
        # Don't send PII
        send_default_pii=False,
    )
    logger.info("Sentry initialized for %s", settings.environment)
else:
    logger.info("Sentry not configured (no SENTRY_DSN)")

from swipechef.routers import (
    health_router,
    session_router,
    recipes_router,
    meal_plans_router,
    households_router,
    settings_router,
)
from swipechef.sessions import get_session_registry

# Create FastAPI app
app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description="Swipe, save and plan recipes with your household",
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware - allow React Native and web clients
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",      # web dev
        "http://localhost:8081",      # Expo dev
        "http://localhost:19006",     # Expo web
        "exp://localhost:8081",       # Expo Go
        "*",                          # Allow all for development (restrict in prod)
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health_router)
app.include_router(session_router)
app.include_router(recipes_router)
app.include_router(meal_plans_router)
app.include_router(households_router)
app.include_router(settings_router)


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": settings.api_title,
        "version": settings.api_version,
        "docs": "/docs",
        "health": "/health",
    }


# Startup/shutdown events
@app.on_event("startup")
async def startup():
    """Run on application startup."""
    logger.info("%s v%s", settings.api_title, settings.api_version)
    logger.info("Environment: %s", settings.environment)


@app.on_event("shutdown")
async def shutdown():
    """Run on application shutdown."""
    await get_session_registry().close_all()
    logger.info("Shutting down %s", settings.api_title)
