import logging
from contextlib import asynccontextmanager

import redis
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from src.config import settings
from src.logging_config import setup_logging
from src.exceptions import register_exception_handlers
from src.cache import close_redis_client, get_cache
from src.database import get_db
from src.auth import router as auth_router
from src.admin import router as users_router
from src.buses import router as buses_router, bus_types_router
from src.trips import router as trips_router
from src.bookings import router as bookings_router
from src.payments import router as payments_router

setup_logging()
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    close_redis_client()

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="Bus Ticketing System API",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(
    auth_router,
    prefix=f"{settings.API_V1_STR}/auth",
    tags=["Authentication"]
)

app.include_router(
    users_router,
    prefix=f"{settings.API_V1_STR}/users",
    tags=["Admin Users"]
)

app.include_router(
    bus_types_router,
    prefix=f"{settings.API_V1_STR}/bus-types",
    tags=["Fleet"]
)

app.include_router(
    buses_router,
    prefix=f"{settings.API_V1_STR}/buses",
    tags=["Fleet"]
)

app.include_router(
    trips_router,
    prefix=f"{settings.API_V1_STR}/trips",
    tags=["Trips"]
)

app.include_router(
    bookings_router,
    prefix=f"{settings.API_V1_STR}/bookings",
    tags=["Bookings"]
)

app.include_router(
    payments_router,
    prefix=f"{settings.API_V1_STR}/payments",
    tags=["Payments"]
)

@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": "Bus Ticketing System API",
        "version": "1.0.0",
        "docs": "/docs"
    }

@app.get("/health")
def health_check(db: Session = Depends(get_db), cache: redis.Redis = Depends(get_cache)):
    """Health check endpoint; reports database and cache reachability"""
    checks = {"database": "ok", "cache": "ok"}

    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Health check: database unreachable")
        checks["database"] = "unavailable"

    try:
        cache.ping()
    except redis.RedisError:
        logger.exception("Health check: cache unreachable")
        checks["cache"] = "unavailable"

    healthy = all(value == "ok" for value in checks.values())
    return {"status": "healthy" if healthy else "degraded", "checks": checks}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
