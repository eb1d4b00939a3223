# backend/src/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.api.health import router as health_router
from src.config import settings
from src.health.setup import init_health_engine, shutdown_health_engine

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    init_health_engine()
    yield
    # Shutdown
    await shutdown_health_engine()


app = FastAPI(title="Developer Portal Health", version="0.1.0", lifespan=lifespan)

app.include_router(health_router)


@app.get("/health")
async def health():
    return {"status": "healthy"}
