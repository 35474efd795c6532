import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from article_api.cache import cache
from article_api.config import settings
from article_api.database import init_models
from article_api.error_handlers import register_error_handlers
from article_api.middleware import TimingMiddleware
from article_api.observability import setup_logging
from article_api.routers import articles

VERSION = "1.0.0"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    if settings.APP_ENV == "development" and settings.DATABASE_URL.startswith("sqlite"):
        await init_models()
        logger.info("Created schema on %s", settings.DATABASE_URL)
    await cache.connect()
    yield
    # Shutdown
    await cache.disconnect()


app = FastAPI(
    title="Article API",
    description="Create, update, delete, look up and list blog articles",
    version=VERSION,
    lifespan=lifespan,
)

# Middleware
app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Routers
app.include_router(articles.router)


@app.get("/health")
async def health():
    return {
        "status": "healthy",
        "version": VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "cache": cache.stats,
    }
