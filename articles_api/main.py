import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from articles_api import __version__
from articles_api.cache import cache
from articles_api.config import configure_logging, settings
from articles_api.database import Database
from articles_api.errors import register_exception_handlers
from articles_api.middleware import TimingMiddleware
from articles_api.routers import articles, auth, users

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    database = Database()
    await database.connect()
    if settings.CREATE_TABLES_ON_STARTUP:
        await database.create_tables()
    app.state.database = database
    await cache.connect()
    logger.info("Articles API started (env=%s)", settings.APP_ENV)
    yield
    # Shutdown
    await cache.disconnect()
    await database.disconnect()


app = FastAPI(
    title="Articles API",
    description="User registration/login and owner-scoped CRUD on short text articles",
    version=__version__,
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

register_exception_handlers(app)

# Routers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(articles.router)


@app.get("/health")
async def health():
    return {"status": "healthy", "version": __version__, "cache": {"enabled": cache.enabled}}
