import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from firmsite import __version__
from firmsite.adapters.sqlite.migrator import SQLiteMigrator
from firmsite.api.deps import Settings, get_settings
from firmsite.api.errors import register_error_handlers
from firmsite.rules.loader import load_rules

logger = logging.getLogger(__name__)


def _current_settings(app: FastAPI) -> Settings:
    # Honour test overrides so startup touches the same database as requests
    factory = app.dependency_overrides.get(get_settings, get_settings)
    settings: Settings = factory()
    return settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    settings = _current_settings(app)

    # Load rules and migrate on startup (fail-fast)
    load_rules(settings.rules_path)
    logger.info("Rules loaded from %s", settings.rules_path or "package defaults")
    applied = SQLiteMigrator(settings.db_path).run_migrations()
    logger.info("Database ready at %s (%d migrations applied)", settings.db_path, len(applied))

    yield


app = FastAPI(
    title="Firm Site CMS API",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

register_error_handlers(app)

# --- Routers ---
from firmsite.api.routes import articles, auth, images, media  # noqa: E402

app.include_router(articles.router, prefix="/api/articles", tags=["Articles"])
app.include_router(images.router, prefix="/api/images", tags=["Gallery"])
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(media.router, prefix="/media", tags=["Media"])


app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.get("/")
def index() -> dict[str, Any]:
    """Service index."""
    return {
        "message": "J KRISHNAN & CO - Backend API",
        "version": __version__,
        "endpoints": {
            "articles": "/api/articles",
            "gallery": "/api/images",
            "auth": "/api/auth",
            "media": "/media",
        },
    }


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
