import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from firmsite.adapters.auth.tokens import JWTTokenCodec, get_password_hash
from firmsite.adapters.clock import SystemClock
from firmsite.adapters.media.local import LocalMediaStore
from firmsite.adapters.sqlite.repos import SQLiteArticleRepo, SQLiteGalleryRepo
from firmsite.ports.clock import ClockPort
from firmsite.rules.loader import load_rules
from firmsite.rules.models import Rules
from firmsite.services.auth import AccessGate, Identity
from firmsite.services.content import ArticleRepository, GalleryRepository
from firmsite.services.publish import PublishingService


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.data_dir = Path(os.environ.get("FIRMSITE_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "firmsite.db")
        self.media_dir = self.data_dir / "media"
        self.media_base_url = os.environ.get("FIRMSITE_MEDIA_BASE_URL", "/media")
        rules_path = os.environ.get("FIRMSITE_RULES_PATH")
        self.rules_path = Path(rules_path) if rules_path else None
        self.secret_key = os.environ.get("FIRMSITE_SECRET_KEY", "dev-secret-unsafe")
        self.admin_username = os.environ.get("ADMIN_USERNAME", "admin")
        # Plain ADMIN_PASSWORD is hashed once here and never kept
        self.admin_password_hash = os.environ.get("ADMIN_PASSWORD_HASH") or get_password_hash(
            os.environ.get("ADMIN_PASSWORD", "admin123")
        )
        origins = os.environ.get("FIRMSITE_CORS_ORIGINS", "*")
        self.cors_origins = [o.strip() for o in origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def _load_rules_cached(path: Path | None) -> Rules:
    return load_rules(path)


def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return _load_rules_cached(settings.rules_path)


# Clock singleton; tests override get_clock with a FixedClock
_clock_instance: SystemClock | None = None


def get_clock() -> ClockPort:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


# --- Repos ---
def get_article_store(settings: Settings = Depends(get_settings)) -> SQLiteArticleRepo:
    return SQLiteArticleRepo(settings.db_path)


def get_gallery_store(settings: Settings = Depends(get_settings)) -> SQLiteGalleryRepo:
    return SQLiteGalleryRepo(settings.db_path)


def get_article_repository(
    store: SQLiteArticleRepo = Depends(get_article_store),
    rules: Rules = Depends(get_rules),
    clock: ClockPort = Depends(get_clock),
) -> ArticleRepository:
    return ArticleRepository(store, rules.articles, clock, rules.pagination.max_limit)


def get_gallery_repository(
    store: SQLiteGalleryRepo = Depends(get_gallery_store),
    rules: Rules = Depends(get_rules),
    clock: ClockPort = Depends(get_clock),
) -> GalleryRepository:
    return GalleryRepository(store, rules.gallery, clock, rules.pagination.max_limit)


# --- Media ---
def get_media_store(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> LocalMediaStore:
    return LocalMediaStore(
        base_path=settings.media_dir,
        public_base_url=settings.media_base_url,
        rules=rules.uploads,
        folder=rules.media.folder,
    )


# --- Services ---
def get_publishing_service(
    articles: ArticleRepository = Depends(get_article_repository),
    gallery: GalleryRepository = Depends(get_gallery_repository),
    media: LocalMediaStore = Depends(get_media_store),
    rules: Rules = Depends(get_rules),
) -> PublishingService:
    return PublishingService(articles, gallery, media, rules.media)


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_access_gate(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
    clock: ClockPort = Depends(get_clock),
) -> AccessGate:
    return AccessGate(
        admin_username=settings.admin_username,
        admin_password_hash=settings.admin_password_hash,
        codec=JWTTokenCodec(settings.secret_key, rules.auth.algorithm),
        clock=clock,
        ttl_minutes=rules.auth.token_ttl_minutes,
    )


def require_admin(
    token: Annotated[str | None, Depends(oauth2_scheme)],
    gate: AccessGate = Depends(get_access_gate),
) -> Identity:
    """Raises AuthError (401) when the bearer token is missing, stale or forged."""
    return gate.verify(token)
