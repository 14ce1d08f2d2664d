import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from inkwell.adapters.cache.ttl_store import InMemoryTTLStore
from inkwell.adapters.clock import SystemClock
from inkwell.adapters.fs.filestore import FileSystemStore
from inkwell.adapters.sqlite.migrator import DEFAULT_MIGRATIONS_DIR
from inkwell.adapters.sqlite.repos import SQLiteUnitOfWork
from inkwell.api.auth_utils import SECRET_KEY, decode_access_token
from inkwell.components.articles import ArticleConfig, build_article_config
from inkwell.components.media import MediaConfig, build_media_config
from inkwell.components.preview import PreviewConfig, build_preview_config
from inkwell.domain.entities import Actor
from inkwell.rules.loader import load_rules
from inkwell.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        data_dir = Path(os.environ.get("INKWELL_DATA_DIR", "./data"))
        self.db_path = str(data_dir / "inkwell.db")
        self.media_dir = data_dir / "media_store"
        self.migrations_dir = Path(
            os.environ.get("INKWELL_MIGRATIONS_DIR", str(DEFAULT_MIGRATIONS_DIR))
        )
        self.rules_path = Path(
            os.environ.get("INKWELL_RULES_PATH", str(self.base_dir / "rules.yaml"))
        )
        self.base_url = os.environ.get("INKWELL_BASE_URL", "http://localhost:8000").rstrip("/")
        self.secret_key = os.environ.get("INKWELL_SECRET_KEY", SECRET_KEY)


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


def get_article_config(rules: Rules = Depends(get_rules)) -> ArticleConfig:
    return build_article_config(rules.articles)


def get_media_config(
    rules: Rules = Depends(get_rules),
    settings: Settings = Depends(get_settings),
) -> MediaConfig:
    return build_media_config(rules.uploads, base_url=settings.base_url)


def get_preview_config(
    rules: Rules = Depends(get_rules),
    settings: Settings = Depends(get_settings),
) -> PreviewConfig:
    return build_preview_config(rules.preview, base_url=settings.base_url)


# --- Persistence ---
def get_uow(settings: Settings = Depends(get_settings)) -> SQLiteUnitOfWork:
    return SQLiteUnitOfWork(settings.db_path)


def get_file_store(settings: Settings = Depends(get_settings)) -> FileSystemStore:
    return FileSystemStore(base_path=str(settings.media_dir))


# Time adapter for deterministic time operations
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


# Preview tokens live for the lifetime of the process
_ttl_store_instance: InMemoryTTLStore | None = None


def get_ttl_store() -> InMemoryTTLStore:
    """Get preview token store singleton."""
    global _ttl_store_instance
    if _ttl_store_instance is None:
        _ttl_store_instance = InMemoryTTLStore(clock=get_clock())
    return _ttl_store_instance


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/token", auto_error=False)


async def get_current_actor(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    settings: Settings = Depends(get_settings),
) -> Actor:
    # 1. Try Cookie first (HttpOnly)
    cookie_token = request.cookies.get("access_token")
    if cookie_token and cookie_token.startswith("Bearer "):
        token = cookie_token.split(" ", 1)[1]

    # 2. Header (OAuth2Bearer) is handled by Depends(oauth2_scheme)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # 3. Decode
    payload = decode_access_token(token, settings.secret_key)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if user_id is None or not isinstance(user_id, str):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    try:
        owner_id = UUID(user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        ) from None

    name = payload.get("name")
    return Actor(user_id=owner_id, display_name=name if isinstance(name, str) else None)
