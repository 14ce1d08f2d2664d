import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inkwell.adapters.sqlite.migrator import SQLiteMigrator
from inkwell.api.deps import get_settings
from inkwell.api.errors import ApiError, api_error_handler
from inkwell.rules.loader import load_rules

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules and validate on startup (fail-fast)
    try:
        load_rules(settings.rules_path)
        logger.info("Rules loaded from %s", settings.rules_path)
    except Exception as e:
        logger.critical("Rules load failed: %s", e)
        sys.exit(1)

    applied = SQLiteMigrator(settings.db_path, settings.migrations_dir).run_migrations()
    if applied:
        logger.info("Applied migrations: %s", ", ".join(applied))

    yield
    # Shutdown cleanup if needed


app = FastAPI(
    title="Inkwell API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_exception_handler(ApiError, api_error_handler)  # type: ignore[arg-type]

# --- Routers ---
from inkwell.api.routes import articles, media, preview, public  # noqa: E402

# Author routes first so /articles/create wins over the public /articles/{slug}
app.include_router(articles.router, tags=["Articles"])
app.include_router(media.router, tags=["Media"])
app.include_router(preview.router, tags=["Preview"])
app.include_router(public.router, tags=["Public"])


# CORS (Allow Frontend)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
