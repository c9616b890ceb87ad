import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from chameleon.adapters.sqlite.migrator import SQLiteMigrator
from chameleon.api.deps import get_pipeline, get_rules, get_settings
from chameleon.app_shell.config import validate_edge_rules
from chameleon.app_shell.logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    configure_logging()
    settings = get_settings()

    # Load rules, migrate and build the pipeline on startup (fail-fast)
    try:
        rules = get_rules()
        validate_edge_rules(rules, settings.proxy_secret, settings.trusted_proxy_hosts)
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        SQLiteMigrator(settings.db_path).run_migrations()
        get_pipeline()
        logger.info(
            "Edge ready: mode=%s rules=%s template=%s",
            settings.mode,
            settings.rules_path,
            settings.template_path,
        )
    except Exception as e:
        logger.critical("Startup failed: %s", e)
        sys.exit(1)

    yield


app = FastAPI(
    title="Chameleon Edge",
    version="0.1.0",
    lifespan=lifespan,
    # Tenant sites own every other path
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "edge"}


# --- Routers ---
from chameleon.api.routes import public_ssr  # noqa: E402

# Catch-all; keep last
app.include_router(public_ssr.router, prefix="", tags=["SSR"])
