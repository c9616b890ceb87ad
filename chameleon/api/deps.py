import os
from functools import lru_cache
from pathlib import Path

from chameleon.adapters.clock import SystemClock
from chameleon.adapters.render.html_renderer import HtmlRenderer
from chameleon.adapters.sqlite.store import SQLiteStore
from chameleon.components.ssr import (
    DEFAULT_TEMPLATE_PATH,
    SsrPipeline,
    TemplateLoader,
    create_ssr_pipeline,
)
from chameleon.rules.loader import load_rules
from chameleon.rules.models import Rules


def _split_hosts(raw: str) -> list[str]:
    return [h.strip().lower() for h in raw.split(",") if h.strip()]


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        mode = os.environ.get("CHAMELEON_MODE", "production").strip().lower()
        self.mode = "development" if mode == "development" else "production"
        self.proxy_secret = os.environ.get("CHAMELEON_PROXY_SECRET") or None
        self.trusted_proxy_hosts = _split_hosts(os.environ.get("CHAMELEON_TRUSTED_PROXY_HOSTS", ""))
        self.data_dir = Path(os.environ.get("CHAMELEON_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "chameleon.db")
        self.template_path = Path(os.environ.get("CHAMELEON_TEMPLATE_PATH", DEFAULT_TEMPLATE_PATH))
        self.rules_path = Path(os.environ.get("CHAMELEON_RULES_PATH", self.base_dir / "rules.yaml"))


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules() -> Rules:
    return load_rules(get_settings().rules_path)


# --- Store ---
@lru_cache
def get_store() -> SQLiteStore:
    return SQLiteStore(get_settings().db_path)


# --- Pipeline ---
@lru_cache
def get_pipeline() -> SsrPipeline:
    """
    Process-wide pipeline.

    One instance per process so the tenant and sitemap caches survive
    between requests.
    """
    settings = get_settings()
    return create_ssr_pipeline(
        rules=get_rules(),
        store=get_store(),
        renderer=HtmlRenderer(),
        templates=TemplateLoader(settings.template_path, settings.mode),  # type: ignore[arg-type]
        clock=SystemClock(),
        proxy_secret=settings.proxy_secret,
        extra_trusted_hosts=settings.trusted_proxy_hosts,
    )
