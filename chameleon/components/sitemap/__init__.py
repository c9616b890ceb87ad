"""
Sitemap component - crawler-facing system routes.
"""

from ._impl import (
    DEFAULT_DISALLOWED_PREFIXES,
    SitemapService,
    create_sitemap_service,
    escape_xml,
    render_robots_txt,
    render_sitemap_xml,
)
from .component import run, run_robots, run_sitemap
from .models import RobotsInput, RobotsOutput, SitemapEntry, SitemapInput, SitemapOutput
from .ports import SitemapContentPort

__all__ = [
    # Entry points
    "run",
    "run_robots",
    "run_sitemap",
    # Models
    "RobotsInput",
    "RobotsOutput",
    "SitemapEntry",
    "SitemapInput",
    "SitemapOutput",
    # Ports
    "SitemapContentPort",
    # Service
    "DEFAULT_DISALLOWED_PREFIXES",
    "SitemapService",
    "create_sitemap_service",
    "escape_xml",
    "render_robots_txt",
    "render_sitemap_xml",
]
