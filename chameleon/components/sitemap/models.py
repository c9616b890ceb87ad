"""
Sitemap component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass

from chameleon.core.entities import Tenant


@dataclass(frozen=True)
class SitemapEntry:
    """Entry for sitemap generation."""

    loc: str
    lastmod: str | None = None
    changefreq: str | None = None
    priority: float | None = None


# --- Input Models ---


@dataclass(frozen=True)
class SitemapInput:
    """Input for building a tenant's sitemap.xml."""

    tenant: Tenant
    visitor_hostname: str = ""


@dataclass(frozen=True)
class RobotsInput:
    """Input for building a tenant's robots.txt."""

    tenant: Tenant
    visitor_hostname: str = ""


# --- Output Models ---


@dataclass(frozen=True)
class SitemapOutput:
    xml: str
    from_cache: bool = False


@dataclass(frozen=True)
class RobotsOutput:
    text: str
