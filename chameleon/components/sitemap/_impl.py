"""
SitemapService - per-tenant sitemap.xml and robots.txt.

Key behaviors:
- Homepage, every indexable post at its canonical URL, top tag archives
- Posts marked noindex are left out
- Generated XML is cached per (tenant, base URL) for a TTL, LRU-bounded
- invalidate() drops every cached variant of one tenant

Invariants:
- Every <loc> is XML-escaped
- Post URLs match the canonical links emitted in page heads
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from urllib.parse import quote
from uuid import UUID

from chameleon.components.canonical import post_path
from chameleon.components.seo import build_canonical_url, canonical_base_url
from chameleon.core.entities import Tenant

from .models import SitemapEntry
from .ports import ClockPort, SitemapContentPort

logger = logging.getLogger(__name__)

SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"
DEFAULT_DISALLOWED_PREFIXES: tuple[str, ...] = ("/admin", "/editor", "/api", "/bv_api")


# --- XML Rendering ---


def escape_xml(text: str) -> str:
    """Escape XML special characters."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def render_sitemap_xml(entries: list[SitemapEntry]) -> str:
    """
    Render sitemap entries to XML string.

    Args:
        entries: List of SitemapEntry objects

    Returns:
        Valid sitemap.xml content
    """
    xml_parts = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<urlset xmlns="{SITEMAP_NAMESPACE}">',
    ]

    for entry in entries:
        xml_parts.append("  <url>")
        xml_parts.append(f"    <loc>{escape_xml(entry.loc)}</loc>")
        if entry.lastmod:
            xml_parts.append(f"    <lastmod>{entry.lastmod}</lastmod>")
        if entry.changefreq:
            xml_parts.append(f"    <changefreq>{entry.changefreq}</changefreq>")
        if entry.priority is not None:
            xml_parts.append(f"    <priority>{entry.priority:.1f}</priority>")
        xml_parts.append("  </url>")

    xml_parts.append("</urlset>")
    return "\n".join(xml_parts)


def render_robots_txt(
    sitemap_url: str,
    base_path: str = "",
    disallowed_prefixes: tuple[str, ...] | list[str] = DEFAULT_DISALLOWED_PREFIXES,
) -> str:
    lines = ["User-agent: *", "Allow: /"]
    for prefix in disallowed_prefixes:
        lines.append(f"Disallow: {base_path}{prefix}")
    lines.append("")
    lines.append(f"Sitemap: {sitemap_url}")
    return "\n".join(lines) + "\n"


# --- Service ---


@dataclass(frozen=True)
class _CachedSitemap:
    xml: str
    generated_at: float


class SitemapService:
    """Builds and caches tenant sitemaps."""

    def __init__(
        self,
        store: SitemapContentPort,
        clock: ClockPort,
        *,
        ttl_seconds: float = 900,
        max_entries: int = 256,
        top_tags: int = 20,
        scheme: str = "https",
        disallowed_prefixes: tuple[str, ...] | list[str] = DEFAULT_DISALLOWED_PREFIXES,
    ) -> None:
        self._store = store
        self._clock = clock
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._top_tags = top_tags
        self._scheme = scheme
        self._disallowed = tuple(disallowed_prefixes)
        self._cache: OrderedDict[tuple[UUID, str], _CachedSitemap] = OrderedDict()

    def __len__(self) -> int:
        return len(self._cache)

    def base_url(self, tenant: Tenant, visitor_hostname: str = "") -> str:
        return canonical_base_url(tenant, visitor_hostname, self._scheme)

    async def build(self, tenant: Tenant, visitor_hostname: str = "") -> tuple[str, bool]:
        """
        Sitemap XML for a tenant.

        Returns:
            (xml, from_cache)
        """
        base_url = self.base_url(tenant, visitor_hostname)
        key = (tenant.id, base_url)

        cached = self._cache.get(key)
        if cached is not None:
            if self._clock.monotonic() - cached.generated_at < self._ttl:
                self._cache.move_to_end(key)
                return cached.xml, True
            del self._cache[key]

        entries = await self._entries(tenant, base_url)
        xml = render_sitemap_xml(entries)

        if self._ttl > 0:
            self._remember(key, xml)
        logger.info("Generated sitemap for tenant=%s (%d urls)", tenant.id, len(entries))
        return xml, False

    def _remember(self, key: tuple[UUID, str], xml: str) -> None:
        now = self._clock.monotonic()
        expired = [k for k, v in self._cache.items() if now - v.generated_at >= self._ttl]
        for k in expired:
            del self._cache[k]

        self._cache[key] = _CachedSitemap(xml=xml, generated_at=now)
        self._cache.move_to_end(key)
        while len(self._cache) > self._max_entries:
            self._cache.popitem(last=False)

    async def _entries(self, tenant: Tenant, base_url: str) -> list[SitemapEntry]:
        posts = [p for p in await self._store.get_posts_by_tenant(tenant.id) if not p.noindex]
        tags = await self._store.get_top_tags(tenant.id, self._top_tags) if self._top_tags else []

        entries = [
            SitemapEntry(
                loc=build_canonical_url(base_url, "/"),
                lastmod=max(p.updated_at for p in posts).date().isoformat() if posts else None,
                changefreq="daily",
                priority=1.0,
            )
        ]

        for post in posts:
            loc = post.canonical_url or build_canonical_url(
                base_url, post_path(post.slug, tenant.post_url_format)
            )
            entries.append(
                SitemapEntry(
                    loc=loc,
                    lastmod=post.updated_at.date().isoformat(),
                    changefreq="weekly",
                    priority=0.8,
                )
            )

        for tag in tags:
            entries.append(
                SitemapEntry(
                    loc=f"{base_url}/tag/{quote(tag, safe='')}",
                    changefreq="weekly",
                    priority=0.6,
                )
            )

        return entries

    def robots(self, tenant: Tenant, visitor_hostname: str = "") -> str:
        base_url = self.base_url(tenant, visitor_hostname)
        return render_robots_txt(f"{base_url}/sitemap.xml", tenant.base_path, self._disallowed)

    def invalidate(self, tenant_id: UUID) -> int:
        """Drop every cached sitemap of a tenant (all base URL variants)."""
        stale = [key for key in self._cache if key[0] == tenant_id]
        for key in stale:
            del self._cache[key]
        return len(stale)

    def clear(self) -> None:
        self._cache.clear()


def create_sitemap_service(
    store: SitemapContentPort,
    clock: ClockPort,
    ttl_seconds: float = 900,
    max_entries: int = 256,
    top_tags: int = 20,
    scheme: str = "https",
    disallowed_prefixes: tuple[str, ...] | list[str] = DEFAULT_DISALLOWED_PREFIXES,
) -> SitemapService:
    """Create a SitemapService."""
    return SitemapService(
        store,
        clock,
        ttl_seconds=ttl_seconds,
        max_entries=max_entries,
        top_tags=top_tags,
        scheme=scheme,
        disallowed_prefixes=disallowed_prefixes,
    )
