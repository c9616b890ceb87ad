"""
SEO component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from chameleon.components.routing import RouteDescriptor
from chameleon.core.entities import Post, Tenant

# --- Tag Models ---


@dataclass(frozen=True)
class MetaTag:
    """HTML meta tag representation."""

    name: str | None = None
    property: str | None = None  # For OG tags
    content: str = ""


@dataclass(frozen=True)
class LinkTag:
    """HTML link tag representation."""

    rel: str
    href: str
    hreflang: str | None = None


# --- Page Content ---


@dataclass(frozen=True)
class PageContent:
    """Content fetched for the current route."""

    post: Post | None = None
    posts: tuple[Post, ...] = ()
    tag: str | None = None


# --- Meta Block ---


@dataclass(frozen=True)
class MetaBlock:
    """
    Everything that goes into <head> for one response.

    Built per request from tenant, route and content; never cached.
    """

    title: str
    description: str
    canonical_url: str
    language: str
    page_url: str = ""
    robots: str = "index, follow"
    og_type: str = "website"
    site_name: str = ""
    image: str | None = None
    twitter_card: str = "summary"
    twitter_site: str | None = None
    favicon: str | None = None
    alternates: tuple[LinkTag, ...] = ()
    json_ld: dict[str, Any] = field(default_factory=dict)

    @property
    def og_locale(self) -> str:
        return self.language.replace("-", "_")

    def to_meta_tags(self) -> list[MetaTag]:
        """Convert to list of MetaTag objects for rendering."""
        url = self.page_url or self.canonical_url
        tags = [
            MetaTag(name="description", content=self.description),
            MetaTag(name="robots", content=self.robots),
            MetaTag(property="og:title", content=self.title),
            MetaTag(property="og:description", content=self.description),
            MetaTag(property="og:type", content=self.og_type),
            MetaTag(property="og:url", content=url),
            MetaTag(property="og:site_name", content=self.site_name),
            MetaTag(property="og:locale", content=self.og_locale),
        ]

        if self.image:
            tags.append(MetaTag(property="og:image", content=self.image))

        tags.extend(
            [
                MetaTag(name="twitter:card", content=self.twitter_card),
                MetaTag(name="twitter:title", content=self.title),
                MetaTag(name="twitter:description", content=self.description),
            ]
        )
        if self.twitter_site:
            tags.append(MetaTag(name="twitter:site", content=self.twitter_site))
        if self.image:
            tags.append(MetaTag(name="twitter:image", content=self.image))

        return tags

    def to_link_tags(self) -> list[LinkTag]:
        links = [LinkTag(rel="canonical", href=self.canonical_url)]
        links.extend(self.alternates)
        if self.favicon:
            links.append(LinkTag(rel="icon", href=self.favicon))
        return links


# --- Input Models ---


@dataclass(frozen=True)
class ComposeInput:
    """Input for composing the head block of a tenant page."""

    tenant: Tenant
    route: RouteDescriptor
    content: PageContent = field(default_factory=PageContent)
    visitor_hostname: str = ""


# --- Output Models ---


@dataclass(frozen=True)
class ComposeOutput:
    meta: MetaBlock
    head_html: str
