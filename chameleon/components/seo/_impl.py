"""
SeoComposer - tenant-aware <head> metadata.

Builds title, description, canonical URL, hreflang, Open Graph, Twitter Card
and JSON-LD for one response, then renders them as escaped HTML.

Key behaviors:
- Canonical domain: tenant primary domain > proxy visitor hostname > request host
- Post canonical_url overrides the computed canonical link
- Title: post meta_title > post title > tenant meta_title > tenant title
- Descriptions are derived from the body when not set, cut at a word boundary
- Image: post og_image > post image_url > tenant og_image
- noindex posts always get "noindex, nofollow"

Invariants:
- Every interpolated string is HTML-escaped
- JSON-LD never contains a raw "<", ">" or "&"
- Same inputs always produce the same head block
"""

from __future__ import annotations

import html
import json
import re
from dataclasses import dataclass
from typing import Any

from chameleon.components.canonical import encode_slug, post_path
from chameleon.components.routing import RouteDescriptor, RouteType
from chameleon.core.entities import Post, Tenant

from .models import LinkTag, MetaBlock, PageContent

ELLIPSIS = "..."
NOINDEX = "noindex, nofollow"
SCHEMA_CONTEXT = "https://schema.org"


# --- Configuration ---


@dataclass(frozen=True)
class SeoConfig:
    """SEO configuration from rules."""

    default_scheme: str = "https"
    default_language: str = "en"
    description_max_length: int = 160
    twitter_site_from_domain: bool = True


DEFAULT_CONFIG = SeoConfig()


# --- Text Helpers ---

_FENCE = re.compile(r"```[^\n]*\n?")
_MD_IMAGE = re.compile(r"!\[([^\]]*)\]\([^)]*\)")
_MD_LINK = re.compile(r"\[([^\]]*)\]\([^)]*\)")
_HTML_TAG = re.compile(r"<[^>]*>")
_MD_HEADING = re.compile(r"^[ \t]{0,3}#{1,6}[ \t]*", re.MULTILINE)
_MD_BLOCKQUOTE = re.compile(r"^[ \t]*>[ \t]?", re.MULTILINE)
_MD_LIST = re.compile(r"^[ \t]*(?:[-*+]|\d+\.)[ \t]+", re.MULTILINE)
_MD_RULE = re.compile(r"^[ \t]*(?:-{3,}|\*{3,}|_{3,})[ \t]*$", re.MULTILINE)
_MD_EMPHASIS = re.compile(r"\*\*|__|~~|[*`]")
_WHITESPACE = re.compile(r"\s+")


def strip_markup(text: str) -> str:
    """Reduce markdown/HTML to plain text with collapsed whitespace."""
    if not text:
        return ""

    plain = _FENCE.sub("", text)
    plain = _MD_IMAGE.sub(r"\1", plain)
    plain = _MD_LINK.sub(r"\1", plain)
    plain = _HTML_TAG.sub(" ", plain)
    plain = _MD_RULE.sub("", plain)
    plain = _MD_HEADING.sub("", plain)
    plain = _MD_BLOCKQUOTE.sub("", plain)
    plain = _MD_LIST.sub("", plain)
    plain = _MD_EMPHASIS.sub("", plain)
    plain = html.unescape(plain)
    return _WHITESPACE.sub(" ", plain).strip()


def truncate_description(text: str, max_length: int = 160) -> str:
    """
    Truncate description to fit meta description limits.

    Cuts at the last word boundary that leaves room for the ellipsis; the
    ellipsis counts toward max_length and is only added when text was cut.
    A single word longer than the limit is the one case cut mid-word.
    """
    if len(text) <= max_length:
        return text

    budget = max_length - len(ELLIPSIS)
    window = text[: budget + 1]
    cut = window.rfind(" ")

    head = window[:cut] if cut > 0 else text[:budget]
    return head.rstrip(" ,;:-") + ELLIPSIS


# --- URL Helpers ---


def canonical_domain(tenant: Tenant, visitor_hostname: str = "") -> str:
    """Domain canonical URLs point at, whatever host served the request."""
    if tenant.primary_domain:
        return tenant.primary_domain
    if tenant.is_reverse_proxy and tenant.proxy_visitor_hostname:
        return tenant.proxy_visitor_hostname
    return visitor_hostname


def canonical_base_url(tenant: Tenant, visitor_hostname: str = "", scheme: str = "https") -> str:
    return f"{scheme}://{canonical_domain(tenant, visitor_hostname)}{tenant.base_path}"


def build_canonical_url(base_url: str, path: str) -> str:
    """
    Join a site base URL and an in-site path.

    The home page of a tenant mounted under a base path has no trailing slash.
    """
    if path in ("", "/"):
        return base_url if base_url.count("/") > 2 else base_url + "/"
    if not path.startswith("/"):
        path = "/" + path
    return f"{base_url}{path}"


def archive_path(route_type: RouteType, tag: str) -> str:
    prefix = "topics" if route_type == RouteType.TOPICS else "tag"
    return f"/{prefix}/{encode_slug(tag)}"


def resolve_image(tenant: Tenant, post: Post | None) -> str | None:
    """Resolve social image: post og_image > post image_url > tenant og_image."""
    if post is not None:
        if post.og_image:
            return post.og_image
        if post.image_url:
            return post.image_url
    return tenant.og_image or None


def twitter_handle(domain: str) -> str | None:
    """'@acme' for acme.com or www.acme.com."""
    labels = [label for label in domain.split(".") if label]
    if labels and labels[0] == "www":
        labels = labels[1:]
    if len(labels) < 2:
        return None
    return f"@{labels[0]}"


# --- JSON-LD ---


def _compact(value: Any) -> Any:
    """Drop None values and empty containers, recursively."""
    if isinstance(value, dict):
        compacted = {k: _compact(v) for k, v in value.items()}
        return {k: v for k, v in compacted.items() if v not in (None, "", [], {})}
    if isinstance(value, list):
        return [_compact(v) for v in value]
    return value


def json_ld_dumps(data: dict[str, Any]) -> str:
    """Serialize JSON-LD for embedding in a <script> element."""
    return (
        json.dumps(data, ensure_ascii=False)
        .replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("&", "\\u0026")
    )


def build_article_schema(
    tenant: Tenant,
    post: Post,
    canonical_url: str,
    description: str,
    language: str,
) -> dict[str, Any]:
    image = post.og_image or post.image_url
    return _compact(
        {
            "@context": SCHEMA_CONTEXT,
            "@type": "Article",
            "inLanguage": language,
            "headline": post.title,
            "description": description,
            "url": canonical_url,
            "datePublished": post.created_at.isoformat(),
            "dateModified": post.updated_at.isoformat(),
            "image": image,
            "author": {"@type": "Organization", "name": tenant.title},
            "publisher": {
                "@type": "Organization",
                "name": tenant.title,
                "logo": {"@type": "ImageObject", "url": tenant.logo_url}
                if tenant.logo_url
                else None,
            },
            "mainEntityOfPage": {"@type": "WebPage", "@id": canonical_url},
            "keywords": ", ".join(post.tags) if post.tags else None,
        }
    )


def build_collection_schema(
    tenant: Tenant,
    title: str,
    description: str,
    canonical_url: str,
    base_url: str,
    language: str,
    items: list[tuple[str, str]],
) -> dict[str, Any]:
    """CollectionPage for tag and topic archives; items are (name, url) pairs."""
    return _compact(
        {
            "@context": SCHEMA_CONTEXT,
            "@type": "CollectionPage",
            "inLanguage": language,
            "name": title,
            "description": description,
            "url": canonical_url,
            "isPartOf": {"@type": "WebSite", "name": tenant.title, "url": base_url},
            "mainEntity": {
                "@type": "ItemList",
                "itemListElement": [
                    {"@type": "ListItem", "position": i, "name": name, "url": url}
                    for i, (name, url) in enumerate(items, start=1)
                ],
            },
        }
    )


def build_website_schema(
    tenant: Tenant, description: str, canonical_url: str, language: str
) -> dict[str, Any]:
    return _compact(
        {
            "@context": SCHEMA_CONTEXT,
            "@type": "WebSite",
            "inLanguage": language,
            "name": tenant.meta_title or tenant.title,
            "description": description,
            "url": canonical_url,
            "publisher": {
                "@type": "Organization",
                "name": tenant.title,
                "logo": {"@type": "ImageObject", "url": tenant.logo_url}
                if tenant.logo_url
                else None,
            },
        }
    )


# --- Head Rendering ---


def _attr(value: str) -> str:
    return html.escape(value, quote=True)


def render_head_html(meta: MetaBlock) -> str:
    """Render a MetaBlock as the HTML inserted before </head>."""
    lines = [f"<title>{html.escape(meta.title, quote=False)}</title>"]

    for tag in meta.to_meta_tags():
        if not tag.content:
            continue
        if tag.property:
            lines.append(f'<meta property="{_attr(tag.property)}" content="{_attr(tag.content)}">')
        else:
            lines.append(f'<meta name="{_attr(tag.name or "")}" content="{_attr(tag.content)}">')

    for link in meta.to_link_tags():
        if link.hreflang:
            lines.append(
                f'<link rel="{_attr(link.rel)}" hreflang="{_attr(link.hreflang)}" '
                f'href="{_attr(link.href)}">'
            )
        else:
            lines.append(f'<link rel="{_attr(link.rel)}" href="{_attr(link.href)}">')

    if meta.json_ld:
        lines.append(f'<script type="application/ld+json">{json_ld_dumps(meta.json_ld)}</script>')

    return "\n".join(lines)


# --- Main Composer ---


class SeoComposer:
    """
    Head metadata builder.

    Pure: same inputs always produce the same MetaBlock.
    """

    def __init__(self, config: SeoConfig | None = None) -> None:
        self._config = config or DEFAULT_CONFIG

    def compose(
        self,
        tenant: Tenant,
        route: RouteDescriptor,
        content: PageContent | None = None,
        visitor_hostname: str = "",
    ) -> MetaBlock:
        """
        Build the MetaBlock for one response.

        Args:
            tenant: Resolved tenant
            route: Classified route (already canonical)
            content: Fetched content; a post makes this an article page
            visitor_hostname: Host the visitor used, last-resort canonical domain

        Returns:
            MetaBlock ready for render_head_html
        """
        content = content or PageContent()
        cfg = self._config
        language = tenant.language or cfg.default_language
        base_url = canonical_base_url(tenant, visitor_hostname, cfg.default_scheme)

        post = content.post
        if post is not None:
            title = post.meta_title or post.title or tenant.meta_title or tenant.title
            description = post.meta_description or truncate_description(
                strip_markup(post.content), cfg.description_max_length
            )
            if not description:
                description = self._home_description(tenant)
            page_url = build_canonical_url(
                base_url, post_path(post.slug, tenant.post_url_format)
            )
            canonical_url = post.canonical_url or page_url
            json_ld = build_article_schema(tenant, post, canonical_url, description, language)
            og_type = "article"
        elif route.is_archive and content.tag:
            title = f"{content.tag} - {tenant.title}"
            description = f"Articles tagged {content.tag} on {tenant.title}"
            page_url = build_canonical_url(base_url, archive_path(route.route_type, content.tag))
            canonical_url = page_url
            items = [
                (p.title, build_canonical_url(base_url, post_path(p.slug, tenant.post_url_format)))
                for p in content.posts
            ]
            json_ld = build_collection_schema(
                tenant, title, description, canonical_url, base_url, language, items
            )
            og_type = "website"
        else:
            title = tenant.meta_title or tenant.title
            description = self._home_description(tenant)
            page_url = build_canonical_url(base_url, "/")
            canonical_url = page_url
            json_ld = build_website_schema(tenant, description, canonical_url, language)
            og_type = "website"

        image = resolve_image(tenant, post)
        twitter_site = None
        if cfg.twitter_site_from_domain and tenant.primary_domain:
            twitter_site = twitter_handle(tenant.primary_domain)

        return MetaBlock(
            title=title,
            description=description,
            canonical_url=canonical_url,
            page_url=page_url,
            language=language,
            robots=NOINDEX if post is not None and post.noindex else "index, follow",
            og_type=og_type,
            site_name=tenant.title,
            image=image,
            twitter_card="summary_large_image" if image else "summary",
            twitter_site=twitter_site,
            favicon=tenant.favicon,
            alternates=(
                LinkTag(rel="alternate", href=canonical_url, hreflang=language),
                LinkTag(rel="alternate", href=canonical_url, hreflang="x-default"),
            ),
            json_ld=json_ld,
        )

    def _home_description(self, tenant: Tenant) -> str:
        return tenant.meta_description or f"Welcome to {tenant.title}"


def create_seo_composer(
    default_scheme: str = "https",
    default_language: str = "en",
    description_max_length: int = 160,
    twitter_site_from_domain: bool = True,
) -> SeoComposer:
    """Create a SeoComposer."""
    return SeoComposer(
        SeoConfig(
            default_scheme=default_scheme,
            default_language=default_language,
            description_max_length=description_max_length,
            twitter_site_from_domain=twitter_site_from_domain,
        )
    )
