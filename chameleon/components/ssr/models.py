"""
SSR component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from chameleon.components.routing import RouteDescriptor
from chameleon.core.entities import Post

ResponseKind = Literal["page", "template", "redirect", "sitemap", "robots"]


# --- Input Models ---


@dataclass(frozen=True)
class RequestInfo:
    """The parts of an HTTP request the pipeline reads."""

    path: str
    query_string: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    transport_host: str | None = None

    def header(self, name: str) -> str | None:
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


# --- Output Models ---


@dataclass(frozen=True)
class SsrResponse:
    """Transport-neutral response produced by the pipeline."""

    status_code: int
    body: str = ""
    media_type: str = "text/html"
    location: str | None = None
    kind: ResponseKind = "page"
    tenant_id: str | None = None


# --- Internal ---


@dataclass(frozen=True)
class FetchedContent:
    """Content fetched for one route; route may fall back to home when content is missing."""

    route: RouteDescriptor
    post: Post | None = None
    posts: tuple[Post, ...] = ()
    related_posts: tuple[Post, ...] = ()
    tag_posts: tuple[Post, ...] = ()
    tag: str | None = None
    missing: bool = False
