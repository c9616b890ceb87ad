"""
Renderer port.

The page body renderer (React-style SSR in production) is opaque to the
edge: it receives a RenderContext and returns markup plus the hydration
state the client needs to resume without re-fetching.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from chameleon.core.entities import Post, Tenant


@dataclass(frozen=True)
class RenderContext:
    """
    Everything the renderer may use for one request.

    Built fresh per request, never cached or shared.
    """

    tenant: Tenant
    route_path: str  # normalized path, base path stripped
    ssr_path: str  # path the client router sees (alias domains drop the base path)
    route_type: str
    is_alias_domain: bool = False
    visitor_hostname: str = ""
    posts: tuple[Post, ...] = ()
    post: Post | None = None
    related_posts: tuple[Post, ...] = ()
    tag_posts: tuple[Post, ...] = ()
    current_tag: str | None = None


@dataclass(frozen=True)
class RenderResult:
    """Renderer output: body markup plus dehydrated client state."""

    markup: str
    hydration: dict[str, Any] = field(default_factory=dict)


class RendererPort(Protocol):
    """Server-side page body renderer."""

    def render(self, ctx: RenderContext) -> RenderResult:
        ...
