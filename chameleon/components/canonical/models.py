"""
Canonical component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass

from chameleon.components.routing import RouteDescriptor
from chameleon.core.entities import PostUrlFormat

# --- Input Models ---


@dataclass(frozen=True)
class DecideRedirectInput:
    """Input for a canonical redirect decision."""

    route: RouteDescriptor
    post_url_format: PostUrlFormat
    base_path: str = ""
    query_string: str = ""


@dataclass(frozen=True)
class PostPathInput:
    """Input for building a post's canonical path."""

    slug: str
    post_url_format: PostUrlFormat
    base_path: str = ""


# --- Output Models ---


@dataclass(frozen=True)
class RedirectDecision:
    """None location means serve the request as is."""

    location: str | None = None
    status_code: int = 308

    @property
    def should_redirect(self) -> bool:
        return self.location is not None


@dataclass(frozen=True)
class PostPathOutput:
    path: str
