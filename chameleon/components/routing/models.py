"""
Routing component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RouteType(str, Enum):
    """Kinds of public route a tenant site serves."""

    HOME = "home"
    POST_PREFIX = "post_prefix"  # /post/<slug>
    POST_ROOT = "post_root"  # /<slug>
    TAG = "tag"
    TOPICS = "topics"
    SYSTEM = "system"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RouteDescriptor:
    """Classification of one normalized path. Per request, never cached."""

    route_type: RouteType
    slug: str | None = None
    is_system_route: bool = False

    @property
    def is_post(self) -> bool:
        return self.route_type in (RouteType.POST_PREFIX, RouteType.POST_ROOT)

    @property
    def is_archive(self) -> bool:
        return self.route_type in (RouteType.TAG, RouteType.TOPICS)


# --- Input Models ---


@dataclass(frozen=True)
class NormalizeInput:
    """Input for stripping the tenant base path from a request path."""

    raw_path: str
    base_path: str = ""


@dataclass(frozen=True)
class ClassifyInput:
    """Input for classifying a normalized path."""

    path: str


# --- Output Models ---


@dataclass(frozen=True)
class NormalizeOutput:
    path: str


@dataclass(frozen=True)
class ClassifyOutput:
    route: RouteDescriptor
