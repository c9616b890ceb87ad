"""
PathNormalizer and RouteClassifier.

Key behaviors:
- normalize() strips query, fragment and the tenant base path
- Base paths are only stripped at a segment boundary ("/blog" never eats "/blogger")
- classify() maps a normalized path to a RouteDescriptor by fixed priority
- Slugs are percent-decoded; undecodable slugs are kept as sent

Invariants:
- normalize(base + p, base) == p for any normalized p
- "/tag/post" is a tag route, never a post
- Reserved segments never become post slugs
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from urllib.parse import unquote

from chameleon.core.entities import normalize_base_path

from .models import RouteDescriptor, RouteType

DEFAULT_RESERVED_SEGMENTS: frozenset[str] = frozenset(
    {
        "sitemap.xml",
        "sitemap",
        "robots.txt",
        "robots",
        "favicon.ico",
        "favicon",
        "feed",
        "rss",
        "rss.xml",
        "atom.xml",
        "manifest.json",
        "archive",
        "category",
        "search",
        "admin",
        "editor",
        "api",
        "bv_api",
    }
)

_PREFIX_ROUTES: tuple[tuple[str, RouteType], ...] = (
    ("/post/", RouteType.POST_PREFIX),
    ("/tag/", RouteType.TAG),
    ("/topics/", RouteType.TOPICS),
)


# --- Normalizer ---


def normalize(raw_path: str, base_path: str = "") -> str:
    """
    Turn a raw request path into a route path relative to the tenant base.

    Examples (base "/blog"):
        "/blog"              -> "/"
        "/blog/post/x?a=1"   -> "/post/x"
        "/blogger"           -> "/blogger"
    """
    path = raw_path or "/"
    for sep in ("?", "#"):
        path = path.split(sep, 1)[0]

    if not path.startswith("/"):
        path = "/" + path

    base = normalize_base_path(base_path)
    if base:
        if path == base:
            path = "/"
        elif path.startswith(base + "/"):
            path = path[len(base) :]

    if len(path) > 1:
        path = path.rstrip("/") or "/"

    return path


# --- Classifier ---


def decode_slug(raw: str) -> str:
    """Percent-decode a slug as strict UTF-8, returning it unchanged on failure."""
    try:
        return unquote(raw, encoding="utf-8", errors="strict")
    except UnicodeDecodeError:
        return raw


@dataclass(frozen=True)
class ClassifierConfig:
    """Classifier configuration from rules."""

    reserved_segments: frozenset[str] = DEFAULT_RESERVED_SEGMENTS
    multi_segment_fallback: RouteType = RouteType.POST_ROOT


class RouteClassifier:
    """Classifies normalized paths. Pure; safe to share."""

    def __init__(self, config: ClassifierConfig | None = None) -> None:
        self._config = config or ClassifierConfig()

    def is_reserved(self, segment: str) -> bool:
        """True for a reserved segment or a segment whose stem is reserved."""
        lowered = decode_slug(segment).lower()
        reserved = self._config.reserved_segments
        if lowered in reserved:
            return True
        stem = lowered.split(".", 1)[0]
        return bool(stem) and stem in reserved

    def classify(self, path: str) -> RouteDescriptor:
        if not path or path == "/":
            return RouteDescriptor(RouteType.HOME)

        for prefix, route_type in _PREFIX_ROUTES:
            if path.startswith(prefix) or path == prefix.rstrip("/"):
                rest = path[len(prefix) :]
                if not rest:
                    return RouteDescriptor(RouteType.UNKNOWN)
                return RouteDescriptor(route_type, slug=decode_slug(rest))

        rest = path.lstrip("/")
        segments = rest.split("/")

        if self.is_reserved(segments[0]):
            return RouteDescriptor(RouteType.SYSTEM, is_system_route=True)

        if len(segments) == 1:
            return RouteDescriptor(RouteType.POST_ROOT, slug=decode_slug(rest))

        if self._config.multi_segment_fallback == RouteType.POST_ROOT:
            return RouteDescriptor(RouteType.POST_ROOT, slug=decode_slug(rest))
        return RouteDescriptor(RouteType.UNKNOWN)


def create_classifier(
    reserved_segments: Iterable[str] | None = None,
    multi_segment_fallback: str = "post_root",
) -> RouteClassifier:
    """Create a RouteClassifier from rules values."""
    reserved = (
        frozenset(s.strip().lower() for s in reserved_segments if s.strip())
        if reserved_segments is not None
        else DEFAULT_RESERVED_SEGMENTS
    )
    return RouteClassifier(
        ClassifierConfig(
            reserved_segments=reserved,
            multi_segment_fallback=RouteType(multi_segment_fallback),
        )
    )


_default_classifier = RouteClassifier()


def classify(path: str) -> RouteDescriptor:
    """Classify with the default reserved set and fallback."""
    return _default_classifier.classify(path)
