"""
CanonicalPolicy - one URL per post.

A tenant publishes posts either at /post/<slug> ("with-prefix") or at
/<slug> ("root"). Requests for the other form are permanently redirected
before any content is fetched.

Key behaviors:
- post_prefix on a root-format tenant -> base/<slug>
- post_root on a with-prefix tenant -> base/post/<slug>
- Slugs are percent-encoded in the Location path
- The query string travels with the redirect

Invariants:
- A redirect target never redirects again
- System routes are never redirected
"""

from __future__ import annotations

import logging
from urllib.parse import quote

from chameleon.components.routing import (
    RouteClassifier,
    RouteDescriptor,
    RouteType,
    normalize,
    normalize_base_path,
)
from chameleon.core.entities import PostUrlFormat

logger = logging.getLogger(__name__)

DEFAULT_REDIRECT_STATUS = 308


def encode_slug(slug: str) -> str:
    """Percent-encode a decoded slug for use in a URL path."""
    return quote(slug, safe="/")


def post_path(slug: str, post_url_format: PostUrlFormat, base_path: str = "") -> str:
    """
    Canonical in-site path for a post.

    Examples:
        ("x", "root", "")              -> "/x"
        ("x", "root", "/blog")         -> "/blog/x"
        ("x", "with-prefix", "")       -> "/post/x"
        ("x", "with-prefix", "/blog")  -> "/blog/post/x"
    """
    base = normalize_base_path(base_path)
    encoded = encode_slug(slug)
    if post_url_format == "root":
        return f"{base}/{encoded}"
    return f"{base}/post/{encoded}"


def decide_redirect(
    route_type: RouteType,
    slug: str | None,
    configured_format: PostUrlFormat,
    base_path: str = "",
) -> str | None:
    """Redirect target path for a non-canonical post URL, or None."""
    if not slug:
        return None

    if route_type == RouteType.POST_PREFIX and configured_format == "root":
        return post_path(slug, "root", base_path)

    if route_type == RouteType.POST_ROOT and configured_format == "with-prefix":
        return post_path(slug, "with-prefix", base_path)

    return None


def build_location(target_path: str, query_string: str = "") -> str:
    """Append the original query string to a redirect target."""
    query = query_string.lstrip("?")
    return f"{target_path}?{query}" if query else target_path


class CanonicalPolicy:
    """
    Redirect decisions checked against the classifier.

    A target is only issued if it classifies back to the canonical post form
    with the same slug, so a redirect can never chain or land on a system or
    archive route.
    """

    def __init__(
        self,
        classifier: RouteClassifier | None = None,
        status_code: int = DEFAULT_REDIRECT_STATUS,
    ) -> None:
        self._classifier = classifier or RouteClassifier()
        self.status_code = status_code

    def decide(
        self,
        route: RouteDescriptor,
        configured_format: PostUrlFormat,
        base_path: str = "",
    ) -> str | None:
        if route.is_system_route:
            return None

        target = decide_redirect(route.route_type, route.slug, configured_format, base_path)
        if target is None:
            return None

        landed = self._classifier.classify(normalize(target, base_path))
        expected = RouteType.POST_ROOT if configured_format == "root" else RouteType.POST_PREFIX
        if landed.route_type != expected or landed.slug != route.slug:
            logger.info(
                "Skipping canonical redirect for slug=%r: target %s classifies as %s",
                route.slug,
                target,
                landed.route_type.value,
            )
            return None

        return target


def create_canonical_policy(
    classifier: RouteClassifier | None = None,
    status_code: int = DEFAULT_REDIRECT_STATUS,
) -> CanonicalPolicy:
    """Create a CanonicalPolicy."""
    return CanonicalPolicy(classifier=classifier, status_code=status_code)
