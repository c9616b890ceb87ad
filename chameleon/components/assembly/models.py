"""
Assembly component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from chameleon.components.seo import MetaBlock
from chameleon.core.entities import PostUrlFormat

# --- Input Models ---


@dataclass(frozen=True)
class AssembleInput:
    """Input for merging a rendered page into the HTML shell."""

    template: str
    rendered_markup: str
    meta: MetaBlock
    hydration: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RewriteAssetsInput:
    """Input for prefixing asset URLs with a tenant base path."""

    html: str
    base_path: str


@dataclass(frozen=True)
class RewriteLinksInput:
    """Input for rewriting internal post links inside post content."""

    content: str
    base_path: str
    post_url_format: PostUrlFormat
    valid_slugs: frozenset[str] | None = None


# --- Output Models ---


@dataclass(frozen=True)
class AssembleOutput:
    html: str


@dataclass(frozen=True)
class RewriteOutput:
    text: str
