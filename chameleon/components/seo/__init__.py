"""
SEO component - title, description, canonical, social and JSON-LD tags.
"""

from ._impl import (
    DEFAULT_CONFIG,
    ELLIPSIS,
    NOINDEX,
    SeoComposer,
    SeoConfig,
    archive_path,
    build_article_schema,
    build_canonical_url,
    build_collection_schema,
    build_website_schema,
    canonical_base_url,
    canonical_domain,
    create_seo_composer,
    json_ld_dumps,
    render_head_html,
    resolve_image,
    strip_markup,
    truncate_description,
    twitter_handle,
)
from .component import run, run_compose
from .models import ComposeInput, ComposeOutput, LinkTag, MetaBlock, MetaTag, PageContent

__all__ = [
    # Entry points
    "run",
    "run_compose",
    # Models
    "ComposeInput",
    "ComposeOutput",
    "LinkTag",
    "MetaBlock",
    "MetaTag",
    "PageContent",
    # Service
    "DEFAULT_CONFIG",
    "ELLIPSIS",
    "NOINDEX",
    "SeoComposer",
    "SeoConfig",
    "archive_path",
    "build_article_schema",
    "build_canonical_url",
    "build_collection_schema",
    "build_website_schema",
    "canonical_base_url",
    "canonical_domain",
    "create_seo_composer",
    "json_ld_dumps",
    "render_head_html",
    "resolve_image",
    "strip_markup",
    "truncate_description",
    "twitter_handle",
]
