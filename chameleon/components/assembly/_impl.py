"""
PageAssembler - merges the HTML shell, rendered body and head metadata.

The client build ships one index.html shell. For each tenant request the
assembler drops the shell's own <title>, inserts the tenant head block and
the hydration script before </head>, sets <html lang> and mounts the
rendered body into <div id="root"></div>.

Key behaviors:
- Exactly one <title> in the output (the tenant's)
- Hydration state is serialized with "<" escaped so it cannot close the script
- safe_assemble() returns the untouched template on any failure
- Tenants under a base path get their asset URLs prefixed
"""

from __future__ import annotations

import html
import json
import logging
import re
from collections.abc import Callable
from typing import Any

from chameleon.components.canonical import post_path
from chameleon.components.seo import MetaBlock, render_head_html
from chameleon.core.entities import PostUrlFormat, normalize_base_path
from chameleon.core.errors import RenderError
from chameleon.ports.renderer import RenderResult

logger = logging.getLogger(__name__)

MOUNT_POINT = '<div id="root"></div>'

_TITLE = re.compile(r"<title\b[^>]*>.*?</title\s*>", re.IGNORECASE | re.DOTALL)
_HEAD_CLOSE = re.compile(r"</head\s*>", re.IGNORECASE)
_HTML_OPEN = re.compile(r"<html\b([^>]*)>", re.IGNORECASE)
_LANG_ATTR = re.compile(r"""\slang\s*=\s*(?:"[^"]*"|'[^']*'|[^\s>]+)""", re.IGNORECASE)


class AssemblyError(RenderError):
    """The template cannot host a rendered page."""


# --- Serialization ---


def _script_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False).replace("<", "\\u003c")


def serialize_hydration(payload: dict[str, Any]) -> str:
    """JSON for window.__SSR_DATA__, safe inside a <script> element."""
    return _script_json(payload)


def hydration_script(payload: dict[str, Any]) -> str:
    return f"<script>window.__SSR_DATA__ = {serialize_hydration(payload)}</script>"


# --- Template Edits ---


def strip_titles(template: str) -> str:
    """Remove every <title> element, whatever its case."""
    return _TITLE.sub("", template)


def set_html_lang(document: str, language: str) -> str:
    """Set or replace the lang attribute of the <html> element."""
    if not language:
        return document

    lang = html.escape(language, quote=True)

    def _replace(match: re.Match[str]) -> str:
        attrs = _LANG_ATTR.sub("", match.group(1))
        return f'<html lang="{lang}"{attrs}>'

    return _HTML_OPEN.sub(_replace, document, count=1)


def assemble(
    template: str,
    rendered_markup: str,
    hydration_payload: dict[str, Any],
    meta_block: MetaBlock,
) -> str:
    """
    Build the final page.

    Raises:
        AssemblyError: if the template has no mount point or no </head>
    """
    if MOUNT_POINT not in template:
        raise AssemblyError(f"Template has no mount point {MOUNT_POINT!r}")
    if not _HEAD_CLOSE.search(template):
        raise AssemblyError("Template has no </head>")

    head = render_head_html(meta_block)
    script = hydration_script(hydration_payload)

    page = strip_titles(template)
    page = set_html_lang(page, meta_block.language)
    page = _HEAD_CLOSE.sub(lambda _: f"{head}\n{script}\n</head>", page, count=1)
    return page.replace(MOUNT_POINT, f'<div id="root">{rendered_markup}</div>', 1)


def safe_assemble(
    template: str,
    render: Callable[[], RenderResult],
    meta_block: MetaBlock,
    *,
    hydration: Callable[[RenderResult], dict[str, Any]] | None = None,
    tenant_id: str = "",
    route: str = "",
) -> tuple[str, bool]:
    """
    Render and assemble, degrading to the bare template on any failure.

    Returns:
        (html, ok) where ok is False when the template was returned as is
    """
    try:
        result = render()
        payload = hydration(result) if hydration is not None else result.hydration
        return assemble(template, result.markup, payload, meta_block), True
    except Exception:
        logger.exception("Page assembly failed for tenant=%s route=%s", tenant_id, route)
        return template, False


# --- Base Path Rewriting ---


def rewrite_asset_paths(document: str, base_path: str) -> str:
    """
    Prefix root-relative asset URLs with the tenant base path.

    Also exposes the base path to the client router as window.__BASE_PATH__.
    """
    base = normalize_base_path(base_path)
    if not base:
        return document

    result = document.replace('href="/assets/', f'href="{base}/assets/')
    result = result.replace('src="/assets/', f'src="{base}/assets/')
    result = result.replace('href="/favicon', f'href="{base}/favicon')

    script = f"<script>window.__BASE_PATH__ = {_script_json(base)}</script>"
    return _HEAD_CLOSE.sub(lambda _: f"{script}\n</head>", result, count=1)


# --- Internal Link Rewriting ---

_MD_POST_LINK = re.compile(r"\[([^\]]+)\]\(/post/([a-z0-9-]+)\)", re.IGNORECASE)
_HTML_POST_ANCHOR = re.compile(
    r"""(<a[^>]*href=["'])/post/([a-z0-9-]+)(["'][^>]*>)([^<]*)</a>""", re.IGNORECASE
)
_HTML_POST_HREF = re.compile(r"""(\bhref=["'])/post/([a-z0-9-]+)(["'])""", re.IGNORECASE)


def rewrite_internal_post_links(
    content: str,
    base_path: str,
    post_url_format: PostUrlFormat,
    valid_slugs: set[str] | None = None,
) -> str:
    """
    Rewrite /post/<slug> links in markdown or HTML to the tenant's post URL form.

    With valid_slugs, links to unknown posts are reduced to their anchor text
    (bare href attributes are left as they are).
    """
    if not content:
        return content

    def target(slug: str) -> str:
        return post_path(slug, post_url_format, base_path)

    def _markdown(match: re.Match[str]) -> str:
        text, slug = match.group(1), match.group(2)
        if valid_slugs is not None and slug not in valid_slugs:
            return text
        return f"[{text}]({target(slug)})"

    def _anchor(match: re.Match[str]) -> str:
        prefix, slug, middle, text = match.groups()
        if valid_slugs is not None and slug not in valid_slugs:
            return text
        return f"{prefix}{target(slug)}{middle}{text}</a>"

    def _href(match: re.Match[str]) -> str:
        prefix, slug, suffix = match.groups()
        if valid_slugs is not None and slug not in valid_slugs:
            return match.group(0)
        return f"{prefix}{target(slug)}{suffix}"

    result = _MD_POST_LINK.sub(_markdown, content)
    result = _HTML_POST_ANCHOR.sub(_anchor, result)
    return _HTML_POST_HREF.sub(_href, result)
