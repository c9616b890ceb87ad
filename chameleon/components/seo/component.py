"""
SEO component - head metadata for tenant pages.

Invariants:
- Canonical URLs always use the tenant's canonical domain
- noindex from a post is never overridden
- Output is HTML-escaped and deterministic
"""

from __future__ import annotations

from ._impl import SeoComposer, render_head_html
from .models import ComposeInput, ComposeOutput

# --- Component Entry Points ---


def run_compose(
    inp: ComposeInput,
    *,
    composer: SeoComposer | None = None,
) -> ComposeOutput:
    """Compose the MetaBlock and its rendered head HTML."""
    composer = composer or SeoComposer()
    meta = composer.compose(inp.tenant, inp.route, inp.content, inp.visitor_hostname)
    return ComposeOutput(meta=meta, head_html=render_head_html(meta))


def run(
    inp: ComposeInput,
    *,
    composer: SeoComposer | None = None,
) -> ComposeOutput:
    """
    Main entry point for the SEO component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, ComposeInput):
        return run_compose(inp, composer=composer)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
