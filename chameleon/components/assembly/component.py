"""
Assembly component - final HTML for public tenant pages.

Invariants:
- The output has exactly one <title>
- Hydration JSON never contains a raw "<"
- A failed render yields the template, never an error page
"""

from __future__ import annotations

from ._impl import assemble, rewrite_asset_paths, rewrite_internal_post_links
from .models import (
    AssembleInput,
    AssembleOutput,
    RewriteAssetsInput,
    RewriteLinksInput,
    RewriteOutput,
)

# --- Component Entry Points ---


def run_assemble(inp: AssembleInput) -> AssembleOutput:
    """Merge rendered markup, head block and hydration state into the template."""
    return AssembleOutput(
        html=assemble(inp.template, inp.rendered_markup, inp.hydration, inp.meta)
    )


def run_rewrite_assets(inp: RewriteAssetsInput) -> RewriteOutput:
    """Prefix asset URLs for tenants mounted under a base path."""
    return RewriteOutput(text=rewrite_asset_paths(inp.html, inp.base_path))


def run_rewrite_links(inp: RewriteLinksInput) -> RewriteOutput:
    """Rewrite /post/<slug> links to the tenant's post URL form."""
    valid = set(inp.valid_slugs) if inp.valid_slugs is not None else None
    return RewriteOutput(
        text=rewrite_internal_post_links(inp.content, inp.base_path, inp.post_url_format, valid)
    )


def run(
    inp: AssembleInput | RewriteAssetsInput | RewriteLinksInput,
) -> AssembleOutput | RewriteOutput:
    """
    Main entry point for the assembly component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, AssembleInput):
        return run_assemble(inp)
    elif isinstance(inp, RewriteAssetsInput):
        return run_rewrite_assets(inp)
    elif isinstance(inp, RewriteLinksInput):
        return run_rewrite_links(inp)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
