"""
Assembly component - merges shell template, rendered body and head metadata.
"""

from ._impl import (
    MOUNT_POINT,
    AssemblyError,
    assemble,
    hydration_script,
    rewrite_asset_paths,
    rewrite_internal_post_links,
    safe_assemble,
    serialize_hydration,
    set_html_lang,
    strip_titles,
)
from .component import run, run_assemble, run_rewrite_assets, run_rewrite_links
from .models import (
    AssembleInput,
    AssembleOutput,
    RewriteAssetsInput,
    RewriteLinksInput,
    RewriteOutput,
)

__all__ = [
    # Entry points
    "run",
    "run_assemble",
    "run_rewrite_assets",
    "run_rewrite_links",
    # Models
    "AssembleInput",
    "AssembleOutput",
    "RewriteAssetsInput",
    "RewriteLinksInput",
    "RewriteOutput",
    # Service
    "MOUNT_POINT",
    "AssemblyError",
    "assemble",
    "hydration_script",
    "rewrite_asset_paths",
    "rewrite_internal_post_links",
    "safe_assemble",
    "serialize_hydration",
    "set_html_lang",
    "strip_titles",
]
