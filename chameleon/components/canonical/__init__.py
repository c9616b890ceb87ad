"""
Canonical component - redirects non-canonical post URLs.
"""

from ._impl import (
    DEFAULT_REDIRECT_STATUS,
    CanonicalPolicy,
    build_location,
    create_canonical_policy,
    decide_redirect,
    encode_slug,
    post_path,
)
from .component import run, run_decide, run_post_path
from .models import DecideRedirectInput, PostPathInput, PostPathOutput, RedirectDecision

__all__ = [
    # Entry points
    "run",
    "run_decide",
    "run_post_path",
    # Models
    "DecideRedirectInput",
    "PostPathInput",
    "PostPathOutput",
    "RedirectDecision",
    # Service
    "DEFAULT_REDIRECT_STATUS",
    "CanonicalPolicy",
    "build_location",
    "create_canonical_policy",
    "decide_redirect",
    "encode_slug",
    "post_path",
]
