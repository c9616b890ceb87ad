"""
Canonical component - post URL canonicalization.

Invariants:
- Redirects are permanent and method-preserving (308 by default)
- Redirects are decided before any content fetch
- Redirect targets are stable
"""

from __future__ import annotations

from ._impl import CanonicalPolicy, build_location, post_path
from .models import DecideRedirectInput, PostPathInput, PostPathOutput, RedirectDecision

# --- Component Entry Points ---


def run_decide(
    inp: DecideRedirectInput,
    *,
    policy: CanonicalPolicy | None = None,
) -> RedirectDecision:
    """Decide whether the request must be redirected to its canonical URL."""
    policy = policy or CanonicalPolicy()
    target = policy.decide(inp.route, inp.post_url_format, inp.base_path)
    if target is None:
        return RedirectDecision(status_code=policy.status_code)
    return RedirectDecision(
        location=build_location(target, inp.query_string),
        status_code=policy.status_code,
    )


def run_post_path(inp: PostPathInput) -> PostPathOutput:
    """Build the canonical path of a post."""
    return PostPathOutput(path=post_path(inp.slug, inp.post_url_format, inp.base_path))


def run(
    inp: DecideRedirectInput | PostPathInput,
    *,
    policy: CanonicalPolicy | None = None,
) -> RedirectDecision | PostPathOutput:
    """
    Main entry point for the canonical component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, DecideRedirectInput):
        return run_decide(inp, policy=policy)
    elif isinstance(inp, PostPathInput):
        return run_post_path(inp)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
