"""
SSR component - request entry point for the public site.
"""

from __future__ import annotations

from ._impl import SsrPipeline
from .models import RequestInfo, SsrResponse

# --- Component Entry Points ---


async def run_handle(inp: RequestInfo, *, pipeline: SsrPipeline) -> SsrResponse:
    """Serve one public request."""
    return await pipeline.handle(inp)


async def run(inp: RequestInfo, *, pipeline: SsrPipeline) -> SsrResponse:
    """
    Main entry point for the SSR component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, RequestInfo):
        return await run_handle(inp, pipeline=pipeline)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
