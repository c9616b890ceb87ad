"""
Sitemap component - sitemap.xml and robots.txt for tenant sites.
"""

from __future__ import annotations

from ._impl import SitemapService
from .models import RobotsInput, RobotsOutput, SitemapInput, SitemapOutput

# --- Component Entry Points ---


async def run_sitemap(inp: SitemapInput, *, service: SitemapService) -> SitemapOutput:
    """Build (or serve from cache) a tenant's sitemap."""
    xml, from_cache = await service.build(inp.tenant, inp.visitor_hostname)
    return SitemapOutput(xml=xml, from_cache=from_cache)


def run_robots(inp: RobotsInput, *, service: SitemapService) -> RobotsOutput:
    """Build a tenant's robots.txt."""
    return RobotsOutput(text=service.robots(inp.tenant, inp.visitor_hostname))


async def run(
    inp: SitemapInput | RobotsInput,
    *,
    service: SitemapService,
) -> SitemapOutput | RobotsOutput:
    """
    Main entry point for the sitemap component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, SitemapInput):
        return await run_sitemap(inp, service=service)
    elif isinstance(inp, RobotsInput):
        return run_robots(inp, service=service)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
