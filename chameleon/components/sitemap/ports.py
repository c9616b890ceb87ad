"""
Sitemap component port definitions.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from chameleon.core.entities import Post
from chameleon.ports.clock import ClockPort


class SitemapContentPort(Protocol):
    """The slice of the content store the sitemap needs."""

    async def get_posts_by_tenant(self, tenant_id: UUID) -> list[Post]:
        ...

    async def get_top_tags(self, tenant_id: UUID, limit: int) -> list[str]:
        ...


__all__ = ["ClockPort", "SitemapContentPort"]
