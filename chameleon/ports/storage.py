"""
Storage ports consumed by the routing edge.

The relational store (tenant/post CRUD) is an external collaborator. Lookups
by hostname return every match so the resolver can enforce the "at most one
tenant per hostname" invariant instead of silently picking a row.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from chameleon.core.entities import Post, Tenant


class TenantStorePort(Protocol):
    """Read-only tenant lookups."""

    async def get_tenants_by_primary_domain(self, domain: str) -> list[Tenant]:
        """Tenants whose primary domain equals `domain`."""
        ...

    async def get_tenants_by_alias(self, alias: str) -> list[Tenant]:
        """Tenants listing `alias` among their domain aliases."""
        ...

    async def get_tenants_by_visitor_hostname(self, hostname: str) -> list[Tenant]:
        """Reverse-proxy tenants whose proxy visitor hostname equals `hostname`."""
        ...


class ContentStorePort(Protocol):
    """Read-only post lookups scoped to a tenant."""

    async def get_post_by_slug(self, tenant_id: UUID, slug: str) -> Post | None:
        ...

    async def get_posts_by_tenant(self, tenant_id: UUID) -> list[Post]:
        """All published posts, newest first."""
        ...

    async def get_posts_by_tag(self, tenant_id: UUID, tag: str) -> list[Post]:
        """Posts carrying `tag` (case-insensitive), newest first."""
        ...

    async def get_posts_by_topic_group(self, tenant_id: UUID, group: str) -> list[Post]:
        """Posts in topic group `group` (case-insensitive), newest first."""
        ...

    async def get_related_posts(self, tenant_id: UUID, post: Post, limit: int) -> list[Post]:
        """Other posts sharing at least one tag with `post`."""
        ...

    async def get_top_tags(self, tenant_id: UUID, limit: int) -> list[str]:
        """Most used tags, most frequent first."""
        ...


class StorePort(TenantStorePort, ContentStorePort, Protocol):
    """Combined store, as implemented by the bundled adapters."""
