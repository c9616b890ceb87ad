"""
In-memory store for tests and local seeding.

Implements both storage ports. Lookups return every match so duplicate
hostname claims surface as ambiguity instead of being hidden.
"""

from __future__ import annotations

from collections import Counter
from uuid import UUID

from chameleon.core.entities import Post, Tenant


def _newest_first(posts: list[Post]) -> list[Post]:
    return sorted(posts, key=lambda p: p.created_at, reverse=True)


class InMemoryStore:
    def __init__(
        self,
        tenants: list[Tenant] | None = None,
        posts: list[Post] | None = None,
    ) -> None:
        self._tenants: dict[UUID, Tenant] = {}
        self._posts: dict[UUID, Post] = {}
        for tenant in tenants or []:
            self.save_tenant(tenant)
        for post in posts or []:
            self.save_post(post)

    # --- Writes ---

    def save_tenant(self, tenant: Tenant) -> Tenant:
        self._tenants[tenant.id] = tenant
        return tenant

    def delete_tenant(self, tenant_id: UUID) -> None:
        self._tenants.pop(tenant_id, None)
        self._posts = {k: p for k, p in self._posts.items() if p.tenant_id != tenant_id}

    def save_post(self, post: Post) -> Post:
        self._posts[post.id] = post
        return post

    def list_tenants(self) -> list[Tenant]:
        return list(self._tenants.values())

    # --- TenantStorePort ---

    async def get_tenants_by_primary_domain(self, domain: str) -> list[Tenant]:
        return [t for t in self._tenants.values() if domain and t.primary_domain == domain]

    async def get_tenants_by_alias(self, alias: str) -> list[Tenant]:
        return [t for t in self._tenants.values() if alias in t.domain_aliases]

    async def get_tenants_by_visitor_hostname(self, hostname: str) -> list[Tenant]:
        return [
            t
            for t in self._tenants.values()
            if t.is_reverse_proxy and hostname and t.proxy_visitor_hostname == hostname
        ]

    # --- ContentStorePort ---

    def _tenant_posts(self, tenant_id: UUID) -> list[Post]:
        return [p for p in self._posts.values() if p.tenant_id == tenant_id]

    async def get_post_by_slug(self, tenant_id: UUID, slug: str) -> Post | None:
        for post in self._tenant_posts(tenant_id):
            if post.slug == slug:
                return post
        return None

    async def get_posts_by_tenant(self, tenant_id: UUID) -> list[Post]:
        return _newest_first(self._tenant_posts(tenant_id))

    async def get_posts_by_tag(self, tenant_id: UUID, tag: str) -> list[Post]:
        return _newest_first([p for p in self._tenant_posts(tenant_id) if p.has_tag(tag)])

    async def get_posts_by_topic_group(self, tenant_id: UUID, group: str) -> list[Post]:
        wanted = group.lower()
        return _newest_first(
            [
                p
                for p in self._tenant_posts(tenant_id)
                if p.topic_group and p.topic_group.lower() == wanted
            ]
        )

    async def get_related_posts(self, tenant_id: UUID, post: Post, limit: int) -> list[Post]:
        tags = {t.lower() for t in post.tags}
        if not tags or limit <= 0:
            return []
        related = [
            p
            for p in self._tenant_posts(tenant_id)
            if p.id != post.id and tags.intersection(t.lower() for t in p.tags)
        ]
        return _newest_first(related)[:limit]

    async def get_top_tags(self, tenant_id: UUID, limit: int) -> list[str]:
        counts: Counter[str] = Counter()
        for post in self._tenant_posts(tenant_id):
            counts.update(post.tags)
        return [tag for tag, _ in counts.most_common(limit)]
