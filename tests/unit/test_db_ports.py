"""
InMemoryStore contract tests (the same behaviors the SQLite store honors).
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from chameleon.adapters.memory import InMemoryStore
from chameleon.core.entities import Post, Tenant


@pytest.fixture
def tenant() -> Tenant:
    return Tenant(title="A", primary_domain="a.com", domain_aliases=["www.a.com"])


@pytest.fixture
def store(tenant: Tenant) -> InMemoryStore:
    base = datetime(2024, 1, 1, tzinfo=UTC)
    posts = [
        Post(
            tenant_id=tenant.id,
            title=f"P{i}",
            slug=f"p{i}",
            tags=tags,
            topic_group=group,
            created_at=base + timedelta(days=i),
        )
        for i, (tags, group) in enumerate(
            [(["news"], "Basics"), (["news", "how-to"], "basics"), (["how-to"], None), ([], None)]
        )
    ]
    other = Tenant(title="B", primary_domain="b.com")
    posts.append(Post(tenant_id=other.id, title="Other", slug="p0", tags=["news"]))
    return InMemoryStore(tenants=[tenant, other], posts=posts)


class TestTenantLookups:
    """Test hostname lookups."""

    @pytest.mark.asyncio
    async def test_primary_and_alias(self, store: InMemoryStore, tenant: Tenant) -> None:
        assert await store.get_tenants_by_primary_domain("a.com") == [tenant]
        assert await store.get_tenants_by_alias("www.a.com") == [tenant]
        assert await store.get_tenants_by_primary_domain("") == []

    @pytest.mark.asyncio
    async def test_duplicates_all_returned(self, store: InMemoryStore) -> None:
        store.save_tenant(Tenant(title="Dup", primary_domain="a.com"))
        assert len(await store.get_tenants_by_primary_domain("a.com")) == 2

    @pytest.mark.asyncio
    async def test_visitor_hostname_only_for_reverse_proxy(self, store: InMemoryStore) -> None:
        proxied = store.save_tenant(
            Tenant(title="P", deployment_mode="reverse_proxy", proxy_visitor_hostname="p.co")
        )
        assert await store.get_tenants_by_visitor_hostname("p.co") == [proxied]
        assert await store.get_tenants_by_visitor_hostname("a.com") == []


class TestContentLookups:
    """Test tenant-scoped post queries."""

    @pytest.mark.asyncio
    async def test_newest_first(self, store: InMemoryStore, tenant: Tenant) -> None:
        posts = await store.get_posts_by_tenant(tenant.id)
        assert [p.slug for p in posts] == ["p3", "p2", "p1", "p0"]

    @pytest.mark.asyncio
    async def test_slug_scoped_to_tenant(self, store: InMemoryStore, tenant: Tenant) -> None:
        post = await store.get_post_by_slug(tenant.id, "p0")
        assert post is not None and post.title == "P0"

    @pytest.mark.asyncio
    async def test_tag_and_topic(self, store: InMemoryStore, tenant: Tenant) -> None:
        tagged = await store.get_posts_by_tag(tenant.id, "NEWS")
        grouped = await store.get_posts_by_topic_group(tenant.id, "BASICS")

        assert [p.slug for p in tagged] == ["p1", "p0"]
        assert [p.slug for p in grouped] == ["p1", "p0"]

    @pytest.mark.asyncio
    async def test_related(self, store: InMemoryStore, tenant: Tenant) -> None:
        post = await store.get_post_by_slug(tenant.id, "p1")
        assert post is not None

        related = await store.get_related_posts(tenant.id, post, 5)
        assert [p.slug for p in related] == ["p2", "p0"]
        assert await store.get_related_posts(tenant.id, post, 1) == related[:1]

    @pytest.mark.asyncio
    async def test_top_tags(self, store: InMemoryStore, tenant: Tenant) -> None:
        assert await store.get_top_tags(tenant.id, 1) in (["news"], ["how-to"])
        assert set(await store.get_top_tags(tenant.id, 5)) == {"news", "how-to"}
