"""
Sitemap component unit tests.
"""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID

import pytest

from chameleon.components.sitemap import (
    RobotsInput,
    SitemapEntry,
    SitemapInput,
    SitemapService,
    escape_xml,
    render_sitemap_xml,
    run,
)
from chameleon.core.entities import Post, Tenant

# --- Mock Ports ---


class MockContentStore:
    def __init__(self, posts: list[Post], tags: list[str]) -> None:
        self.posts = posts
        self.tags = tags
        self.calls = 0

    async def get_posts_by_tenant(self, tenant_id: UUID) -> list[Post]:
        self.calls += 1
        return [p for p in self.posts if p.tenant_id == tenant_id]

    async def get_top_tags(self, tenant_id: UUID, limit: int) -> list[str]:
        return self.tags[:limit]


class MockClock:
    def __init__(self) -> None:
        self.now = 50.0

    def monotonic(self) -> float:
        return self.now


# --- Fixtures ---


@pytest.fixture
def tenant() -> Tenant:
    return Tenant(
        title="Acme",
        primary_domain="acme.com",
        domain_aliases=frozenset({"www.acme.com"}),
        post_url_format="root",
    )


@pytest.fixture
def posts(tenant: Tenant) -> list[Post]:
    return [
        Post(
            tenant_id=tenant.id,
            title="Fish & Chips",
            slug="fish-and-chips",
            updated_at=datetime(2024, 6, 2, tzinfo=UTC),
        ),
        Post(
            tenant_id=tenant.id,
            title="Old",
            slug="old",
            updated_at=datetime(2024, 1, 1, tzinfo=UTC),
            canonical_url="https://elsewhere.org/a?b=1&c=2",
        ),
        Post(tenant_id=tenant.id, title="Hidden", slug="hidden", noindex=True),
    ]


@pytest.fixture
def store(posts: list[Post]) -> MockContentStore:
    return MockContentStore(posts, ["C++ & Rust", "news"])


@pytest.fixture
def clock() -> MockClock:
    return MockClock()


@pytest.fixture
def service(store: MockContentStore, clock: MockClock) -> SitemapService:
    return SitemapService(store, clock, ttl_seconds=900, top_tags=20)


# --- XML ---


class TestRenderSitemapXml:
    """Test XML rendering."""

    def test_escape(self) -> None:
        assert escape_xml("a&b<c>\"d'") == "a&amp;b&lt;c&gt;&quot;d&apos;"

    def test_entry(self) -> None:
        xml = render_sitemap_xml([SitemapEntry(loc="https://a.com/", priority=1.0)])

        assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
        assert "<loc>https://a.com/</loc>" in xml
        assert "<priority>1.0</priority>" in xml
        assert "<lastmod>" not in xml


# --- Service ---


class TestSitemapService:
    """Test sitemap contents and caching."""

    @pytest.mark.asyncio
    async def test_contents(self, service: SitemapService, tenant: Tenant) -> None:
        xml, from_cache = await service.build(tenant)

        assert from_cache is False
        assert "<loc>https://acme.com/</loc>" in xml
        assert "<lastmod>2024-06-02</lastmod>" in xml
        assert "<loc>https://acme.com/fish-and-chips</loc>" in xml
        assert "<loc>https://elsewhere.org/a?b=1&amp;c=2</loc>" in xml
        assert "<loc>https://acme.com/tag/C%2B%2B%20%26%20Rust</loc>" in xml
        assert "hidden" not in xml

    @pytest.mark.asyncio
    async def test_alias_uses_canonical_domain(
        self, service: SitemapService, tenant: Tenant
    ) -> None:
        xml, _ = await service.build(tenant, "www.acme.com")
        assert "https://www.acme.com" not in xml

    @pytest.mark.asyncio
    async def test_base_path(self, store: MockContentStore, clock: MockClock) -> None:
        tenant = Tenant(title="B", primary_domain="b.com", base_path="/blog")
        store.posts = [Post(tenant_id=tenant.id, title="P", slug="p")]
        service = SitemapService(store, clock)

        xml, _ = await service.build(tenant)

        assert "<loc>https://b.com/blog</loc>" in xml
        assert "<loc>https://b.com/blog/post/p</loc>" in xml

    @pytest.mark.asyncio
    async def test_cached_within_ttl(
        self, service: SitemapService, store: MockContentStore, clock: MockClock, tenant: Tenant
    ) -> None:
        first, _ = await service.build(tenant)
        clock.now += 899
        second, from_cache = await service.build(tenant)

        assert from_cache is True
        assert first == second
        assert store.calls == 1

    @pytest.mark.asyncio
    async def test_expires_after_ttl(
        self, service: SitemapService, store: MockContentStore, clock: MockClock, tenant: Tenant
    ) -> None:
        await service.build(tenant)
        clock.now += 900
        _, from_cache = await service.build(tenant)

        assert from_cache is False
        assert store.calls == 2

    @pytest.mark.asyncio
    async def test_invalidate(
        self, service: SitemapService, store: MockContentStore, tenant: Tenant
    ) -> None:
        await service.build(tenant)
        assert service.invalidate(tenant.id) == 1

        _, from_cache = await service.build(tenant)
        assert from_cache is False
        assert store.calls == 2

    @pytest.mark.asyncio
    async def test_zero_ttl_never_caches(
        self, store: MockContentStore, clock: MockClock, tenant: Tenant
    ) -> None:
        service = SitemapService(store, clock, ttl_seconds=0)
        await service.build(tenant)
        _, from_cache = await service.build(tenant)

        assert from_cache is False
        assert len(service) == 0

    @pytest.mark.asyncio
    async def test_visitor_hosts_bounded(self, store: MockContentStore, clock: MockClock) -> None:
        """Without a primary domain the base URL follows the visitor host."""
        alias_only = Tenant(title="A", domain_aliases=frozenset({"a.example"}))
        service = SitemapService(store, clock, max_entries=8)

        for i in range(500):
            await service.build(alias_only, f"host{i}.example")

        assert len(service) == 8
        _, from_cache = await service.build(alias_only, "host499.example")
        assert from_cache is True
        _, from_cache = await service.build(alias_only, "host0.example")
        assert from_cache is False

    @pytest.mark.asyncio
    async def test_expired_entries_dropped(self, service: SitemapService, clock: MockClock) -> None:
        alias_only = Tenant(title="A", domain_aliases=frozenset({"a.example"}))
        await service.build(alias_only, "a.example")
        await service.build(alias_only, "b.example")
        clock.now += 900

        await service.build(alias_only, "c.example")

        assert len(service) == 1


class TestRobots:
    """Test robots.txt."""

    def test_robots(self, service: SitemapService, tenant: Tenant) -> None:
        text = service.robots(tenant)

        assert text.startswith("User-agent: *\nAllow: /\n")
        assert "Disallow: /admin\n" in text
        assert "Disallow: /bv_api\n" in text
        assert text.endswith("Sitemap: https://acme.com/sitemap.xml\n")

    def test_robots_under_base_path(self, service: SitemapService) -> None:
        tenant = Tenant(title="B", primary_domain="b.com", base_path="/blog")
        text = service.robots(tenant)

        assert "Disallow: /blog/admin\n" in text
        assert "Sitemap: https://b.com/blog/sitemap.xml" in text


# --- Component Entry Points ---


class TestComponent:
    """Test run_* entry points."""

    @pytest.mark.asyncio
    async def test_run_sitemap(self, service: SitemapService, tenant: Tenant) -> None:
        result = await run(SitemapInput(tenant=tenant), service=service)
        assert "<urlset" in result.xml  # type: ignore[union-attr]

    @pytest.mark.asyncio
    async def test_run_robots(self, service: SitemapService, tenant: Tenant) -> None:
        result = await run(RobotsInput(tenant=tenant), service=service)
        assert "Sitemap:" in result.text  # type: ignore[union-attr]

    @pytest.mark.asyncio
    async def test_run_unknown_input(self, service: SitemapService) -> None:
        with pytest.raises(ValueError):
            await run("x", service=service)  # type: ignore[arg-type]
