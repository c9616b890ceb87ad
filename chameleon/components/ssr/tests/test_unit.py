"""
SSR pipeline unit tests.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from pathlib import Path
from uuid import UUID

import pytest

from chameleon.adapters.memory import InMemoryStore
from chameleon.adapters.render.html_renderer import HtmlRenderer
from chameleon.components.ssr import (
    RequestInfo,
    SsrPipeline,
    TemplateLoader,
    create_ssr_pipeline,
    is_public_route,
    run,
)
from chameleon.core.entities import Post, Tenant
from chameleon.ports.renderer import RenderContext, RenderResult
from chameleon.rules.models import Rules, RoutingRules, TrustRules, default_rules

TEMPLATE = """<!DOCTYPE html>
<html lang="en">
  <head>
    <title>Blog</title>
    <script type="module" src="/assets/index.js"></script>
  </head>
  <body>
    <div id="root"></div>
  </body>
</html>
"""

# --- Mock Ports ---


class StaticTemplates:
    def get_template(self) -> str:
        return TEMPLATE


class MockClock:
    def __init__(self) -> None:
        self.now = 0.0

    def monotonic(self) -> float:
        return self.now


class BrokenRenderer:
    def render(self, ctx: RenderContext) -> RenderResult:
        raise RuntimeError("renderer exploded")


class SlowContentStore(InMemoryStore):
    async def get_posts_by_tenant(self, tenant_id: UUID) -> list[Post]:
        await asyncio.sleep(1)
        return []


class LockedContentStore(InMemoryStore):
    async def get_posts_by_tenant(self, tenant_id: UUID) -> list[Post]:
        raise sqlite3.OperationalError("database is locked")


class LockedTenantStore(InMemoryStore):
    async def get_tenants_by_primary_domain(self, domain: str) -> list[Tenant]:
        raise sqlite3.OperationalError("database is locked")


# --- Fixtures ---


@pytest.fixture
def acme() -> Tenant:
    return Tenant(
        title="Acme",
        primary_domain="acme.com",
        domain_aliases=frozenset({"www.acme.com"}),
        post_url_format="with-prefix",
    )


@pytest.fixture
def widgets() -> Tenant:
    return Tenant(
        title="Widgets",
        primary_domain="widgets.com",
        domain_aliases=frozenset({"widgets.app"}),
        base_path="/blog",
        post_url_format="root",
    )


@pytest.fixture
def vyfy() -> Tenant:
    return Tenant(
        title="Vyfy",
        deployment_mode="reverse_proxy",
        proxy_visitor_hostname="vyfy.co.uk",
        post_url_format="root",
    )


@pytest.fixture
def store(acme: Tenant, widgets: Tenant, vyfy: Tenant) -> InMemoryStore:
    posts = []
    for tenant in (acme, widgets, vyfy):
        posts.append(
            Post(
                tenant_id=tenant.id,
                title="My Article",
                slug="my-article",
                content="Hello world.",
                tags=["news"],
            )
        )
        posts.append(
            Post(tenant_id=tenant.id, title="Second", slug="second", tags=["news"])
        )
    return InMemoryStore(tenants=[acme, widgets, vyfy], posts=posts)


def make_pipeline(
    store: InMemoryStore,
    rules: Rules | None = None,
    renderer: object | None = None,
    proxy_secret: str | None = "s3cret",
) -> SsrPipeline:
    rules = rules or default_rules().model_copy(
        update={"trust": TrustRules(trusted_proxy_hosts=["*.trusted.net"])}
    )
    return create_ssr_pipeline(
        rules=rules,
        store=store,
        renderer=renderer or HtmlRenderer(),  # type: ignore[arg-type]
        templates=StaticTemplates(),
        clock=MockClock(),
        proxy_secret=proxy_secret,
    )


@pytest.fixture
def pipeline(store: InMemoryStore) -> SsrPipeline:
    return make_pipeline(store)


def request(host: str, path: str, query: str = "", **headers: str) -> RequestInfo:
    all_headers = {"host": host}
    all_headers.update({k.replace("_", "-"): v for k, v in headers.items()})
    return RequestInfo(path=path, query_string=query, headers=all_headers)


# --- Template Loading ---


class TestTemplateLoader:
    """Test dev/prod template loading."""

    def test_production_reads_once(self, tmp_path: Path) -> None:
        path = tmp_path / "index.html"
        path.write_text("v1")
        loader = TemplateLoader(path, "production")

        path.write_text("v2")

        assert loader.get_template() == "v1"

    def test_development_rereads(self, tmp_path: Path) -> None:
        path = tmp_path / "index.html"
        path.write_text("v1")
        loader = TemplateLoader(path, "development")

        path.write_text("v2")

        assert loader.get_template() == "v2"

    def test_production_fails_fast(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            TemplateLoader(tmp_path / "missing.html", "production")


class TestIsPublicRoute:
    """Test admin/API prefix exclusion."""

    @pytest.mark.parametrize(
        "path", ["/admin", "/admin/sites", "/api/x", "/bv_api/posts", "/%61dmin/x"]
    )
    def test_excluded(self, path: str) -> None:
        assert is_public_route(path, ("/admin", "/api", "/bv_api")) is False

    @pytest.mark.parametrize("path", ["/", "/administrator", "/apiary", "/post/api"])
    def test_public(self, path: str) -> None:
        assert is_public_route(path, ("/admin", "/api", "/bv_api")) is True


# --- Pipeline: non-tenant responses ---


class TestNonTenantResponses:
    """Test responses that never reach tenant rendering."""

    @pytest.mark.asyncio
    async def test_admin_prefix_gets_template(self, pipeline: SsrPipeline) -> None:
        result = await pipeline.handle(request("acme.com", "/admin/posts"))

        assert result.status_code == 200
        assert result.kind == "template"
        assert result.body == TEMPLATE
        assert result.tenant_id is None

    @pytest.mark.asyncio
    async def test_unknown_host_gets_template(self, pipeline: SsrPipeline) -> None:
        result = await pipeline.handle(request("nobody.example", "/my-article"))

        assert result.status_code == 200
        assert result.kind == "template"
        assert result.body == TEMPLATE

    @pytest.mark.asyncio
    async def test_untrusted_proxy_claim_not_resolved(self, pipeline: SsrPipeline) -> None:
        """Untrusted host naming a proxy tenant's visitor host."""
        result = await pipeline.handle(
            request(
                "edge.internal",
                "/",
                x_bv_visitor_host="vyfy.co.uk",
                x_bv_proxy_secret="s3cret",
            )
        )

        assert result.kind == "template"
        assert result.tenant_id is None


# --- Pipeline: redirects ---


class TestCanonicalRedirects:
    """Test non-canonical post URLs."""

    @pytest.mark.asyncio
    async def test_root_slug_on_prefix_tenant(self, pipeline: SsrPipeline, acme: Tenant) -> None:
        result = await pipeline.handle(request("acme.com", "/my-article"))

        assert result.status_code == 308
        assert result.location == "/post/my-article"
        assert result.kind == "redirect"
        assert result.tenant_id == str(acme.id)

    @pytest.mark.asyncio
    async def test_prefix_on_root_tenant_under_base_path(self, pipeline: SsrPipeline) -> None:
        result = await pipeline.handle(
            request("widgets.com", "/blog/post/my-article", query="utm_source=x")
        )

        assert result.status_code == 308
        assert result.location == "/blog/my-article?utm_source=x"

    @pytest.mark.asyncio
    async def test_redirect_logged(
        self, pipeline: SsrPipeline, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO):
            await pipeline.handle(request("acme.com", "/my-article"))

        assert "Canonical redirect" in caplog.text

    @pytest.mark.asyncio
    async def test_canonical_url_not_redirected(self, pipeline: SsrPipeline) -> None:
        result = await pipeline.handle(request("acme.com", "/post/my-article"))

        assert result.status_code == 200
        assert result.location is None


# --- Pipeline: pages ---


class TestPages:
    """Test rendered tenant pages."""

    @pytest.mark.asyncio
    async def test_post_page(self, pipeline: SsrPipeline) -> None:
        result = await pipeline.handle(request("acme.com", "/post/my-article"))

        assert result.kind == "page"
        assert "<title>My Article</title>" in result.body
        assert "<title>Blog</title>" not in result.body
        assert '<link rel="canonical" href="https://acme.com/post/my-article">' in result.body
        assert "<h1>My Article</h1>" in result.body
        assert '"ssrPath": "/post/my-article"' in result.body
        assert '"isAliasDomain": false' in result.body

    @pytest.mark.asyncio
    async def test_home_page(self, pipeline: SsrPipeline) -> None:
        result = await pipeline.handle(request("acme.com", "/"))

        assert result.status_code == 200
        assert '<link rel="canonical" href="https://acme.com/">' in result.body
        assert 'href="/post/my-article"' in result.body

    @pytest.mark.asyncio
    async def test_tag_page(self, pipeline: SsrPipeline) -> None:
        result = await pipeline.handle(request("acme.com", "/tag/news"))

        assert result.status_code == 200
        assert "Tag: news" in result.body
        assert "https://acme.com/tag/news" in result.body

    @pytest.mark.asyncio
    async def test_base_path_assets_rewritten(self, pipeline: SsrPipeline) -> None:
        result = await pipeline.handle(request("widgets.com", "/blog/my-article"))

        assert result.status_code == 200
        assert 'src="/blog/assets/index.js"' in result.body
        assert 'window.__BASE_PATH__ = "/blog"' in result.body
        assert '"ssrPath": "/blog/my-article"' in result.body
        assert '<link rel="canonical" href="https://widgets.com/blog/my-article">' in result.body

    @pytest.mark.asyncio
    async def test_alias_domain_serves_at_root(self, pipeline: SsrPipeline) -> None:
        result = await pipeline.handle(request("widgets.app", "/my-article"))

        assert result.status_code == 200
        assert '"ssrPath": "/my-article"' in result.body
        assert '"isAliasDomain": true' in result.body
        assert "__BASE_PATH__" not in result.body
        assert '<link rel="canonical" href="https://widgets.com/blog/my-article">' in result.body

    @pytest.mark.asyncio
    async def test_trusted_proxy_resolves(self, pipeline: SsrPipeline, vyfy: Tenant) -> None:
        result = await pipeline.handle(
            request(
                "edge.trusted.net",
                "/my-article",
                x_bv_visitor_host="vyfy.co.uk",
                x_bv_proxy_secret="s3cret",
            )
        )

        assert result.status_code == 200
        assert result.tenant_id == str(vyfy.id)
        assert '<link rel="canonical" href="https://vyfy.co.uk/my-article">' in result.body


# --- Pipeline: fallbacks ---


class TestFallbacks:
    """Test missing content, failures and timeouts."""

    @pytest.mark.asyncio
    async def test_missing_post_serves_home(self, pipeline: SsrPipeline) -> None:
        result = await pipeline.handle(request("acme.com", "/post/nope"))

        assert result.status_code == 200
        assert result.kind == "page"
        assert '<link rel="canonical" href="https://acme.com/">' in result.body

    @pytest.mark.asyncio
    async def test_missing_post_not_found_mode(self, store: InMemoryStore) -> None:
        rules = default_rules().model_copy(
            update={"routing": RoutingRules(missing_content="not_found")}
        )
        pipeline = make_pipeline(store, rules=rules)

        result = await pipeline.handle(request("acme.com", "/post/nope"))

        assert result.status_code == 404
        assert "<h1>Acme</h1>" in result.body

    @pytest.mark.asyncio
    async def test_empty_tag_serves_home(self, pipeline: SsrPipeline) -> None:
        result = await pipeline.handle(request("acme.com", "/tag/nothing-here"))

        assert result.status_code == 200
        assert "Tag:" not in result.body

    @pytest.mark.asyncio
    async def test_render_failure_serves_template(
        self, store: InMemoryStore, caplog: pytest.LogCaptureFixture
    ) -> None:
        pipeline = make_pipeline(store, renderer=BrokenRenderer())

        with caplog.at_level(logging.ERROR):
            result = await pipeline.handle(request("acme.com", "/post/my-article"))

        assert result.status_code == 200
        assert result.body == TEMPLATE
        assert "Page assembly failed" in caplog.text

    @pytest.mark.asyncio
    async def test_content_timeout_serves_template(self, acme: Tenant) -> None:
        store = SlowContentStore(tenants=[acme])
        rules = default_rules().model_copy(
            update={"routing": RoutingRules(content_timeout_seconds=0.05)}
        )
        pipeline = make_pipeline(store, rules=rules)

        result = await pipeline.handle(request("acme.com", "/"))

        assert result.status_code == 200
        assert result.kind == "template"
        assert result.tenant_id == str(acme.id)

    @pytest.mark.asyncio
    async def test_content_storage_error_serves_template(
        self, acme: Tenant, caplog: pytest.LogCaptureFixture
    ) -> None:
        pipeline = make_pipeline(LockedContentStore(tenants=[acme]))

        with caplog.at_level(logging.ERROR):
            result = await pipeline.handle(request("acme.com", "/"))

        assert result.status_code == 200
        assert result.kind == "template"
        assert "Content fetch failed" in caplog.text

    @pytest.mark.asyncio
    async def test_tenant_storage_error_serves_template(self, acme: Tenant) -> None:
        pipeline = make_pipeline(LockedTenantStore(tenants=[acme]))

        result = await pipeline.handle(request("acme.com", "/post/my-article"))

        assert result.status_code == 200
        assert result.body == TEMPLATE
        assert result.tenant_id is None


# --- Pipeline: system routes ---


class TestSystemRoutes:
    """Test sitemap.xml, robots.txt and other reserved paths."""

    @pytest.mark.asyncio
    async def test_sitemap(self, pipeline: SsrPipeline) -> None:
        result = await pipeline.handle(request("acme.com", "/sitemap.xml"))

        assert result.media_type == "application/xml"
        assert result.kind == "sitemap"
        assert "<loc>https://acme.com/post/my-article</loc>" in result.body

    @pytest.mark.asyncio
    async def test_sitemap_under_base_path(self, pipeline: SsrPipeline) -> None:
        result = await pipeline.handle(request("widgets.com", "/blog/sitemap.xml"))

        assert "<loc>https://widgets.com/blog/my-article</loc>" in result.body

    @pytest.mark.asyncio
    async def test_sitemap_timeout_serves_template(self, acme: Tenant) -> None:
        rules = default_rules().model_copy(
            update={"routing": RoutingRules(content_timeout_seconds=0.05)}
        )
        pipeline = make_pipeline(SlowContentStore(tenants=[acme]), rules=rules)

        result = await pipeline.handle(request("acme.com", "/sitemap.xml"))

        assert result.status_code == 200
        assert result.kind == "template"
        assert result.body == TEMPLATE

    @pytest.mark.asyncio
    async def test_sitemap_storage_error_serves_template(
        self, acme: Tenant, caplog: pytest.LogCaptureFixture
    ) -> None:
        pipeline = make_pipeline(LockedContentStore(tenants=[acme]))

        with caplog.at_level(logging.ERROR):
            result = await pipeline.handle(request("acme.com", "/sitemap.xml"))

        assert result.status_code == 200
        assert result.kind == "template"
        assert "Sitemap generation failed" in caplog.text

    @pytest.mark.asyncio
    async def test_robots(self, pipeline: SsrPipeline) -> None:
        result = await pipeline.handle(request("acme.com", "/robots.txt"))

        assert result.media_type == "text/plain"
        assert "Sitemap: https://acme.com/sitemap.xml" in result.body

    @pytest.mark.asyncio
    async def test_other_reserved_path_gets_template(self, pipeline: SsrPipeline) -> None:
        result = await pipeline.handle(request("acme.com", "/favicon.ico"))

        assert result.kind == "template"
        assert result.body == TEMPLATE


# --- Component Entry Points ---


class TestComponent:
    """Test run_* entry points."""

    @pytest.mark.asyncio
    async def test_run(self, pipeline: SsrPipeline) -> None:
        result = await run(request("acme.com", "/my-article"), pipeline=pipeline)
        assert result.status_code == 308

    @pytest.mark.asyncio
    async def test_run_unknown_input(self, pipeline: SsrPipeline) -> None:
        with pytest.raises(ValueError):
            await run("x", pipeline=pipeline)  # type: ignore[arg-type]
