"""
SsrPipeline - the public request path, end to end.

Key behaviors:
- Admin/API prefixes and unknown hosts get the plain template (HTTP 200)
- Non-canonical post URLs are redirected before any content is fetched
- sitemap.xml and robots.txt are generated per tenant
- Content and sitemap fetches are bounded; a timeout or storage error serves the template
- Missing content falls back to the tenant home listing (optionally with 404)
- Render or assembly failures serve the template, never a 5xx

One pipeline serves both runtime modes; only template loading differs.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal
from urllib.parse import unquote

from chameleon.components.assembly import rewrite_asset_paths, safe_assemble
from chameleon.components.canonical import CanonicalPolicy, build_location
from chameleon.components.host_trust import create_host_trust
from chameleon.components.routing import (
    RouteClassifier,
    RouteDescriptor,
    RouteType,
    create_classifier,
    normalize,
)
from chameleon.components.seo import PageContent, SeoComposer, create_seo_composer
from chameleon.components.sitemap import SitemapService, create_sitemap_service
from chameleon.components.tenancy import (
    Resolution,
    TenantResolver,
    create_tenant_resolver,
    extract_request_hosts,
)
from chameleon.core.entities import Tenant
from chameleon.ports.clock import ClockPort
from chameleon.ports.renderer import RenderContext, RenderResult
from chameleon.rules.models import Rules

from .models import FetchedContent, RequestInfo, SsrResponse
from .ports import ContentStorePort, RendererPort, StorePort, TemplateSourcePort

logger = logging.getLogger(__name__)

RuntimeMode = Literal["development", "production"]

PROXY_SECRET_HEADER = "x-bv-proxy-secret"
DEFAULT_TEMPLATE_PATH = Path(__file__).resolve().parents[2] / "templates" / "index.html"

HOME_ROUTE = RouteDescriptor(RouteType.HOME)


# --- Template Loading ---


class TemplateLoader:
    """
    Loads the index.html shell.

    production: read once at construction (a missing file fails startup).
    development: re-read on every request so client rebuilds show up.
    """

    def __init__(self, path: Path | str, mode: RuntimeMode = "production") -> None:
        self._path = Path(path)
        self._mode = mode
        self._cached: str | None = None
        if mode == "production":
            self._cached = self._read()

    @property
    def mode(self) -> RuntimeMode:
        return self._mode

    def _read(self) -> str:
        return self._path.read_text(encoding="utf-8")

    def get_template(self) -> str:
        if self._cached is not None:
            return self._cached
        return self._read()


# --- Configuration ---


@dataclass(frozen=True)
class PipelineConfig:
    """Pipeline configuration from rules."""

    excluded_prefixes: tuple[str, ...] = ("/admin", "/editor", "/api", "/bv_api")
    missing_content: Literal["home", "not_found"] = "home"
    content_timeout_seconds: float = 3.0
    related_posts_limit: int = 4


def is_public_route(path: str, excluded_prefixes: Iterable[str]) -> bool:
    """False for admin/API paths, matched at a segment boundary after decoding."""
    path = unquote(path)
    for prefix in excluded_prefixes:
        if path == prefix or path.startswith(prefix + "/"):
            return False
    return True


# --- Pipeline ---


class SsrPipeline:
    """
    Request-to-HTML pipeline for tenant sites.

    Holds only long-lived collaborators; every request builds its own
    descriptors, contexts and meta blocks.
    """

    def __init__(
        self,
        *,
        resolver: TenantResolver,
        classifier: RouteClassifier,
        canonical: CanonicalPolicy,
        composer: SeoComposer,
        content: ContentStorePort,
        renderer: RendererPort,
        templates: TemplateSourcePort,
        sitemap: SitemapService,
        config: PipelineConfig | None = None,
    ) -> None:
        self._resolver = resolver
        self._classifier = classifier
        self._canonical = canonical
        self._composer = composer
        self._content = content
        self._renderer = renderer
        self._templates = templates
        self._sitemap = sitemap
        self._config = config or PipelineConfig()

    @property
    def resolver(self) -> TenantResolver:
        return self._resolver

    @property
    def sitemap(self) -> SitemapService:
        return self._sitemap

    async def handle(self, request: RequestInfo) -> SsrResponse:
        template = self._templates.get_template()
        full_path = normalize(request.path)

        if not is_public_route(full_path, self._config.excluded_prefixes):
            return SsrResponse(status_code=200, body=template, kind="template")

        hosts = extract_request_hosts(request.headers, request.transport_host)
        resolution = await self._resolver.resolve(
            hosts.lookup_host,
            hosts.visitor_host,
            request.header(PROXY_SECRET_HEADER),
        )
        tenant = resolution.tenant
        if tenant is None:
            logger.info("No tenant for host=%s path=%s", hosts.lookup_host, full_path)
            return SsrResponse(status_code=200, body=template, kind="template")

        tenant_id = str(tenant.id)
        route_path = normalize(request.path, tenant.base_path)
        route = self._classifier.classify(route_path)

        if route.is_system_route:
            return await self._system_route(route_path, tenant, hosts.visitor_host, template)

        target = self._canonical.decide(route, tenant.post_url_format, tenant.base_path)
        if target is not None:
            location = build_location(target, request.query_string)
            logger.info(
                "Canonical redirect tenant=%s %s -> %s", tenant_id, request.path, location
            )
            return SsrResponse(
                status_code=self._canonical.status_code,
                location=location,
                kind="redirect",
                tenant_id=tenant_id,
            )

        try:
            fetched = await asyncio.wait_for(
                self._fetch_content(tenant, route),
                timeout=self._config.content_timeout_seconds,
            )
        except TimeoutError:
            logger.warning("Content fetch timed out for tenant=%s route=%s", tenant_id, route_path)
            return self._tenant_template(template, tenant, resolution, tenant_id)
        except Exception:
            logger.exception("Content fetch failed for tenant=%s route=%s", tenant_id, route_path)
            return self._tenant_template(template, tenant, resolution, tenant_id)

        status_code = 200
        if fetched.missing and self._config.missing_content == "not_found":
            status_code = 404

        body = self._render_page(
            template, tenant, resolution, fetched, route_path, full_path, hosts.visitor_host
        )
        return SsrResponse(status_code=status_code, body=body, kind="page", tenant_id=tenant_id)

    # --- Content ---

    async def _fetch_content(self, tenant: Tenant, route: RouteDescriptor) -> FetchedContent:
        store = self._content

        if route.route_type == RouteType.HOME:
            posts = await store.get_posts_by_tenant(tenant.id)
            return FetchedContent(route=route, posts=tuple(posts))

        if route.is_post and route.slug:
            post = await store.get_post_by_slug(tenant.id, route.slug)
            if post is not None:
                related: list[Any] = []
                if self._config.related_posts_limit:
                    related = await store.get_related_posts(
                        tenant.id, post, self._config.related_posts_limit
                    )
                return FetchedContent(route=route, post=post, related_posts=tuple(related))

        elif route.is_archive and route.slug:
            if route.route_type == RouteType.TAG:
                tagged = await store.get_posts_by_tag(tenant.id, route.slug)
            else:
                tagged = await store.get_posts_by_topic_group(tenant.id, route.slug)
            if tagged:
                return FetchedContent(route=route, tag_posts=tuple(tagged), tag=route.slug)

        logger.info(
            "Content missing for tenant=%s route=%s slug=%r; serving home listing",
            tenant.id,
            route.route_type.value,
            route.slug,
        )
        posts = await store.get_posts_by_tenant(tenant.id)
        return FetchedContent(route=HOME_ROUTE, posts=tuple(posts), missing=True)

    # --- Rendering ---

    def _render_page(
        self,
        template: str,
        tenant: Tenant,
        resolution: Resolution,
        fetched: FetchedContent,
        route_path: str,
        full_path: str,
        visitor_hostname: str,
    ) -> str:
        route = fetched.route
        is_alias = resolution.is_alias_domain
        # Alias hosts serve the site at their root; the client router has no base
        ssr_path = route_path if is_alias else full_path

        page_content = PageContent(
            post=fetched.post,
            posts=fetched.tag_posts if route.is_archive else fetched.posts,
            tag=fetched.tag,
        )
        meta = self._composer.compose(tenant, route, page_content, visitor_hostname)

        ctx = RenderContext(
            tenant=tenant,
            route_path=route_path if not fetched.missing else "/",
            ssr_path=ssr_path,
            route_type=route.route_type.value,
            is_alias_domain=is_alias,
            visitor_hostname=visitor_hostname,
            posts=fetched.posts,
            post=fetched.post,
            related_posts=fetched.related_posts,
            tag_posts=fetched.tag_posts,
            current_tag=fetched.tag,
        )

        def hydration(result: RenderResult) -> dict[str, Any]:
            return {
                "site": tenant.model_dump(mode="json"),
                "dehydratedState": result.hydration,
                "ssrPath": ssr_path,
                "isAliasDomain": is_alias,
            }

        body, _ = safe_assemble(
            template,
            lambda: self._renderer.render(ctx),
            meta,
            hydration=hydration,
            tenant_id=str(tenant.id),
            route=route_path,
        )
        if tenant.base_path and not is_alias:
            body = rewrite_asset_paths(body, tenant.base_path)
        return body

    def _tenant_template(
        self, template: str, tenant: Tenant, resolution: Resolution, tenant_id: str
    ) -> SsrResponse:
        body = template
        if tenant.base_path and not resolution.is_alias_domain:
            body = rewrite_asset_paths(body, tenant.base_path)
        return SsrResponse(status_code=200, body=body, kind="template", tenant_id=tenant_id)

    async def _system_route(
        self, route_path: str, tenant: Tenant, visitor_hostname: str, template: str
    ) -> SsrResponse:
        name = route_path.lstrip("/").lower()
        tenant_id = str(tenant.id)
        fallback = SsrResponse(status_code=200, body=template, kind="template", tenant_id=tenant_id)

        if name == "sitemap.xml":
            try:
                xml, _ = await asyncio.wait_for(
                    self._sitemap.build(tenant, visitor_hostname),
                    timeout=self._config.content_timeout_seconds,
                )
            except TimeoutError:
                logger.warning("Sitemap generation timed out for tenant=%s", tenant_id)
                return fallback
            except Exception:
                logger.exception("Sitemap generation failed for tenant=%s", tenant_id)
                return fallback
            return SsrResponse(
                status_code=200,
                body=xml,
                media_type="application/xml",
                kind="sitemap",
                tenant_id=tenant_id,
            )

        if name == "robots.txt":
            return SsrResponse(
                status_code=200,
                body=self._sitemap.robots(tenant, visitor_hostname),
                media_type="text/plain",
                kind="robots",
                tenant_id=tenant_id,
            )

        return fallback


# --- Factory ---


def create_ssr_pipeline(
    *,
    rules: Rules,
    store: StorePort,
    renderer: RendererPort,
    templates: TemplateSourcePort,
    clock: ClockPort,
    proxy_secret: str | None = None,
    extra_trusted_hosts: Iterable[str] = (),
) -> SsrPipeline:
    """
    Compose the pipeline from rules and process configuration.

    Args:
        rules: Validated rules file
        store: Tenant and content storage
        renderer: Page body renderer
        templates: index.html source (dev or prod loading)
        clock: Monotonic clock for caches
        proxy_secret: Shared proxy secret, None for the insecure fallback
        extra_trusted_hosts: Allow-list entries from the environment

    Returns:
        Configured SsrPipeline
    """
    routing = rules.routing

    trust = create_host_trust(
        trusted_hosts=[*rules.trust.trusted_proxy_hosts, *extra_trusted_hosts],
        proxy_secret=proxy_secret,
        first_party_hosts=rules.trust.first_party_hosts,
        warn_on_insecure_fallback=rules.trust.warn_on_insecure_fallback,
    )
    resolver = create_tenant_resolver(
        store,
        trust,
        lookup_timeout=routing.lookup_timeout_seconds,
        clock=clock,
        cache_ttl_seconds=rules.tenant_cache.ttl_seconds,
        cache_max_entries=rules.tenant_cache.max_entries,
    )
    classifier = create_classifier(routing.reserved_segments, routing.multi_segment_fallback)

    return SsrPipeline(
        resolver=resolver,
        classifier=classifier,
        canonical=CanonicalPolicy(classifier=classifier, status_code=routing.redirect_status_code),
        composer=create_seo_composer(
            default_scheme=rules.seo.default_scheme,
            default_language=rules.seo.default_language,
            description_max_length=rules.seo.description_max_length,
            twitter_site_from_domain=rules.seo.twitter_site_from_domain,
        ),
        content=store,
        renderer=renderer,
        templates=templates,
        sitemap=create_sitemap_service(
            store,
            clock,
            ttl_seconds=rules.sitemap.cache_ttl_seconds,
            max_entries=rules.sitemap.cache_max_entries,
            top_tags=rules.sitemap.top_tags,
            scheme=rules.seo.default_scheme,
            disallowed_prefixes=routing.public_excluded_prefixes,
        ),
        config=PipelineConfig(
            excluded_prefixes=tuple(routing.public_excluded_prefixes),
            missing_content=routing.missing_content,
            content_timeout_seconds=routing.content_timeout_seconds,
            related_posts_limit=routing.related_posts_limit,
        ),
    )
