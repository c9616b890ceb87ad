"""
Minimal server renderer.

Produces semantic markup (listing, article, archive) for crawlers and a
dehydrated query cache the client resumes from. The production client
bundle re-renders on hydration, so markup here stays plain.
"""

from __future__ import annotations

import html
from typing import Any

from chameleon.components.assembly import rewrite_internal_post_links
from chameleon.components.canonical import post_path
from chameleon.components.routing import RouteType
from chameleon.components.seo import archive_path
from chameleon.core.entities import Post
from chameleon.ports.renderer import RenderContext, RenderResult

QUERY_PREFIX = "/api/public/sites"


def _escape_html(text: str) -> str:
    return html.escape(text, quote=True)


def _query(key: list[Any], data: Any) -> dict[str, Any]:
    return {"queryKey": key, "state": {"data": data, "status": "success"}}


def _dump_posts(posts: tuple[Post, ...]) -> list[dict[str, Any]]:
    return [p.model_dump(mode="json") for p in posts]


class HtmlRenderer:
    def render(self, ctx: RenderContext) -> RenderResult:
        # Alias hosts serve the site at their root
        base_path = "" if ctx.is_alias_domain else ctx.tenant.base_path
        route_type = RouteType(ctx.route_type)

        if ctx.post is not None:
            body = self._article(ctx, ctx.post, base_path)
        elif route_type in (RouteType.TAG, RouteType.TOPICS) and ctx.current_tag:
            body = self._archive(ctx, base_path, route_type)
        else:
            body = self._listing(ctx, base_path)

        return RenderResult(markup=body, hydration=self._dehydrate(ctx, route_type))

    # --- Markup ---

    def _post_link(self, ctx: RenderContext, post: Post, base_path: str) -> str:
        href = post_path(post.slug, ctx.tenant.post_url_format, base_path)
        return f'<a href="{_escape_html(href)}">{_escape_html(post.title)}</a>'

    def _post_list(self, ctx: RenderContext, posts: tuple[Post, ...], base_path: str) -> str:
        if not posts:
            return "<p>No posts yet.</p>"
        items = "\n".join(
            f"<li>{self._post_link(ctx, p, base_path)}</li>" for p in posts
        )
        return f'<ul class="post-list">\n{items}\n</ul>'

    def _listing(self, ctx: RenderContext, base_path: str) -> str:
        tenant = ctx.tenant
        return f"""
    <main>
        <h1>{_escape_html(tenant.title)}</h1>
        <p>{_escape_html(tenant.meta_description or "")}</p>
        {self._post_list(ctx, ctx.posts, base_path)}
    </main>
    """

    def _archive(self, ctx: RenderContext, base_path: str, route_type: RouteType) -> str:
        label = "Topic" if route_type == RouteType.TOPICS else "Tag"
        tag = ctx.current_tag or ""
        return f"""
    <main>
        <h1>{label}: {_escape_html(tag)}</h1>
        {self._post_list(ctx, ctx.tag_posts, base_path)}
    </main>
    """

    def _article(self, ctx: RenderContext, post: Post, base_path: str) -> str:
        content = rewrite_internal_post_links(
            post.content, base_path, ctx.tenant.post_url_format
        )
        paragraphs = "\n".join(
            f"<p>{_escape_html(block.strip())}</p>"
            for block in content.split("\n\n")
            if block.strip()
        )
        tags = "".join(
            f'<li><a href="{_escape_html(base_path + archive_path(RouteType.TAG, t))}">'
            f"{_escape_html(t)}</a></li>"
            for t in post.tags
        )
        related = ""
        if ctx.related_posts:
            related = (
                '<aside class="related"><h2>Related</h2>'
                f"{self._post_list(ctx, ctx.related_posts, base_path)}</aside>"
            )
        return f"""
    <article>
        <h1>{_escape_html(post.title)}</h1>
        <ul class="tags">{tags}</ul>
        <div class="post-content">
{paragraphs}
        </div>
        {related}
    </article>
    """

    # --- Hydration ---

    def _dehydrate(self, ctx: RenderContext, route_type: RouteType) -> dict[str, Any]:
        site_id = str(ctx.tenant.id)
        queries: list[dict[str, Any]] = []

        if ctx.posts:
            queries.append(_query([QUERY_PREFIX, site_id, "posts"], _dump_posts(ctx.posts)))

        if ctx.post is not None:
            post = ctx.post
            queries.append(
                _query([QUERY_PREFIX, site_id, "posts", post.slug], post.model_dump(mode="json"))
            )
            queries.append(
                _query(
                    [QUERY_PREFIX, site_id, "related-posts", str(post.id)],
                    _dump_posts(ctx.related_posts),
                )
            )

        if ctx.current_tag and route_type in (RouteType.TAG, RouteType.TOPICS):
            kind = "topic" if route_type == RouteType.TOPICS else "tag"
            queries.append(
                _query(
                    [QUERY_PREFIX, site_id, "posts", kind, ctx.current_tag],
                    _dump_posts(ctx.tag_posts),
                )
            )

        return {"mutations": [], "queries": queries}
