"""
Assembly component unit tests.
"""

from __future__ import annotations

import json
import logging

import pytest

from chameleon.components.assembly import (
    AssembleInput,
    AssemblyError,
    RewriteAssetsInput,
    RewriteLinksInput,
    assemble,
    rewrite_asset_paths,
    rewrite_internal_post_links,
    run,
    safe_assemble,
    serialize_hydration,
    set_html_lang,
)
from chameleon.components.seo import MetaBlock
from chameleon.ports.renderer import RenderResult

TEMPLATE = """<!DOCTYPE html>
<html lang="en" class="dark">
  <head>
    <meta charset="UTF-8" />
    <TITLE>Shell Title</TITLE>
    <link rel="icon" href="/favicon.ico" />
    <script type="module" src="/assets/index.js"></script>
  </head>
  <body>
    <div id="root"></div>
  </body>
</html>
"""


@pytest.fixture
def meta() -> MetaBlock:
    return MetaBlock(
        title="Tenant Page",
        description="About the tenant",
        canonical_url="https://acme.com/",
        language="de",
        site_name="Acme",
    )


# --- assemble ---


class TestAssemble:
    """Test page assembly."""

    def test_single_title(self, meta: MetaBlock) -> None:
        page = assemble(TEMPLATE, "<main>hi</main>", {}, meta)

        assert page.lower().count("<title>") == 1
        assert "<title>Tenant Page</title>" in page
        assert "Shell Title" not in page

    def test_markup_mounted(self, meta: MetaBlock) -> None:
        page = assemble(TEMPLATE, "<main>hi</main>", {}, meta)
        assert '<div id="root"><main>hi</main></div>' in page

    def test_head_before_close(self, meta: MetaBlock) -> None:
        page = assemble(TEMPLATE, "", {}, meta)

        head = page.split("</head>", 1)[0]
        assert '<link rel="canonical" href="https://acme.com/">' in head
        assert "window.__SSR_DATA__" in head

    def test_html_lang_replaced(self, meta: MetaBlock) -> None:
        page = assemble(TEMPLATE, "", {}, meta)
        assert '<html lang="de" class="dark">' in page

    def test_hydration_escaped(self, meta: MetaBlock) -> None:
        payload = {"post": {"title": "</script><script>alert(1)</script>"}}
        page = assemble(TEMPLATE, "", payload, meta)

        assert "</script><script>alert(1)" not in page
        assert "\\u003c/script>" in page

    def test_markup_with_head_close_text(self, meta: MetaBlock) -> None:
        """Rendered markup is mounted after the head is filled."""
        page = assemble(TEMPLATE, "<pre>&lt;/head&gt; </head></pre>", {}, meta)
        assert page.index("<title>Tenant Page</title>") < page.index("<pre>")

    def test_missing_mount_point(self, meta: MetaBlock) -> None:
        with pytest.raises(AssemblyError):
            assemble("<html><head></head><body></body></html>", "", {}, meta)

    def test_missing_head(self, meta: MetaBlock) -> None:
        with pytest.raises(AssemblyError):
            assemble('<div id="root"></div>', "", {}, meta)


class TestSerializeHydration:
    def test_round_trips(self) -> None:
        data = {"a": "<b>", "n": 1}
        text = serialize_hydration(data)

        assert "<" not in text
        assert json.loads(text) == data


class TestSetHtmlLang:
    def test_adds_missing_lang(self) -> None:
        assert set_html_lang("<html><head>", "fr") == '<html lang="fr"><head>'

    def test_escapes_value(self) -> None:
        assert set_html_lang("<html>", 'x"y') == '<html lang="x&quot;y">'


# --- safe_assemble ---


class TestSafeAssemble:
    """Test the template fallback."""

    def test_success(self, meta: MetaBlock) -> None:
        page, ok = safe_assemble(TEMPLATE, lambda: RenderResult(markup="<p>ok</p>"), meta)

        assert ok is True
        assert "<p>ok</p>" in page

    def test_render_failure_returns_template(
        self, meta: MetaBlock, caplog: pytest.LogCaptureFixture
    ) -> None:
        def boom() -> RenderResult:
            raise RuntimeError("renderer crashed")

        with caplog.at_level(logging.ERROR):
            page, ok = safe_assemble(TEMPLATE, boom, meta, tenant_id="t-1", route="/post/x")

        assert ok is False
        assert page == TEMPLATE
        assert any("t-1" in r.getMessage() and "/post/x" in r.getMessage() for r in caplog.records)

    def test_assembly_failure_returns_template(self, meta: MetaBlock) -> None:
        broken = "<html><body>no mount</body></html>"
        page, ok = safe_assemble(broken, lambda: RenderResult(markup="x"), meta)

        assert ok is False
        assert page == broken

    def test_custom_hydration(self, meta: MetaBlock) -> None:
        page, _ = safe_assemble(
            TEMPLATE,
            lambda: RenderResult(markup="", hydration={"q": 1}),
            meta,
            hydration=lambda r: {"dehydratedState": r.hydration, "ssrPath": "/"},
        )
        assert '"dehydratedState": {"q": 1}' in page


# --- Base Path Rewriting ---


class TestRewriteAssetPaths:
    """Test asset prefixing for base-path tenants."""

    def test_no_base_path_untouched(self) -> None:
        assert rewrite_asset_paths(TEMPLATE, "") == TEMPLATE
        assert rewrite_asset_paths(TEMPLATE, "/") == TEMPLATE

    def test_prefixes_assets_and_favicon(self) -> None:
        page = rewrite_asset_paths(TEMPLATE, "/blog/")

        assert 'src="/blog/assets/index.js"' in page
        assert 'href="/blog/favicon.ico"' in page

    def test_injects_base_path(self) -> None:
        page = rewrite_asset_paths(TEMPLATE, "blog")
        assert '<script>window.__BASE_PATH__ = "/blog"</script>' in page
        assert page.index("__BASE_PATH__") < page.index("</head>")


# --- Internal Link Rewriting ---


class TestRewriteInternalPostLinks:
    """Test /post/<slug> link rewriting."""

    def test_markdown_root_format(self) -> None:
        text = "See [the intro](/post/intro) first."
        assert rewrite_internal_post_links(text, "", "root") == "See [the intro](/intro) first."

    def test_markdown_with_base(self) -> None:
        text = "[a](/post/a-1)"
        assert rewrite_internal_post_links(text, "/blog", "with-prefix") == "[a](/blog/post/a-1)"

    def test_html_anchor(self) -> None:
        text = '<a class="x" href="/post/intro">Intro</a>'
        assert rewrite_internal_post_links(text, "/blog", "root") == (
            '<a class="x" href="/blog/intro">Intro</a>'
        )

    def test_bare_href(self) -> None:
        text = "<link href='/post/intro'>"
        assert rewrite_internal_post_links(text, "", "root") == "<link href='/intro'>"

    def test_unknown_slug_reduced_to_text(self) -> None:
        text = "[gone](/post/gone) and <a href=\"/post/gone\">gone too</a>"
        result = rewrite_internal_post_links(text, "", "root", valid_slugs={"intro"})
        assert result == "gone and gone too"

    def test_external_links_untouched(self) -> None:
        text = "[x](https://other.com/post/x)"
        assert rewrite_internal_post_links(text, "", "root") == text

    def test_empty(self) -> None:
        assert rewrite_internal_post_links("", "/b", "root") == ""


# --- Component Entry Points ---


class TestComponent:
    """Test run_* entry points."""

    def test_run_assemble(self, meta: MetaBlock) -> None:
        result = run(AssembleInput(template=TEMPLATE, rendered_markup="<p/>", meta=meta))
        assert "<p/>" in result.html  # type: ignore[union-attr]

    def test_run_rewrite_assets(self) -> None:
        result = run(RewriteAssetsInput(html=TEMPLATE, base_path="/b"))
        assert "/b/assets/" in result.text  # type: ignore[union-attr]

    def test_run_rewrite_links(self) -> None:
        result = run(
            RewriteLinksInput(content="[a](/post/a)", base_path="", post_url_format="root")
        )
        assert result.text == "[a](/a)"  # type: ignore[union-attr]

    def test_run_unknown_input(self) -> None:
        with pytest.raises(ValueError):
            run(object())  # type: ignore[arg-type]
