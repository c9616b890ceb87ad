import argparse
import asyncio
import logging
import sys
from datetime import UTC, datetime, timedelta

from chameleon.adapters.clock import SystemClock
from chameleon.adapters.render.html_renderer import HtmlRenderer
from chameleon.adapters.sqlite.migrator import SQLiteMigrator
from chameleon.adapters.sqlite.store import SQLiteStore
from chameleon.api.deps import Settings
from chameleon.app_shell.config import validate_edge_rules
from chameleon.app_shell.logging_config import configure_logging
from chameleon.components.ssr import RequestInfo, TemplateLoader, create_ssr_pipeline
from chameleon.core.entities import Post, Tenant
from chameleon.rules.loader import load_rules

logger = logging.getLogger("cli")


def _prepare_db(settings: Settings) -> SQLiteStore:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    SQLiteMigrator(settings.db_path).run_migrations()
    return SQLiteStore(settings.db_path)


def handle_serve(settings: Settings, args: argparse.Namespace) -> None:
    import uvicorn

    uvicorn.run(
        "chameleon.api.main:app",
        host=args.host,
        port=args.port,
        reload=settings.mode == "development",
    )


def handle_migrate(settings: Settings, args: argparse.Namespace) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    applied = SQLiteMigrator(settings.db_path).run_migrations()
    print(f"Applied {len(applied)} migration(s) to {settings.db_path}.")


def demo_content() -> tuple[list[Tenant], list[Post]]:
    """Three demo tenants covering standalone, base-path and reverse-proxy setups."""
    standalone = Tenant(
        title="Acme Journal",
        primary_domain="acme.localhost",
        domain_aliases=frozenset({"www.acme.localhost"}),
        post_url_format="root",
        meta_description="Notes from the Acme workshop.",
    )
    mounted = Tenant(
        title="Widgets Blog",
        primary_domain="widgets.localhost",
        base_path="/blog",
        post_url_format="with-prefix",
    )
    proxied = Tenant(
        title="Vyfy",
        deployment_mode="reverse_proxy",
        proxy_visitor_hostname="vyfy.co.uk",
        base_path="/blog",
        post_url_format="root",
    )

    now = datetime.now(UTC)
    posts: list[Post] = []
    for tenant in (standalone, mounted, proxied):
        for i, (title, tags) in enumerate(
            [
                ("Getting Started", ["guides"]),
                ("Release Notes", ["news", "guides"]),
                ("Behind the Scenes", ["news"]),
            ]
        ):
            slug = title.lower().replace(" ", "-")
            posts.append(
                Post(
                    tenant_id=tenant.id,
                    title=title,
                    slug=slug,
                    content=(
                        f"{title} for {tenant.title}.\n\n"
                        "See also [the intro](/post/getting-started)."
                    ),
                    tags=tags,
                    topic_group="basics" if i == 0 else "updates",
                    created_at=now - timedelta(days=i),
                    updated_at=now - timedelta(days=i),
                )
            )
    return [standalone, mounted, proxied], posts


def handle_seed(settings: Settings, args: argparse.Namespace) -> None:
    store = _prepare_db(settings)
    tenants, posts = demo_content()
    for tenant in tenants:
        store.save_tenant(tenant)
    for post in posts:
        store.save_post(post)
    print(f"Seeded {len(tenants)} tenants and {len(posts)} posts into {settings.db_path}.")


def handle_explain(settings: Settings, args: argparse.Namespace) -> None:
    """Run one request through the pipeline and print the outcome."""
    rules = load_rules(settings.rules_path)
    pipeline = create_ssr_pipeline(
        rules=rules,
        store=_prepare_db(settings),
        renderer=HtmlRenderer(),
        templates=TemplateLoader(settings.template_path, "production"),
        clock=SystemClock(),
        proxy_secret=settings.proxy_secret,
        extra_trusted_hosts=settings.trusted_proxy_hosts,
    )

    headers = {"host": args.host}
    for raw in args.header or []:
        name, sep, value = raw.partition(":")
        if not sep:
            logger.error("Header %r must look like 'Name: value'", raw)
            sys.exit(1)
        headers[name.strip().lower()] = value.strip()

    path, _, query = args.path.partition("?")
    result = asyncio.run(
        pipeline.handle(RequestInfo(path=path, query_string=query, headers=headers))
    )

    print(f"Status:   {result.status_code}")
    print(f"Kind:     {result.kind}")
    print(f"Tenant:   {result.tenant_id or '-'}")
    if result.location:
        print(f"Location: {result.location}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Chameleon Edge CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the edge server")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=8000)

    # migrate
    subparsers.add_parser("migrate", help="Apply pending SQLite migrations")

    # seed
    subparsers.add_parser("seed", help="Load demo tenants and posts")

    # explain
    explain_parser = subparsers.add_parser(
        "explain", help="Show how a request would be resolved and routed"
    )
    explain_parser.add_argument("host", help="Host header value, e.g. acme.localhost")
    explain_parser.add_argument("path", help="Request path, optionally with ?query")
    explain_parser.add_argument(
        "-H", "--header", action="append", help="Extra header, e.g. 'X-BV-Visitor-Host: a.com'"
    )

    args = parser.parse_args()

    configure_logging()
    settings = Settings()

    try:
        rules = load_rules(settings.rules_path)
    except (FileNotFoundError, ValueError) as e:
        logger.error("Rules load failed: %s", e)
        sys.exit(1)
    validate_edge_rules(rules, settings.proxy_secret, settings.trusted_proxy_hosts)

    if args.command == "serve":
        handle_serve(settings, args)
    elif args.command == "migrate":
        handle_migrate(settings, args)
    elif args.command == "seed":
        handle_seed(settings, args)
    elif args.command == "explain":
        handle_explain(settings, args)


if __name__ == "__main__":
    main()
