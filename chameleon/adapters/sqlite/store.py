"""
SQLite-backed tenant and content store.

Blocking sqlite3 calls run in a worker thread so the async ports never
stall the event loop. Each call opens its own connection.
"""

from __future__ import annotations

import asyncio
import json
import sqlite3
from datetime import datetime
from typing import Any
from uuid import UUID

from chameleon.core.entities import Post, Tenant


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


TENANT_COLUMNS = (
    "id",
    "title",
    "primary_domain",
    "base_path",
    "deployment_mode",
    "proxy_visitor_hostname",
    "post_url_format",
    "language",
    "meta_title",
    "meta_description",
    "og_image",
    "logo_url",
    "favicon",
)


class SQLiteStore:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    # --- Row mapping ---

    def _tenants_from_rows(self, conn: sqlite3.Connection, rows: list[dict[str, Any]]) -> list[Tenant]:
        tenants = []
        for row in rows:
            aliases = conn.execute(
                "SELECT alias FROM tenant_aliases WHERE tenant_id = ?", (row["id"],)
            ).fetchall()
            tenants.append(
                Tenant(
                    **{k: row[k] for k in TENANT_COLUMNS if k != "id"},
                    id=UUID(row["id"]),
                    domain_aliases=frozenset(a["alias"] for a in aliases),
                )
            )
        return tenants

    def _row_to_post(self, row: dict[str, Any]) -> Post:
        return Post(
            id=UUID(row["id"]),
            tenant_id=UUID(row["tenant_id"]),
            title=row["title"],
            slug=row["slug"],
            content=row["content"],
            image_url=row["image_url"],
            tags=json.loads(row["tags_json"]),
            topic_group=row["topic_group"],
            meta_title=row["meta_title"],
            meta_description=row["meta_description"],
            og_image=row["og_image"],
            canonical_url=row["canonical_url"],
            noindex=bool(row["noindex"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _query_tenants(self, where: str, params: tuple[Any, ...]) -> list[Tenant]:
        conn = self._get_conn()
        try:
            rows = conn.execute(f"SELECT * FROM tenants WHERE {where}", params).fetchall()
            return self._tenants_from_rows(conn, rows)
        finally:
            conn.close()

    def _query_posts(self, where: str, params: tuple[Any, ...]) -> list[Post]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                f"SELECT * FROM posts WHERE {where} ORDER BY created_at DESC", params
            ).fetchall()
            return [self._row_to_post(r) for r in rows]
        finally:
            conn.close()

    # --- Writes (sync; used by seeding and tests) ---

    def save_tenant(self, tenant: Tenant) -> Tenant:
        conn = self._get_conn()
        try:
            values = tenant.model_dump(include=set(TENANT_COLUMNS))
            values["id"] = str(tenant.id)
            placeholders = ", ".join("?" for _ in TENANT_COLUMNS)
            updates = ", ".join(f"{c}=excluded.{c}" for c in TENANT_COLUMNS if c != "id")
            conn.execute(
                f"INSERT INTO tenants ({', '.join(TENANT_COLUMNS)}) VALUES ({placeholders}) "
                f"ON CONFLICT(id) DO UPDATE SET {updates}",
                tuple(values[c] for c in TENANT_COLUMNS),
            )
            conn.execute("DELETE FROM tenant_aliases WHERE tenant_id = ?", (str(tenant.id),))
            for alias in sorted(tenant.domain_aliases):
                conn.execute(
                    "INSERT INTO tenant_aliases (tenant_id, alias) VALUES (?, ?)",
                    (str(tenant.id), alias),
                )
            conn.commit()
            return tenant
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def save_post(self, post: Post) -> Post:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO posts (
                    id, tenant_id, title, slug, content, image_url, tags_json,
                    topic_group, meta_title, meta_description, og_image,
                    canonical_url, noindex, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title=excluded.title,
                    slug=excluded.slug,
                    content=excluded.content,
                    image_url=excluded.image_url,
                    tags_json=excluded.tags_json,
                    topic_group=excluded.topic_group,
                    meta_title=excluded.meta_title,
                    meta_description=excluded.meta_description,
                    og_image=excluded.og_image,
                    canonical_url=excluded.canonical_url,
                    noindex=excluded.noindex,
                    updated_at=excluded.updated_at
            """,
                (
                    str(post.id),
                    str(post.tenant_id),
                    post.title,
                    post.slug,
                    post.content,
                    post.image_url,
                    json.dumps(post.tags),
                    post.topic_group,
                    post.meta_title,
                    post.meta_description,
                    post.og_image,
                    post.canonical_url,
                    int(post.noindex),
                    post.created_at.isoformat(),
                    post.updated_at.isoformat(),
                ),
            )
            conn.commit()
            return post
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    # --- TenantStorePort ---

    async def get_tenants_by_primary_domain(self, domain: str) -> list[Tenant]:
        if not domain:
            return []
        return await asyncio.to_thread(self._query_tenants, "primary_domain = ?", (domain,))

    async def get_tenants_by_alias(self, alias: str) -> list[Tenant]:
        return await asyncio.to_thread(
            self._query_tenants,
            "id IN (SELECT tenant_id FROM tenant_aliases WHERE alias = ?)",
            (alias,),
        )

    async def get_tenants_by_visitor_hostname(self, hostname: str) -> list[Tenant]:
        if not hostname:
            return []
        return await asyncio.to_thread(
            self._query_tenants,
            "deployment_mode = 'reverse_proxy' AND proxy_visitor_hostname = ?",
            (hostname,),
        )

    # --- ContentStorePort ---

    async def get_post_by_slug(self, tenant_id: UUID, slug: str) -> Post | None:
        posts = await asyncio.to_thread(
            self._query_posts, "tenant_id = ? AND slug = ?", (str(tenant_id), slug)
        )
        return posts[0] if posts else None

    async def get_posts_by_tenant(self, tenant_id: UUID) -> list[Post]:
        return await asyncio.to_thread(self._query_posts, "tenant_id = ?", (str(tenant_id),))

    async def get_posts_by_tag(self, tenant_id: UUID, tag: str) -> list[Post]:
        posts = await self.get_posts_by_tenant(tenant_id)
        return [p for p in posts if p.has_tag(tag)]

    async def get_posts_by_topic_group(self, tenant_id: UUID, group: str) -> list[Post]:
        return await asyncio.to_thread(
            self._query_posts,
            "tenant_id = ? AND lower(topic_group) = lower(?)",
            (str(tenant_id), group),
        )

    async def get_related_posts(self, tenant_id: UUID, post: Post, limit: int) -> list[Post]:
        tags = {t.lower() for t in post.tags}
        if not tags or limit <= 0:
            return []
        posts = await self.get_posts_by_tenant(tenant_id)
        related = [
            p for p in posts if p.id != post.id and tags.intersection(t.lower() for t in p.tags)
        ]
        return related[:limit]

    async def get_top_tags(self, tenant_id: UUID, limit: int) -> list[str]:
        posts = await self.get_posts_by_tenant(tenant_id)
        counts: dict[str, int] = {}
        for p in posts:
            for tag in p.tags:
                counts[tag] = counts.get(tag, 0) + 1
        ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return [tag for tag, _ in ranked[:limit]]
