from typing import Literal

from pydantic import BaseModel, Field, field_validator


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class TrustRules(BaseModel):
    trusted_proxy_hosts: list[str] = Field(default_factory=list)
    first_party_hosts: list[str] = Field(
        default_factory=lambda: ["localhost", "127.0.0.1", "*.replit.dev", "*.replit.app"]
    )
    warn_on_insecure_fallback: bool = True

    @field_validator("trusted_proxy_hosts", "first_party_hosts")
    @classmethod
    def _entries_are_hostnames(cls, entries: list[str]) -> list[str]:
        cleaned = []
        for entry in entries:
            entry = entry.strip().lower()
            if not entry:
                continue
            if "*" in entry and not (entry.startswith("*.") and entry.count("*") == 1):
                raise ValueError(f"Invalid wildcard host entry: {entry!r} (use '*.suffix')")
            cleaned.append(entry)
        return cleaned


class RoutingRules(BaseModel):
    public_excluded_prefixes: list[str] = Field(
        default_factory=lambda: ["/admin", "/editor", "/api", "/bv_api"]
    )
    reserved_segments: list[str] = Field(
        default_factory=lambda: [
            "sitemap.xml",
            "sitemap",
            "robots.txt",
            "robots",
            "favicon.ico",
            "favicon",
            "feed",
            "rss",
            "rss.xml",
            "atom.xml",
            "manifest.json",
            "archive",
            "category",
            "search",
            "admin",
            "editor",
            "api",
            "bv_api",
        ]
    )
    multi_segment_fallback: Literal["post_root", "unknown"] = "post_root"
    missing_content: Literal["home", "not_found"] = "home"
    redirect_status_code: Literal[301, 308] = 308
    lookup_timeout_seconds: float = Field(default=2.0, gt=0)
    content_timeout_seconds: float = Field(default=3.0, gt=0)
    related_posts_limit: int = Field(default=4, ge=0)


class TenantCacheRules(BaseModel):
    ttl_seconds: float = Field(default=0, ge=0)
    max_entries: int = Field(default=1024, ge=1)


class SitemapRules(BaseModel):
    cache_ttl_seconds: float = Field(default=900, ge=0)
    cache_max_entries: int = Field(default=256, ge=1)
    top_tags: int = Field(default=20, ge=0)


class SeoRules(BaseModel):
    default_language: str = "en"
    description_max_length: int = Field(default=160, ge=20)
    default_scheme: Literal["https", "http"] = "https"
    twitter_site_from_domain: bool = True


class Rules(BaseModel):
    project: ProjectRules
    trust: TrustRules = Field(default_factory=TrustRules)
    routing: RoutingRules = Field(default_factory=RoutingRules)
    tenant_cache: TenantCacheRules = Field(default_factory=TenantCacheRules)
    sitemap: SitemapRules = Field(default_factory=SitemapRules)
    seo: SeoRules = Field(default_factory=SeoRules)


def default_rules() -> Rules:
    """Rules used when no rules file is configured (tests, embedded use)."""
    return Rules(project=ProjectRules(slug="chameleon-edge", rules_version="1"))
