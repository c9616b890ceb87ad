"""
Domain entities for the routing edge.

Tenant and Post records are owned by the storage layer (admin CRUD lives
elsewhere); the edge only reads them, once per request.

Invariants:
- domain_aliases never contains the primary domain, no duplicates
- base_path is "" or starts with "/" and never ends with "/"
- proxy_visitor_hostname is required when deployment_mode is reverse_proxy
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# --- Enums / Literals ---
DeploymentMode = Literal["standalone", "reverse_proxy"]
PostUrlFormat = Literal["with-prefix", "root"]


def clean_hostname(value: str | None) -> str:
    """Lower-case a hostname and drop surrounding whitespace and a trailing dot."""
    if not value:
        return ""
    return value.strip().lower().rstrip(".")


def normalize_base_path(raw: str | None) -> str:
    """
    Normalize a tenant base path.

    "" and "/" mean "mounted at the root" and normalize to "".
    Anything else gets a leading slash and loses trailing slashes.
    """
    if not raw or not raw.strip():
        return ""

    normalized = raw.strip()
    if not normalized.startswith("/"):
        normalized = "/" + normalized

    normalized = normalized.rstrip("/")
    return normalized


# --- Tenant ---


class Tenant(BaseModel):
    """One independently configured site served by the shared process."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    title: str
    primary_domain: str = ""
    domain_aliases: frozenset[str] = Field(default_factory=frozenset)
    base_path: str = ""
    deployment_mode: DeploymentMode = "standalone"
    proxy_visitor_hostname: str | None = None
    post_url_format: PostUrlFormat = "with-prefix"

    # SEO defaults
    language: str = "en"
    meta_title: str | None = None
    meta_description: str | None = None
    og_image: str | None = None
    logo_url: str | None = None
    favicon: str | None = None

    @field_validator("primary_domain", mode="before")
    @classmethod
    def _clean_primary(cls, value: str | None) -> str:
        return clean_hostname(value)

    @field_validator("proxy_visitor_hostname", mode="before")
    @classmethod
    def _clean_visitor(cls, value: str | None) -> str | None:
        cleaned = clean_hostname(value)
        return cleaned or None

    @field_validator("domain_aliases", mode="before")
    @classmethod
    def _clean_aliases(cls, value: object) -> frozenset[str]:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            raise ValueError("domain_aliases must be a collection of hostnames")
        items = [clean_hostname(v) for v in value]  # type: ignore[attr-defined]
        if len(items) != len(set(items)):
            raise ValueError("domain_aliases contains duplicates")
        return frozenset(v for v in items if v)

    @field_validator("base_path", mode="before")
    @classmethod
    def _clean_base_path(cls, value: str | None) -> str:
        return normalize_base_path(value)

    @model_validator(mode="after")
    def _check_domains(self) -> Tenant:
        if self.primary_domain and self.primary_domain in self.domain_aliases:
            raise ValueError("primary_domain must not also be listed in domain_aliases")
        if self.deployment_mode == "reverse_proxy" and not self.proxy_visitor_hostname:
            raise ValueError("proxy_visitor_hostname is required in reverse_proxy mode")
        return self

    @property
    def is_reverse_proxy(self) -> bool:
        return self.deployment_mode == "reverse_proxy"

    def hostnames(self) -> set[str]:
        """All hostnames this tenant claims (primary, aliases, proxy visitor host)."""
        names = set(self.domain_aliases)
        if self.primary_domain:
            names.add(self.primary_domain)
        if self.is_reverse_proxy and self.proxy_visitor_hostname:
            names.add(self.proxy_visitor_hostname)
        return names


# --- Post ---


class Post(BaseModel):
    """A published article belonging to one tenant."""

    id: UUID = Field(default_factory=uuid4)
    tenant_id: UUID
    title: str
    slug: str
    content: str = ""
    image_url: str | None = None
    tags: list[str] = Field(default_factory=list)
    topic_group: str | None = None

    # Per-post SEO settings
    meta_title: str | None = None
    meta_description: str | None = None
    og_image: str | None = None
    canonical_url: str | None = None
    noindex: bool = False

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def has_tag(self, tag: str) -> bool:
        wanted = tag.lower()
        return any(t.lower() == wanted for t in self.tags)
