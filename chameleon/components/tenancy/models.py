"""
Tenancy component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from chameleon.components.host_trust import TrustDecision
from chameleon.core.entities import Tenant

MatchedBy = Literal["primary_domain", "alias", "proxy_visitor"]


@dataclass(frozen=True)
class RequestHosts:
    """
    The two hostnames extracted from a request.

    lookup_host identifies who the request was sent to; visitor_host is what
    the visitor typed into their browser (proxy deployments). They follow
    different header precedences and must never be swapped.
    """

    lookup_host: str
    visitor_host: str


@dataclass(frozen=True)
class Resolution:
    """Result of tenant resolution for one request."""

    tenant: Tenant | None
    matched_by: MatchedBy | None = None
    trust_decision: TrustDecision | None = None

    @property
    def found(self) -> bool:
        return self.tenant is not None

    @property
    def is_alias_domain(self) -> bool:
        """Served on any hostname other than the tenant's primary domain."""
        return self.tenant is not None and self.matched_by != "primary_domain"


NOT_FOUND = Resolution(tenant=None)


# --- Input Models ---


@dataclass(frozen=True)
class ResolveTenantInput:
    """Input for resolving the tenant that owns a request."""

    host: str
    visitor_hostname: str = ""
    proxy_secret_header: str | None = None


@dataclass(frozen=True)
class ExtractHostsInput:
    """Input for host extraction from raw request headers."""

    headers: dict[str, str]
    transport_host: str | None = None


# --- Output Models ---


@dataclass(frozen=True)
class ResolveTenantOutput:
    resolution: Resolution


@dataclass(frozen=True)
class ExtractHostsOutput:
    hosts: RequestHosts
