"""
TenantResolver - maps an incoming request to the tenant that owns it.

Key behaviors:
- Lookup order: primary domain, then alias, then proxy visitor hostname
- The proxy path is only consulted for trusted, authenticated hosts
- A hostname claimed by more than one tenant resolves to nobody
- Every storage lookup is bounded by a timeout; a timeout or storage error is "not found"
- Refusals and failures are logged, never surfaced to the client

Invariants:
- Lookup host and visitor host follow separate header precedences
- An untrusted host never resolves through the proxy path
- The resolver never picks one tenant out of several matches
"""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from uuid import UUID

from chameleon.components.host_trust import HostTrust, normalize_host
from chameleon.core.entities import Tenant
from chameleon.core.errors import AmbiguousTenantError

from .models import NOT_FOUND, MatchedBy, RequestHosts, Resolution
from .ports import ClockPort, TenantStorePort

logger = logging.getLogger(__name__)

LOOKUP_HOST_HEADERS: tuple[str, ...] = ("host", "x-original-host", "x-real-host")
VISITOR_HOST_HEADERS: tuple[str, ...] = ("x-bv-visitor-host", "x-forwarded-host")


class TenantLookupError(Exception):
    """A tenant storage lookup failed."""


class LookupTimeoutError(TenantLookupError):
    """A tenant storage lookup timed out."""


# --- Host Extraction ---


def clean_header_host(value: str | None) -> str:
    """First comma-separated entry of a host header, port stripped, lower-cased."""
    if not value:
        return ""
    first = value.split(",", 1)[0]
    return normalize_host(first)


def _first_header(headers: Mapping[str, str], names: tuple[str, ...]) -> str:
    for name in names:
        cleaned = clean_header_host(headers.get(name))
        if cleaned:
            return cleaned
    return ""


def extract_request_hosts(
    headers: Mapping[str, str],
    transport_host: str | None = None,
) -> RequestHosts:
    """
    Extract the lookup host and the visitor host from request headers.

    lookup:  Host > X-Original-Host > X-Real-Host > transport hostname
    visitor: X-BV-Visitor-Host > X-Forwarded-Host > lookup host
    """
    lowered = {k.lower(): v for k, v in headers.items()}

    lookup = _first_header(lowered, LOOKUP_HOST_HEADERS) or clean_header_host(transport_host)
    visitor = _first_header(lowered, VISITOR_HOST_HEADERS) or lookup

    return RequestHosts(lookup_host=lookup, visitor_host=visitor)


# --- Cache ---


@dataclass(frozen=True)
class _CacheEntry:
    tenant: Tenant
    matched_by: MatchedBy
    expires_at: float


class TenantCache:
    """
    Bounded TTL cache of successful resolutions.

    Keyed by the (lookup host, visitor host) pair. Only hits are cached, so a
    newly created tenant is visible on its next request. A ttl of 0 disables
    the cache entirely.
    """

    def __init__(self, clock: ClockPort, ttl_seconds: float = 0, max_entries: int = 1024) -> None:
        self._clock = clock
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._entries: OrderedDict[tuple[str, str], _CacheEntry] = OrderedDict()

    @property
    def enabled(self) -> bool:
        return self._ttl > 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: tuple[str, str]) -> _CacheEntry | None:
        if not self.enabled:
            return None

        entry = self._entries.get(key)
        if entry is None:
            return None

        if entry.expires_at <= self._clock.monotonic():
            del self._entries[key]
            return None

        self._entries.move_to_end(key)
        return entry

    def put(self, key: tuple[str, str], tenant: Tenant, matched_by: MatchedBy) -> None:
        if not self.enabled:
            return

        self._entries[key] = _CacheEntry(
            tenant=tenant,
            matched_by=matched_by,
            expires_at=self._clock.monotonic() + self._ttl,
        )
        self._entries.move_to_end(key)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    def invalidate_tenant(self, tenant_id: UUID) -> int:
        """Drop every entry resolving to tenant_id. Returns the number removed."""
        stale = [key for key, entry in self._entries.items() if entry.tenant.id == tenant_id]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()


# --- Resolver ---


class TenantResolver:
    """
    Resolves the tenant for a request.

    Safe to share across concurrent requests: the only mutable state is the
    optional cache, which is touched without awaiting in between.
    """

    def __init__(
        self,
        store: TenantStorePort,
        trust: HostTrust,
        *,
        lookup_timeout: float = 2.0,
        cache: TenantCache | None = None,
    ) -> None:
        self._store = store
        self._trust = trust
        self._lookup_timeout = lookup_timeout
        self._cache = cache

    @property
    def cache(self) -> TenantCache | None:
        return self._cache

    async def resolve(
        self,
        host_claim: str,
        visitor_hostname_claim: str = "",
        proxy_secret_header: str | None = None,
    ) -> Resolution:
        """Resolve a tenant. Never raises for lookup, trust or ambiguity failures."""
        host = normalize_host(host_claim)
        visitor = normalize_host(visitor_hostname_claim)

        try:
            resolution = await self._resolve(host, visitor, proxy_secret_header)
        except AmbiguousTenantError as e:
            logger.error("Tenant resolution refused: %s", e)
            return NOT_FOUND
        except LookupTimeoutError as e:
            logger.warning("Tenant resolution timed out for host=%s: %s", host, e)
            return NOT_FOUND
        except TenantLookupError:
            logger.exception("Tenant resolution failed for host=%s visitor=%s", host, visitor)
            return NOT_FOUND

        if resolution.tenant is not None:
            logger.info(
                "Resolved host=%s visitor=%s to tenant=%s by %s",
                host,
                visitor,
                resolution.tenant.id,
                resolution.matched_by,
            )
        return resolution

    async def _resolve(
        self, host: str, visitor: str, proxy_secret_header: str | None
    ) -> Resolution:
        cache_key = (host, visitor)
        if self._cache is not None:
            cached = self._cache.get(cache_key)
            if cached is not None:
                if cached.matched_by != "proxy_visitor":
                    return Resolution(tenant=cached.tenant, matched_by=cached.matched_by)
                # Proxy hits are re-authorized on every request
                decision = self._trust.evaluate(host, proxy_secret_header)
                if not decision.allowed:
                    self._log_refusal(host, visitor, decision.reason)
                    return Resolution(tenant=None, trust_decision=decision)
                return Resolution(
                    tenant=cached.tenant, matched_by="proxy_visitor", trust_decision=decision
                )

        if host:
            tenant = await self._lookup(
                "primary_domain", host, self._store.get_tenants_by_primary_domain
            )
            if tenant is not None:
                return self._remember(cache_key, tenant, "primary_domain")

            tenant = await self._lookup("alias", host, self._store.get_tenants_by_alias)
            if tenant is not None:
                return self._remember(cache_key, tenant, "alias")

        if not visitor:
            return NOT_FOUND

        decision = self._trust.evaluate(host, proxy_secret_header)
        if not decision.allowed:
            self._log_refusal(host, visitor, decision.reason)
            return Resolution(tenant=None, trust_decision=decision)

        tenant = await self._lookup(
            "proxy_visitor_hostname", visitor, self._store.get_tenants_by_visitor_hostname
        )
        if tenant is None or not tenant.is_reverse_proxy:
            return Resolution(tenant=None, trust_decision=decision)

        if decision.insecure_fallback:
            logger.warning(
                "SECURITY: proxy-mode resolution of visitor=%s via host=%s succeeded "
                "without a proxy secret",
                visitor,
                host,
            )

        self._remember(cache_key, tenant, "proxy_visitor")
        return Resolution(tenant=tenant, matched_by="proxy_visitor", trust_decision=decision)

    async def _lookup(
        self,
        key: str,
        value: str,
        fetch: Callable[[str], Awaitable[list[Tenant]]],
    ) -> Tenant | None:
        try:
            tenants = await asyncio.wait_for(fetch(value), timeout=self._lookup_timeout)
        except TimeoutError as e:
            raise LookupTimeoutError(f"{key} lookup for {value!r}") from e
        except Exception as e:
            raise TenantLookupError(f"{key} lookup for {value!r}: {e}") from e

        if not tenants:
            return None
        if len(tenants) > 1:
            raise AmbiguousTenantError(key, value, [str(t.id) for t in tenants])
        return tenants[0]

    def _remember(self, key: tuple[str, str], tenant: Tenant, matched_by: MatchedBy) -> Resolution:
        if self._cache is not None:
            self._cache.put(key, tenant, matched_by)
        return Resolution(tenant=tenant, matched_by=matched_by)

    def _log_refusal(self, host: str, visitor: str, reason: str) -> None:
        logger.warning(
            "Proxy-mode resolution refused: host=%s visitor=%s reason=%s",
            host,
            visitor,
            reason,
        )


def create_tenant_resolver(
    store: TenantStorePort,
    trust: HostTrust,
    *,
    lookup_timeout: float = 2.0,
    clock: ClockPort | None = None,
    cache_ttl_seconds: float = 0,
    cache_max_entries: int = 1024,
) -> TenantResolver:
    """Create a TenantResolver, with a cache when a clock and positive TTL are given."""
    cache = None
    if clock is not None and cache_ttl_seconds > 0:
        cache = TenantCache(clock, ttl_seconds=cache_ttl_seconds, max_entries=cache_max_entries)
    return TenantResolver(store, trust, lookup_timeout=lookup_timeout, cache=cache)
