"""
Tenancy component - tenant resolution for incoming requests.

Invariants:
- Primary domain beats alias, alias beats proxy visitor hostname
- Proxy visitor lookup requires a trusted host and, if configured, the secret
- Ambiguous or timed-out lookups resolve as "not found"
"""

from __future__ import annotations

from chameleon.components.host_trust import HostTrust, create_host_trust

from ._impl import TenantResolver, extract_request_hosts
from .models import (
    ExtractHostsInput,
    ExtractHostsOutput,
    ResolveTenantInput,
    ResolveTenantOutput,
)
from .ports import TenantStorePort

# --- Component Entry Points ---


def run_extract_hosts(inp: ExtractHostsInput) -> ExtractHostsOutput:
    """Extract lookup and visitor hosts from request headers."""
    return ExtractHostsOutput(hosts=extract_request_hosts(inp.headers, inp.transport_host))


async def run_resolve(
    inp: ResolveTenantInput,
    *,
    store: TenantStorePort,
    trust: HostTrust | None = None,
    resolver: TenantResolver | None = None,
) -> ResolveTenantOutput:
    """
    Resolve the tenant owning a request.

    Pass a long-lived resolver to share its cache across requests; otherwise
    a fresh one is built around store and trust.
    """
    if resolver is None:
        resolver = TenantResolver(store, trust or create_host_trust())
    resolution = await resolver.resolve(inp.host, inp.visitor_hostname, inp.proxy_secret_header)
    return ResolveTenantOutput(resolution=resolution)


async def run(
    inp: ResolveTenantInput | ExtractHostsInput,
    *,
    store: TenantStorePort | None = None,
    trust: HostTrust | None = None,
) -> ResolveTenantOutput | ExtractHostsOutput:
    """
    Main entry point for the tenancy component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, ExtractHostsInput):
        return run_extract_hosts(inp)
    elif isinstance(inp, ResolveTenantInput):
        if store is None:
            raise ValueError("store is required to resolve tenants")
        return await run_resolve(inp, store=store, trust=trust)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
