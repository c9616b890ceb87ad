"""
Tenancy component - decides which tenant owns a request.
"""

from ._impl import (
    LOOKUP_HOST_HEADERS,
    VISITOR_HOST_HEADERS,
    LookupTimeoutError,
    TenantCache,
    TenantLookupError,
    TenantResolver,
    clean_header_host,
    create_tenant_resolver,
    extract_request_hosts,
)
from .component import run, run_extract_hosts, run_resolve
from .models import (
    NOT_FOUND,
    ExtractHostsInput,
    ExtractHostsOutput,
    MatchedBy,
    RequestHosts,
    Resolution,
    ResolveTenantInput,
    ResolveTenantOutput,
)

__all__ = [
    # Entry points
    "run",
    "run_extract_hosts",
    "run_resolve",
    # Models
    "ExtractHostsInput",
    "ExtractHostsOutput",
    "MatchedBy",
    "NOT_FOUND",
    "RequestHosts",
    "Resolution",
    "ResolveTenantInput",
    "ResolveTenantOutput",
    # Service
    "LOOKUP_HOST_HEADERS",
    "VISITOR_HOST_HEADERS",
    "LookupTimeoutError",
    "TenantCache",
    "TenantLookupError",
    "TenantResolver",
    "clean_header_host",
    "create_tenant_resolver",
    "extract_request_hosts",
]
