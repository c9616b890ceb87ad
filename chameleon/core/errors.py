"""Domain errors raised inside the routing edge.

None of these reach a public client: the SSR pipeline converts them into a
"not found" or template fallback response.
"""

from __future__ import annotations


class EdgeError(Exception):
    """Base class for routing edge errors."""


class AmbiguousTenantError(EdgeError):
    """More than one tenant claims the same hostname."""

    def __init__(self, key: str, value: str, tenant_ids: list[str]) -> None:
        self.key = key
        self.value = value
        self.tenant_ids = tenant_ids
        super().__init__(
            f"Hostname {value!r} matches {len(tenant_ids)} tenants by {key}: "
            f"{', '.join(tenant_ids)}"
        )


class RenderError(EdgeError):
    """The renderer collaborator failed for a tenant route."""


class RulesError(ValueError):
    """Routing rules file is missing or invalid."""
