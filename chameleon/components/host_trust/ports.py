"""
Host trust component port definitions.
"""

from __future__ import annotations

from typing import Protocol


class TrustSettingsPort(Protocol):
    """Port for trust configuration (allow-list, first-party hosts, secret)."""

    def get_trusted_proxy_hosts(self) -> list[str]:
        """Operator allow-list entries, exact or '*.suffix'."""
        ...

    def get_first_party_hosts(self) -> list[str]:
        """Platform-owned deployment hostnames that are always trusted."""
        ...

    def get_proxy_secret(self) -> str | None:
        """Shared proxy secret, or None when not configured."""
        ...
