"""
HostTrust - decides whether a host may resolve tenants via proxy headers.

Proxy-mode resolution trusts the X-BV-Visitor-Host header, which clients can
often influence. It is only honoured when the request arrived through a host
the operator controls and, if configured, carries the shared proxy secret.

Key behaviors:
- Exact allow-list entries match case-insensitively, ignoring ports
- "*.suffix" entries match any subdomain of suffix (and suffix itself)
- First-party deployment hostnames are always trusted
- No configured secret means authentication passes, with a warning
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass

from .models import TrustDecision

logger = logging.getLogger(__name__)

DEFAULT_FIRST_PARTY_HOSTS: tuple[str, ...] = (
    "localhost",
    "127.0.0.1",
    "*.replit.dev",
    "*.replit.app",
)


# --- Configuration ---


@dataclass(frozen=True)
class HostTrustConfig:
    """Trust configuration from rules + environment."""

    trusted_hosts: tuple[str, ...] = ()
    first_party_hosts: tuple[str, ...] = DEFAULT_FIRST_PARTY_HOSTS
    proxy_secret: str | None = None
    warn_on_insecure_fallback: bool = True


# --- Host Helpers ---


def strip_port(host: str) -> str:
    """Remove a trailing :port, keeping bracketed IPv6 literals intact."""
    host = host.strip()
    if host.startswith("["):
        end = host.find("]")
        return host[: end + 1] if end != -1 else host
    if host.count(":") == 1:
        return host.split(":", 1)[0]
    return host


def normalize_host(host: str | None) -> str:
    """Canonical form used for every host comparison."""
    if not host:
        return ""
    return strip_port(host).lower().rstrip(".")


def match_host_pattern(host: str, pattern: str) -> bool:
    """
    Check a normalized host against one allow-list entry.

    "*.example.com" matches "a.example.com" and "example.com" but never
    "evilexample.com".
    """
    pattern = pattern.strip().lower()
    if not host or not pattern:
        return False

    if pattern.startswith("*."):
        suffix = pattern[2:]
        return host == suffix or host.endswith("." + suffix)

    return host == pattern


def find_matching_pattern(host: str, patterns: tuple[str, ...] | list[str]) -> str | None:
    """Return the first pattern matching host, or None."""
    for pattern in patterns:
        if match_host_pattern(host, pattern):
            return pattern
    return None


# --- Service ---


class HostTrust:
    """
    Proxy-mode trust gate.

    Stateless apart from its configuration; safe to share across requests.
    """

    def __init__(self, config: HostTrustConfig | None = None) -> None:
        self._config = config or HostTrustConfig()

    @property
    def secret_configured(self) -> bool:
        return bool(self._config.proxy_secret)

    def matching_pattern(self, claimed_host: str) -> str | None:
        host = normalize_host(claimed_host)
        if not host:
            return None
        return find_matching_pattern(host, self._config.trusted_hosts) or find_matching_pattern(
            host, self._config.first_party_hosts
        )

    def is_trusted_host(self, claimed_host: str) -> bool:
        return self.matching_pattern(claimed_host) is not None

    def is_authenticated(self, proxy_secret_header: str | None) -> bool:
        secret = self._config.proxy_secret
        if not secret:
            if self._config.warn_on_insecure_fallback:
                logger.warning(
                    "No proxy secret configured; accepting proxy-mode request without "
                    "authentication (set CHAMELEON_PROXY_SECRET)"
                )
            return True

        if proxy_secret_header is None:
            return False

        return hmac.compare_digest(proxy_secret_header.encode("utf-8"), secret.encode("utf-8"))

    def evaluate(self, claimed_host: str, proxy_secret_header: str | None) -> TrustDecision:
        """Full decision with evidence for audit logging."""
        host = normalize_host(claimed_host)
        pattern = self.matching_pattern(host)

        if pattern is None:
            return TrustDecision(
                allowed=False,
                host=host,
                secret_configured=self.secret_configured,
                reason="untrusted_host",
            )

        authenticated = self.is_authenticated(proxy_secret_header)
        if not authenticated:
            return TrustDecision(
                allowed=False,
                host=host,
                matched_pattern=pattern,
                secret_configured=True,
                reason="secret_mismatch",
            )

        return TrustDecision(
            allowed=True,
            host=host,
            matched_pattern=pattern,
            secret_configured=self.secret_configured,
            secret_matched=self.secret_configured,
            reason="trusted" if self.secret_configured else "trusted_without_secret",
        )


def create_host_trust(
    trusted_hosts: list[str] | tuple[str, ...] = (),
    proxy_secret: str | None = None,
    first_party_hosts: list[str] | tuple[str, ...] = DEFAULT_FIRST_PARTY_HOSTS,
    warn_on_insecure_fallback: bool = True,
) -> HostTrust:
    """Create a HostTrust."""
    return HostTrust(
        HostTrustConfig(
            trusted_hosts=tuple(h.strip().lower() for h in trusted_hosts if h.strip()),
            first_party_hosts=tuple(h.strip().lower() for h in first_party_hosts if h.strip()),
            proxy_secret=proxy_secret or None,
            warn_on_insecure_fallback=warn_on_insecure_fallback,
        )
    )
