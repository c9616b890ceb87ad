"""
Host trust component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TrustDecision:
    """
    Outcome of a proxy-mode trust check plus the evidence behind it.

    Used for logging and security auditing only, never persisted and never
    returned to the client.
    """

    allowed: bool
    host: str
    matched_pattern: str | None = None
    secret_configured: bool = False
    secret_matched: bool = False
    reason: str = ""

    @property
    def insecure_fallback(self) -> bool:
        """True when the host was allowed without any shared secret configured."""
        return self.allowed and not self.secret_configured


# --- Input Models ---


@dataclass(frozen=True)
class CheckHostInput:
    """Input for checking a claimed host against the allow-list."""

    claimed_host: str


@dataclass(frozen=True)
class EvaluateTrustInput:
    """Input for a full proxy-mode trust evaluation."""

    claimed_host: str
    proxy_secret_header: str | None = None


# --- Output Models ---


@dataclass(frozen=True)
class CheckHostOutput:
    trusted: bool
    matched_pattern: str | None = None


@dataclass(frozen=True)
class EvaluateTrustOutput:
    decision: TrustDecision
