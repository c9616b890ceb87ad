"""
Host trust component - proxy-mode trust gate.

Invariants:
- A host outside the allow-list and first-party set is never trusted
- With a secret configured, only an exact secret match authenticates
- Decisions carry their evidence but are never shown to clients
"""

from __future__ import annotations

from ._impl import DEFAULT_FIRST_PARTY_HOSTS, HostTrust, create_host_trust
from .models import CheckHostInput, CheckHostOutput, EvaluateTrustInput, EvaluateTrustOutput
from .ports import TrustSettingsPort


def _create_service(settings: TrustSettingsPort | None) -> HostTrust:
    if settings is None:
        return create_host_trust()
    return create_host_trust(
        trusted_hosts=settings.get_trusted_proxy_hosts(),
        proxy_secret=settings.get_proxy_secret(),
        first_party_hosts=settings.get_first_party_hosts() or DEFAULT_FIRST_PARTY_HOSTS,
    )


# --- Component Entry Points ---


def run_check_host(
    inp: CheckHostInput,
    *,
    settings: TrustSettingsPort | None = None,
) -> CheckHostOutput:
    """Check a claimed host against the trusted allow-list."""
    service = _create_service(settings)
    pattern = service.matching_pattern(inp.claimed_host)
    return CheckHostOutput(trusted=pattern is not None, matched_pattern=pattern)


def run_evaluate(
    inp: EvaluateTrustInput,
    *,
    settings: TrustSettingsPort | None = None,
) -> EvaluateTrustOutput:
    """Evaluate whether proxy-mode resolution is allowed for this request."""
    service = _create_service(settings)
    return EvaluateTrustOutput(decision=service.evaluate(inp.claimed_host, inp.proxy_secret_header))


def run(
    inp: CheckHostInput | EvaluateTrustInput,
    *,
    settings: TrustSettingsPort | None = None,
) -> CheckHostOutput | EvaluateTrustOutput:
    """
    Main entry point for the host trust component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, CheckHostInput):
        return run_check_host(inp, settings=settings)
    elif isinstance(inp, EvaluateTrustInput):
        return run_evaluate(inp, settings=settings)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
