"""
Host trust component - decides who may use proxy-mode tenant lookup.
"""

from ._impl import (
    DEFAULT_FIRST_PARTY_HOSTS,
    HostTrust,
    HostTrustConfig,
    create_host_trust,
    find_matching_pattern,
    match_host_pattern,
    normalize_host,
    strip_port,
)
from .component import run, run_check_host, run_evaluate
from .models import (
    CheckHostInput,
    CheckHostOutput,
    EvaluateTrustInput,
    EvaluateTrustOutput,
    TrustDecision,
)
from .ports import TrustSettingsPort

__all__ = [
    # Entry points
    "run",
    "run_check_host",
    "run_evaluate",
    # Models
    "CheckHostInput",
    "CheckHostOutput",
    "EvaluateTrustInput",
    "EvaluateTrustOutput",
    "TrustDecision",
    # Ports
    "TrustSettingsPort",
    # Service
    "DEFAULT_FIRST_PARTY_HOSTS",
    "HostTrust",
    "HostTrustConfig",
    "create_host_trust",
    "find_matching_pattern",
    "match_host_pattern",
    "normalize_host",
    "strip_port",
]
