import logging

from chameleon.core.errors import RulesError
from chameleon.rules.models import Rules

logger = logging.getLogger(__name__)


def validate_edge_rules(
    rules: Rules,
    proxy_secret: str | None = None,
    extra_trusted_hosts: list[str] | None = None,
) -> None:
    """
    Validate routing requirements before startup.

    Raises RulesError for combinations the pydantic models cannot catch on
    their own. Insecure-but-allowed setups only log a warning.
    """
    routing = rules.routing

    # 1. Excluded prefixes are matched against normalized paths
    for prefix in routing.public_excluded_prefixes:
        if not prefix.startswith("/") or (len(prefix) > 1 and prefix.endswith("/")):
            raise RulesError(
                f"routing.public_excluded_prefixes entry {prefix!r} must start with '/' "
                "and not end with '/'"
            )

    # 2. Reserved segments are single path segments
    for segment in routing.reserved_segments:
        if "/" in segment.strip("/") or not segment.strip():
            raise RulesError(f"routing.reserved_segments entry {segment!r} is not one segment")

    # 3. Proxy trust without a shared secret
    trusted = [*rules.trust.trusted_proxy_hosts, *(extra_trusted_hosts or [])]
    if trusted and not proxy_secret:
        logger.warning(
            "SECURITY: %d trusted proxy host(s) configured but CHAMELEON_PROXY_SECRET is unset; "
            "visitor-host claims from those hosts are accepted unauthenticated",
            len(trusted),
        )

    logger.info("Configuration validated (rules_version=%s)", rules.project.rules_version)
