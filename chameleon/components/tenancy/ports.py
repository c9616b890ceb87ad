"""
Tenancy component port definitions.
"""

from __future__ import annotations

from chameleon.ports.clock import ClockPort
from chameleon.ports.storage import TenantStorePort

__all__ = ["ClockPort", "TenantStorePort"]
