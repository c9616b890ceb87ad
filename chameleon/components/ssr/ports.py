"""
SSR component port definitions.
"""

from __future__ import annotations

from typing import Protocol

from chameleon.ports.renderer import RendererPort
from chameleon.ports.storage import ContentStorePort, StorePort


class TemplateSourcePort(Protocol):
    """Supplies the client build's index.html shell."""

    def get_template(self) -> str:
        ...


__all__ = ["ContentStorePort", "RendererPort", "StorePort", "TemplateSourcePort"]
