from .clock import ClockPort
from .renderer import RenderContext, RendererPort, RenderResult
from .storage import ContentStorePort, StorePort, TenantStorePort

__all__ = [
    "ClockPort",
    "ContentStorePort",
    "RenderContext",
    "RenderResult",
    "RendererPort",
    "StorePort",
    "TenantStorePort",
]
