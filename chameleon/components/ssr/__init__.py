"""
SSR component - the public request pipeline.
"""

from ._impl import (
    DEFAULT_TEMPLATE_PATH,
    PROXY_SECRET_HEADER,
    PipelineConfig,
    SsrPipeline,
    TemplateLoader,
    create_ssr_pipeline,
    is_public_route,
)
from .component import run, run_handle
from .models import FetchedContent, RequestInfo, ResponseKind, SsrResponse
from .ports import TemplateSourcePort

__all__ = [
    # Entry points
    "run",
    "run_handle",
    # Models
    "FetchedContent",
    "RequestInfo",
    "ResponseKind",
    "SsrResponse",
    # Ports
    "TemplateSourcePort",
    # Service
    "DEFAULT_TEMPLATE_PATH",
    "PROXY_SECRET_HEADER",
    "PipelineConfig",
    "SsrPipeline",
    "TemplateLoader",
    "create_ssr_pipeline",
    "is_public_route",
]
