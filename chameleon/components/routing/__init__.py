"""
Routing component - turns a request path into a RouteDescriptor.
"""

from chameleon.core.entities import normalize_base_path

from ._impl import (
    DEFAULT_RESERVED_SEGMENTS,
    ClassifierConfig,
    RouteClassifier,
    classify,
    create_classifier,
    decode_slug,
    normalize,
)
from .component import run, run_classify, run_normalize
from .models import (
    ClassifyInput,
    ClassifyOutput,
    NormalizeInput,
    NormalizeOutput,
    RouteDescriptor,
    RouteType,
)

__all__ = [
    # Entry points
    "run",
    "run_classify",
    "run_normalize",
    # Models
    "ClassifyInput",
    "ClassifyOutput",
    "NormalizeInput",
    "NormalizeOutput",
    "RouteDescriptor",
    "RouteType",
    # Service
    "DEFAULT_RESERVED_SEGMENTS",
    "ClassifierConfig",
    "RouteClassifier",
    "classify",
    "create_classifier",
    "decode_slug",
    "normalize",
    "normalize_base_path",
]
