"""
Routing component - path normalization and route classification.

Invariants:
- Normalization is pure and deterministic
- Prefix routes (/post/, /tag/, /topics/) win over reserved and root slugs
- Decoding never raises
"""

from __future__ import annotations

from ._impl import RouteClassifier, normalize
from .models import ClassifyInput, ClassifyOutput, NormalizeInput, NormalizeOutput

# --- Component Entry Points ---


def run_normalize(inp: NormalizeInput) -> NormalizeOutput:
    """Strip query, fragment and base path from a raw request path."""
    return NormalizeOutput(path=normalize(inp.raw_path, inp.base_path))


def run_classify(
    inp: ClassifyInput,
    *,
    classifier: RouteClassifier | None = None,
) -> ClassifyOutput:
    """Classify a normalized path."""
    classifier = classifier or RouteClassifier()
    return ClassifyOutput(route=classifier.classify(inp.path))


def run(
    inp: NormalizeInput | ClassifyInput,
    *,
    classifier: RouteClassifier | None = None,
) -> NormalizeOutput | ClassifyOutput:
    """
    Main entry point for the routing component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, NormalizeInput):
        return run_normalize(inp)
    elif isinstance(inp, ClassifyInput):
        return run_classify(inp, classifier=classifier)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
