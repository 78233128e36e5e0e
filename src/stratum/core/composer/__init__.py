"""
Layer Composer do Stratum.

Ponto de entrada da composição: `compose` (base + um overlay) e
`compose_stack` (overlays em cascata).
"""

from .composer import as_layer, compose, compose_stack
from .context import CompositionContext, new_context
from .layer import CompositionResult, Layer, ResultSet

__all__ = [
    "CompositionContext",
    "CompositionResult",
    "Layer",
    "ResultSet",
    "as_layer",
    "compose",
    "compose_stack",
    "new_context",
]
