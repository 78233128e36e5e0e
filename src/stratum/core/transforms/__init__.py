"""
Transform Pipeline do Stratum.

Vocabulário declarativo de transforms aplicados ao result set depois do
merge, o registry que os constrói a partir de declarações de overlay e o
executor que os aplica na ordem declarada.
"""

from .base import ALL_DOCUMENTS, DocumentTransform, Transform, TransformScope
from .fields import SetField, SetReplicas
from .labels import AddCommonAnnotation, AddCommonLabel
from .names import SetNamePrefix, SetNameSuffix
from .pipeline import TransformPipeline
from .registry import DuplicateTransformKindError, TransformRegistry, default_registry
from .sequences import PatchSequenceByIdentity
from .types import TransformKind, TransformResult, TransformStatus

__all__ = [
    "ALL_DOCUMENTS",
    "AddCommonAnnotation",
    "AddCommonLabel",
    "DocumentTransform",
    "DuplicateTransformKindError",
    "PatchSequenceByIdentity",
    "SetField",
    "SetNamePrefix",
    "SetNameSuffix",
    "SetReplicas",
    "Transform",
    "TransformKind",
    "TransformPipeline",
    "TransformRegistry",
    "TransformResult",
    "TransformScope",
    "TransformStatus",
    "default_registry",
]
