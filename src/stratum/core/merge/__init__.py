"""
Merge Engine do Stratum: deep-merge de patches sobre documentos base.
"""

from .engine import (
    PATCH_DIRECTIVE,
    MergeOptions,
    is_delete_directive,
    merge_documents,
    merge_nodes,
    strip_directives,
)

__all__ = [
    "PATCH_DIRECTIVE",
    "MergeOptions",
    "is_delete_directive",
    "merge_documents",
    "merge_nodes",
    "strip_directives",
]
