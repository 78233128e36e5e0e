"""
Document Model e Identity Resolver do Stratum.

Componentes:
    - model    → Document, parse/clone, guarda de profundidade
    - identity → IdentityKey, identity_of, index_documents
    - paths    → navegação estrita e em leque por paths pontuados
"""

from .identity import IdentityKey, identity_of, index_documents
from .model import DEFAULT_MAX_DEPTH, Document, clone_document, parse_document

__all__ = [
    "DEFAULT_MAX_DEPTH",
    "Document",
    "IdentityKey",
    "clone_document",
    "identity_of",
    "index_documents",
    "parse_document",
]
