"""
Fronteira de I/O do Stratum: leitura de documentos/overlays (YAML/JSON)
e escrita de result sets.
"""

from .errors import SourceError, SourceNotFoundError, UnsupportedSourceFormatError
from .loader import UniqueKeyLoader, load_base, load_documents, load_layer
from .serializer import dump_json, dump_yaml, write_result_set

__all__ = [
    "SourceError",
    "SourceNotFoundError",
    "UniqueKeyLoader",
    "UnsupportedSourceFormatError",
    "dump_json",
    "dump_yaml",
    "load_base",
    "load_documents",
    "load_layer",
    "write_result_set",
]
