# src/stratum/core/composer/layer.py
"""
Estruturas de entrada e saída do Layer Composer.

    - Layer             → overlay: nome, patches e transforms, em ordem
    - ResultSet         → coleção ordenada e imutável de documentos
    - CompositionResult → ResultSet + diagnósticos + rastreabilidade

Invariantes:
    - Um ResultSet é construído do zero a cada composição e nunca é
      alterado depois de devolvido
    - A igualdade de ResultSets é estrutural e sensível à ordem
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from stratum.core.config.hashing import compute_canonical_hash
from stratum.core.diagnostics import Diagnostic, Severity, filter_by_type
from stratum.core.document.identity import DEFAULT_KIND_FIELD, DEFAULT_NAME_PATH, IdentityKey, identity_of
from stratum.core.document.model import Document, clone_node
from stratum.core.document.paths import FieldPath
from stratum.core.exceptions import IdentityError
from stratum.core.transforms.types import TransformResult


@dataclass(frozen=True)
class Layer:
    """
    Overlay a ser composto sobre uma base.

    `patches` aceita Documents ou mapeamentos brutos (validados pelo
    Composer). `transforms` aceita objetos Transform ou declarações
    `{"kind": ..., "scope": {...}, **params}`.
    """

    name: str = "overlay"
    patches: Tuple[Any, ...] = ()
    transforms: Tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "patches", tuple(self.patches))
        object.__setattr__(self, "transforms", tuple(self.transforms))


@dataclass(frozen=True)
class ResultSet:
    """
    Coleção ordenada e imutável de documentos produzida por uma composição.

    `kind_field` e `name_path` são os campos de identidade das settings
    usadas na composição; `compose` os preenche. Não participam da
    igualdade, que compara apenas os documentos.
    """

    documents: Tuple[Document, ...] = ()
    kind_field: str = field(default=DEFAULT_KIND_FIELD, compare=False)
    name_path: FieldPath = field(default=DEFAULT_NAME_PATH, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "documents", tuple(self.documents))
        object.__setattr__(self, "name_path", tuple(self.name_path))

    def __iter__(self) -> Iterator[Document]:
        return iter(self.documents)

    def __len__(self) -> int:
        return len(self.documents)

    def identity_of(self, doc: Document) -> IdentityKey:
        return identity_of(doc, kind_field=self.kind_field, name_path=self.name_path)

    def get(self, identity: Union[IdentityKey, str], name: Optional[str] = None) -> Optional[Document]:
        """
        Busca um documento por identidade.

        Aceita `get(IdentityKey(kind, name))` ou `get(kind, name)`.
        """
        if name is None:
            if not isinstance(identity, IdentityKey):
                raise TypeError("get() requer um IdentityKey ou o par (kind, name)")
            key = identity
        else:
            key = IdentityKey(kind=identity, name=name)
        for doc in self.documents:
            if self.identity_of(doc) == key:
                return doc
        return None

    def identities(self) -> List[IdentityKey]:
        return [self.identity_of(doc) for doc in self.documents]

    def to_list(self) -> List[dict]:
        """Cópias independentes dos corpos, na ordem do result set."""
        return [clone_node(doc.body) for doc in self.documents]

    def digest(self) -> str:
        """SHA-256 canônico do conteúdo ordenado (mesma entrada, mesmo digest)."""
        return compute_canonical_hash([doc.body for doc in self.documents])


@dataclass(frozen=True)
class CompositionResult:
    """Resultado de `compose`: result set mais trilha de diagnósticos e eventos."""

    result_set: ResultSet
    diagnostics: Tuple[Diagnostic, ...] = ()
    transform_results: Tuple[TransformResult, ...] = ()
    events: Tuple[Dict[str, Any], ...] = ()
    layers: Tuple[str, ...] = ()
    meta: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def documents(self) -> Tuple[Document, ...]:
        return self.result_set.documents

    @property
    def is_valid(self) -> bool:
        """Todos os documentos possuem identidade e nenhuma identidade se repete."""
        try:
            keys = self.result_set.identities()
        except IdentityError:
            return False
        return len(set(keys)) == len(keys)

    @property
    def has_warnings(self) -> bool:
        return any(d.severity == Severity.WARNING for d in self.diagnostics)

    def diagnostics_of(self, code: str) -> List[Diagnostic]:
        return filter_by_type(self.diagnostics, code)


def documents_of(result: Any) -> Sequence[Any]:
    """Aceita CompositionResult, ResultSet ou sequência e devolve os documentos."""
    if isinstance(result, CompositionResult):
        return result.result_set.documents
    if isinstance(result, ResultSet):
        return result.documents
    return list(result)
