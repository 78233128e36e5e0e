# src/stratum/core/document/identity.py
"""
Identity Resolver do Stratum.

Este módulo calcula a chave de merge (`IdentityKey`) de cada documento,
permitindo casar documentos da base com patches do overlay que se
referem ao "mesmo" objeto.

Política de identidade (v1):
    - kind: campo raiz `kind`
    - name: campo `metadata.name`
    - ambos configuráveis via settings (`identity.kind_field`,
      `identity.name_path`)
    - valores devem ser strings não vazias ou números; números são
      normalizados para `str`
    - booleanos são rejeitados: em YAML 1.1 `yes`/`on` viram `True` e um
      nome assim seria silenciosamente trocado por "True"

Invariantes:
    - Dentro de uma coleção indexada, chaves de identidade são únicas
    - O índice preserva a ordem de declaração da coleção

Limites explícitos:
    - Não considera namespace ou versão de API na identidade
    - Não realiza merge
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, NamedTuple, Optional, Sequence, Tuple

from stratum.core.exceptions import DuplicateIdentityError, IdentityError

from .model import Document

DEFAULT_KIND_FIELD = "kind"
DEFAULT_NAME_PATH: Tuple[str, ...] = ("metadata", "name")


class IdentityKey(NamedTuple):
    """Par (kind, name) usado para casar documentos entre camadas."""

    kind: str
    name: str

    def __str__(self) -> str:
        return f"{self.kind}/{self.name}"


def identity_of(
    doc: Document,
    *,
    kind_field: str = DEFAULT_KIND_FIELD,
    name_path: Sequence[str] = DEFAULT_NAME_PATH,
) -> IdentityKey:
    """
    Extrai a chave de identidade `(kind, name)` de um documento.

    Raises:
        IdentityError: Se `kind` ou `name` estiverem ausentes, nulos, vazios,
            booleanos ou não forem escalares.
    """
    body = doc.body if isinstance(doc, Document) else doc
    kind = _scalar_text(body.get(kind_field) if isinstance(body, dict) else None)
    if kind is None:
        raise IdentityError(
            message="Documento sem kind válido (string ou número)",
            details={"field": kind_field},
            hint=f"Declare o campo '{kind_field}' como string não vazia (booleanos e nulos não são aceitos).",
        )

    node: Any = body
    for segment in name_path:
        node = node.get(segment) if isinstance(node, dict) else None
    name = _scalar_text(node)
    if name is None:
        raise IdentityError(
            message="Documento sem name válido (string ou número)",
            details={"field": ".".join(name_path), "kind": kind},
            hint=f"Declare o campo '{'.'.join(name_path)}' como string não vazia (booleanos e nulos não são aceitos).",
        )

    return IdentityKey(kind=kind, name=name)


def index_documents(
    docs: Iterable[Document],
    *,
    kind_field: str = DEFAULT_KIND_FIELD,
    name_path: Sequence[str] = DEFAULT_NAME_PATH,
) -> Dict[IdentityKey, Document]:
    """
    Indexa uma coleção de documentos por identidade, preservando a ordem.

    Raises:
        IdentityError: Se algum documento não tiver identidade válida.
        DuplicateIdentityError: Se dois documentos compartilharem a mesma chave.
    """
    index: Dict[IdentityKey, Document] = {}
    for position, doc in enumerate(docs):
        key = identity_of(doc, kind_field=kind_field, name_path=name_path)
        if key in index:
            raise DuplicateIdentityError(
                message=f"Identidade duplicada: {key}",
                details={"kind": key.kind, "name": key.name, "position": position},
                hint="Cada documento de uma mesma coleção deve ter um par (kind, name) único.",
            )
        index[key] = doc
    return index


def _scalar_text(value: Any) -> Optional[str]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value
    return None
