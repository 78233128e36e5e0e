# src/stratum/core/document/model.py
"""
Document Model do Stratum.

Este módulo define a representação em memória de um documento de
configuração: uma árvore de nós onde cada nó é

    - Scalar: str | int | float | bool | None
    - Mapping: `dict` com chaves `str` únicas e ordem de inserção estável
    - Sequence: `list` ordenada

O `Document` embrulha o mapa raiz (`body`) e expõe a identidade derivada
(`kind`, `name`, `identity`).

Princípios fundamentais:
    - Documentos são value objects: nenhuma operação do engine muta um
      Document recebido; merges e transforms sempre operam sobre clones
    - Igualdade é estrutural
    - Toda travessia recursiva é limitada por `max_depth`

Invariantes:
    - O `body` de um Document é sempre um `dict`
    - Após `parse_document`, todos os nós pertencem aos tipos acima

Limites explícitos:
    - Não lê arquivos nem interpreta YAML/JSON (responsabilidade do Loader)
    - Não valida schemas de recursos específicos
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Tuple

from stratum.core.exceptions import DepthExceededError, FormatError

DEFAULT_MAX_DEPTH = 100

_SCALAR_TYPES = (str, int, float, bool, type(None))


@dataclass(frozen=True)
class Document:
    """
    Documento de configuração imutável por contrato.

    O `body` é um `dict` comum; a imutabilidade é garantida pelo engine,
    que nunca muta um Document recebido e sempre constrói novos.

    `kind` e `name` leem os campos padrão (`kind`, `metadata.name`).
    Quem compõe com campos de identidade configurados usa
    `identity(kind_field=..., name_path=...)` ou
    `stratum.core.document.identity.identity_of`.
    """

    body: dict

    @property
    def kind(self) -> Optional[Any]:
        return self.body.get("kind")

    @property
    def name(self) -> Optional[Any]:
        metadata = self.body.get("metadata")
        if isinstance(metadata, dict):
            return metadata.get("name")
        return None

    def identity(self, *, kind_field: str = "kind", name_path: Sequence[str] = ("metadata", "name")):
        from stratum.core.document.identity import identity_of

        return identity_of(self, kind_field=kind_field, name_path=name_path)

    def to_dict(self) -> dict:
        """Cópia profunda e independente do corpo do documento."""
        return clone_node(self.body)


def parse_document(raw: Any, *, max_depth: int = DEFAULT_MAX_DEPTH) -> Document:
    """
    Converte uma estrutura bruta (já desserializada) em `Document`.

    A estrutura é validada e copiada: o Document resultante não compartilha
    nenhum nó mutável com `raw`.

    Regras de validação (v1):
        - A raiz deve ser um mapeamento
        - Chaves de mapeamento devem ser `str`
        - Valores devem ser escalares, mapeamentos ou sequências
          (`tuple` é aceita e normalizada como sequência)
        - Profundidade máxima: `max_depth`

    Duplicidade de chaves não é observável em um `dict`; ela é detectada
    pelo Loader no momento da desserialização (também como `FormatError`).

    Args:
        raw (Any): Estrutura bruta produzida por um Loader.
        max_depth (int): Limite de aninhamento.

    Returns:
        Document: Documento validado e independente de `raw`.

    Raises:
        FormatError: Se a estrutura for malformada.
        DepthExceededError: Se o aninhamento exceder `max_depth`.
    """
    if isinstance(raw, Document):
        return clone_document(raw, max_depth=max_depth)
    if not isinstance(raw, Mapping):
        raise FormatError(
            message="Raiz do documento deve ser um mapeamento",
            details={"received": type(raw).__name__},
            hint="Cada documento deve ser um objeto chave-valor no nível raiz.",
        )
    return Document(body=_parse_node(raw, (), 0, max_depth))


def clone_document(doc: Document, *, max_depth: int = DEFAULT_MAX_DEPTH) -> Document:
    """Cópia profunda e independente de um Document (com guarda de profundidade)."""
    return Document(body=clone_node(doc.body, max_depth=max_depth))


def clone_node(node: Any, *, max_depth: int = DEFAULT_MAX_DEPTH, _depth: int = 0) -> Any:
    if _depth > max_depth:
        raise DepthExceededError(
            message="Profundidade máxima de documento excedida",
            details={"max_depth": max_depth},
        )
    if isinstance(node, dict):
        return {k: clone_node(v, max_depth=max_depth, _depth=_depth + 1) for k, v in node.items()}
    if isinstance(node, list):
        return [clone_node(v, max_depth=max_depth, _depth=_depth + 1) for v in node]
    return node


def node_type(node: Any) -> str:
    """Nome canônico do tipo de nó: mapping, sequence ou scalar."""
    if isinstance(node, dict):
        return "mapping"
    if isinstance(node, list):
        return "sequence"
    return "scalar"


def _parse_node(node: Any, path: Tuple[Any, ...], depth: int, max_depth: int) -> Any:
    if depth > max_depth:
        raise DepthExceededError(
            message="Profundidade máxima de documento excedida",
            details={"max_depth": max_depth, "path": ".".join(str(p) for p in path[:10])},
            hint="Verifique se a entrada não é cíclica ou gerada de forma patológica.",
        )

    if isinstance(node, Mapping):
        out = {}
        for key, value in node.items():
            if not isinstance(key, str):
                raise FormatError(
                    message="Chave de mapeamento deve ser string",
                    details={
                        "path": ".".join(str(p) for p in path),
                        "key": repr(key),
                        "key_type": type(key).__name__,
                    },
                )
            out[key] = _parse_node(value, path + (key,), depth + 1, max_depth)
        return out

    if isinstance(node, (list, tuple)):
        return [_parse_node(v, path + (i,), depth + 1, max_depth) for i, v in enumerate(node)]

    if isinstance(node, _SCALAR_TYPES):
        return node

    raise FormatError(
        message="Tipo de nó não suportado no documento",
        details={
            "path": ".".join(str(p) for p in path),
            "type": type(node).__name__,
        },
        hint="Documentos aceitam apenas escalares, mapeamentos e sequências.",
    )
