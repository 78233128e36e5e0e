# src/stratum/core/transforms/types.py
"""
Tipos canônicos do Transform Pipeline do Stratum.

Componentes principais:
    - TransformKind   → vocabulário declarativo de transforms (enum)
    - TransformStatus → estado final de um transform na composição
    - TransformResult → resultado imutável de um transform executado

Invariantes:
    - Enums possuem valores textuais canônicos (iguais aos usados nas
      declarações de overlay)
    - TransformResult é imutável e serializável

Limites explícitos:
    - Não executa transforms
    - Não contém lógica de domínio
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class TransformKind(str, Enum):
    """
    Vocabulário reconhecido de transforms.

    Os valores são exatamente os nomes aceitos no campo `kind` de uma
    declaração de overlay.
    """

    ADD_COMMON_LABEL = "AddCommonLabel"
    ADD_COMMON_ANNOTATION = "AddCommonAnnotation"
    SET_NAME_PREFIX = "SetNamePrefix"
    SET_NAME_SUFFIX = "SetNameSuffix"
    SET_FIELD = "SetField"
    SET_REPLICAS = "SetReplicas"
    PATCH_SEQUENCE_BY_IDENTITY = "PatchSequenceByIdentity"


class TransformStatus(str, Enum):
    """
    Estados finais de um transform dentro de uma composição.

    - APPLIED: ao menos um documento foi alterado
    - UNCHANGED: nenhum documento foi alterado (fora de escopo, já
      conforme, ou todos pulados)
    - DIRECTIVE: transform que só orienta o merge (sem efeito no pipeline)
    """

    APPLIED = "applied"
    UNCHANGED = "unchanged"
    DIRECTIVE = "directive"


@dataclass(frozen=True)
class TransformResult:
    """Resultado imutável de um transform executado pelo pipeline."""

    index: int
    kind: TransformKind
    status: TransformStatus
    documents_in_scope: int
    documents_changed: int
    diagnostics: int
    summary: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "kind": self.kind.value,
            "status": self.status.value,
            "documents_in_scope": self.documents_in_scope,
            "documents_changed": self.documents_changed,
            "diagnostics": self.diagnostics,
            "summary": self.summary,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TransformResult":
        return cls(
            index=int(data["index"]),
            kind=TransformKind(data["kind"]),
            status=TransformStatus(data["status"]),
            documents_in_scope=int(data.get("documents_in_scope", 0)),
            documents_changed=int(data.get("documents_changed", 0)),
            diagnostics=int(data.get("diagnostics", 0)),
            summary=str(data.get("summary", "")),
        )
