# src/stratum/core/transforms/labels.py
"""
Transforms: AddCommonLabel / AddCommonAnnotation
================================================

Injeção de metadados comuns em todos os documentos em escopo.

Responsabilidade:
-----------------
- Escrever `key: value` em cada field spec aplicável ao kind do documento
  (`labels.field_specs` / `annotations.field_specs` das settings)
- Para labels, escrever também em selectors e templates, de modo que um
  workload continue selecionando os objetos que gerencia

Regras:
-------
- Last write wins: um transform posterior com a mesma chave sobrescreve
- Chaves não afetadas mantêm a ordem de inserção
- Com `create: false`, o mapa de destino só é escrito se o pai existir
- Com `anchor`, o prefixo precisa existir; abaixo dele os mapas ausentes
  são criados (um template sem `metadata` também recebe os labels)
- Um destino que exista mas não seja mapeamento é deixado intacto

Exemplo de overlay:
-------------------
    transforms:
      - kind: AddCommonLabel
        key: stage
        value: prod
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping, Tuple

from stratum.core.config.settings import ComposerSettings, FieldSpec, default_settings
from stratum.core.document.identity import IdentityKey
from stratum.core.document.model import Document, clone_node
from stratum.core.document.paths import iter_parents

from .base import ALL_DOCUMENTS, DocumentTransform, TransformScope, reject_unknown, require_scalar, require_text
from .types import TransformKind

_PARAMS = frozenset({"key", "value"})


class _CommonMetadataTransform(DocumentTransform):
    key: str
    value: Any

    def field_specs(self) -> Tuple[FieldSpec, ...]:
        raise NotImplementedError

    def apply(self, doc: Document, key: IdentityKey, ctx) -> Document:
        body = clone_node(doc.body, max_depth=self.settings.max_depth)
        for spec in self.field_specs():
            if not spec.applies_to(key.kind):
                continue
            leaf = spec.path[-1]
            for parent in list(iter_parents(body, spec.path, create=spec.create, existing=spec.existing)):
                target = parent.get(leaf)
                if target is None:
                    target = {}
                    parent[leaf] = target
                if isinstance(target, dict):
                    target[self.key] = self.value
        return Document(body=body)

    @classmethod
    def from_spec(cls, params: Mapping[str, Any], *, scope: TransformScope, settings: ComposerSettings):
        reject_unknown(params, _PARAMS, cls.kind)
        return cls(
            key=require_text(params, "key", cls.kind),
            value=require_scalar(params, "value", cls.kind),
            scope=scope,
            settings=settings,
        )


@dataclass(frozen=True)
class AddCommonLabel(_CommonMetadataTransform):
    """Adiciona um label comum em metadata, selectors e templates."""

    key: str
    value: Any
    scope: TransformScope = ALL_DOCUMENTS
    settings: ComposerSettings = field(default_factory=default_settings, compare=False, repr=False)

    kind: ClassVar[TransformKind] = TransformKind.ADD_COMMON_LABEL

    def field_specs(self) -> Tuple[FieldSpec, ...]:
        return self.settings.label_specs


@dataclass(frozen=True)
class AddCommonAnnotation(_CommonMetadataTransform):
    """Adiciona uma annotation comum em metadata e templates."""

    key: str
    value: Any
    scope: TransformScope = ALL_DOCUMENTS
    settings: ComposerSettings = field(default_factory=default_settings, compare=False, repr=False)

    kind: ClassVar[TransformKind] = TransformKind.ADD_COMMON_ANNOTATION

    def field_specs(self) -> Tuple[FieldSpec, ...]:
        return self.settings.annotation_specs
