# src/stratum/core/transforms/names.py
"""
Transforms: SetNamePrefix / SetNameSuffix
=========================================

Renomeia documentos em escopo e reescreve todas as referências por nome
dentro do result set, para que continuem válidas após a renomeação.

Algoritmo (duas passadas, atômico por composição):
--------------------------------------------------
1. Coleta: calcula o mapa de renomeação `IdentityKey -> novo nome` para
   todos os documentos em escopo, antes de qualquer escrita.
2. Reescrita: para cada documento (em escopo ou não), aplica o novo nome
   próprio e reescreve cada referência declarada na tabela
   `references` das settings cujo alvo esteja no mapa.

Referências:
------------
- Alvo renomeado            → reescrito
- Alvo no conjunto de entrada, não renomeado → mantido
- Alvo fora do conjunto de entrada (externo) → mantido, com diagnóstico
  `DANGLING_REFERENCE` (não fatal)
- Referência reescrita que não resolve no result set final →
  `DanglingReferenceError` (fatal)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Mapping, Set, Tuple

from stratum.core.config.settings import ComposerSettings, default_settings
from stratum.core.diagnostics import dangling_reference
from stratum.core.document.identity import IdentityKey, identity_of
from stratum.core.document.model import Document, clone_node
from stratum.core.document.paths import format_path, iter_parents, resolve_parent
from stratum.core.exceptions import DanglingReferenceError

from .base import ALL_DOCUMENTS, TransformScope, reject_unknown, require_text
from .types import TransformKind

_PARAMS = frozenset({"value"})


class _NameTransform:
    value: str
    scope: TransformScope
    settings: ComposerSettings
    kind: ClassVar[TransformKind]

    def rename(self, name: str) -> str:
        raise NotImplementedError

    def identity(self, doc: Document) -> IdentityKey:
        return identity_of(doc, kind_field=self.settings.kind_field, name_path=self.settings.name_path)

    def run(self, documents: List[Document], ctx) -> List[Document]:
        """
        Renomeia os documentos em escopo e reescreve as referências a eles.

        A verificação final (`DanglingReferenceError`) é uma guarda de
        invariante: renomeações são injetivas por kind e toda referência
        reescrita aponta para um nome produzido na passada 1, então
        nenhuma entrada válida a dispara. Ela existe para que uma
        regressão nesta lógica falhe alto em vez de produzir um result set
        com referências quebradas.
        """
        keys = [self.identity(doc) for doc in documents]
        known: Set[IdentityKey] = set(keys)

        # passada 1: mapa de renomeação
        renames: Dict[IdentityKey, str] = {
            key: self.rename(key.name) for key in keys if self.scope.matches(key)
        }

        # passada 2: nomes próprios + referências
        rewritten: List[Tuple[IdentityKey, IdentityKey, str]] = []
        out: List[Document] = []
        for doc, key in zip(documents, keys):
            if key not in renames and not self._has_references(doc):
                out.append(doc)
                continue
            body = clone_node(doc.body, max_depth=self.settings.max_depth)
            if key in renames:
                container, leaf = resolve_parent(body, self.settings.name_path)
                container[leaf] = renames[key]
            rewritten.extend(self._rewrite_references(body, key, renames, known, ctx))
            out.append(Document(body=body))

        final = {self.identity(doc) for doc in out}
        for referrer, target, path in rewritten:
            if target not in final:
                raise DanglingReferenceError(
                    message=f"Referência reescrita não resolve: {target}",
                    details={
                        "referrer": str(referrer),
                        "target_kind": target.kind,
                        "target_name": target.name,
                        "path": path,
                        "transform": self.kind.value,
                    },
                    hint="Verifique colisões de nome ou escopos que excluem o alvo da referência.",
                )
        return out

    def _has_references(self, doc: Document) -> bool:
        for ref in self.settings.references:
            for path in ref.paths:
                for parent in iter_parents(doc.body, path):
                    if isinstance(parent.get(path[-1]), str):
                        return True
        return False

    def _rewrite_references(
        self,
        body: dict,
        referrer: IdentityKey,
        renames: Mapping[IdentityKey, str],
        known: Set[IdentityKey],
        ctx,
    ) -> List[Tuple[IdentityKey, IdentityKey, str]]:
        rewritten: List[Tuple[IdentityKey, IdentityKey, str]] = []
        for ref in self.settings.references:
            for path in ref.paths:
                leaf = path[-1]
                for parent in iter_parents(body, path):
                    value = parent.get(leaf)
                    if not isinstance(value, str):
                        continue
                    target = IdentityKey(kind=ref.kind, name=value)
                    if target in renames:
                        parent[leaf] = renames[target]
                        rewritten.append(
                            (referrer, IdentityKey(kind=ref.kind, name=renames[target]), format_path(path))
                        )
                    elif target not in known:
                        diagnostic = dangling_reference(
                            referrer=str(referrer),
                            target_kind=ref.kind,
                            target_name=value,
                            path=format_path(path),
                        )
                        # mesma referência externa vista por outro transform de nome
                        if diagnostic not in ctx.diagnostics:
                            ctx.add_diagnostic(diagnostic)
        return rewritten

    @classmethod
    def from_spec(cls, params: Mapping[str, Any], *, scope: TransformScope, settings: ComposerSettings):
        reject_unknown(params, _PARAMS, cls.kind)
        return cls(value=require_text(params, "value", cls.kind), scope=scope, settings=settings)


@dataclass(frozen=True)
class SetNamePrefix(_NameTransform):
    """Prefixa o nome dos documentos em escopo."""

    value: str
    scope: TransformScope = ALL_DOCUMENTS
    settings: ComposerSettings = field(default_factory=default_settings, compare=False, repr=False)

    kind: ClassVar[TransformKind] = TransformKind.SET_NAME_PREFIX

    def rename(self, name: str) -> str:
        return f"{self.value}{name}"


@dataclass(frozen=True)
class SetNameSuffix(_NameTransform):
    """Sufixa o nome dos documentos em escopo."""

    value: str
    scope: TransformScope = ALL_DOCUMENTS
    settings: ComposerSettings = field(default_factory=default_settings, compare=False, repr=False)

    kind: ClassVar[TransformKind] = TransformKind.SET_NAME_SUFFIX

    def rename(self, name: str) -> str:
        return f"{name}{self.value}"
