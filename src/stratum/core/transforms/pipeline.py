# src/stratum/core/transforms/pipeline.py
"""
Executor do Transform Pipeline.

Executa os transforms de um overlay, na ordem declarada, sobre o result
set inteiro (pós-merge), registrando um `TransformResult` por transform
no `CompositionContext`.

Decisões arquiteturais:
    - A ordem de execução é exatamente a ordem declarada (sem planner)
    - O pipeline não converte erros fatais: eles abortam a composição
    - Falhas recuperáveis já chegam como diagnósticos (ver
      `DocumentTransform.run`); o pipeline apenas contabiliza

Invariantes:
    - Cada transform devolve uma lista com o mesmo tamanho da entrada
    - O result set de entrada nunca é mutado
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from stratum.core.config.settings import ComposerSettings, default_settings
from stratum.core.document.identity import identity_of
from stratum.core.document.model import Document

from .base import Transform
from .types import TransformKind, TransformResult, TransformStatus


class TransformPipeline:
    """Pipeline ordenado de transforms de uma camada."""

    def __init__(self, transforms: Sequence[Transform], *, settings: Optional[ComposerSettings] = None):
        self.transforms: List[Transform] = list(transforms)
        self.settings = settings or default_settings()

    def run(self, documents: Sequence[Document], ctx) -> List[Document]:
        current = list(documents)
        for index, transform in enumerate(self.transforms):
            kind = TransformKind(transform.kind)
            before = len(ctx.diagnostics)
            ctx.log(stage="transform", level="info", message=f"Executando {kind.value}", index=index)

            out = transform.run(list(current), ctx)
            if not isinstance(out, list) or len(out) != len(current):
                raise TypeError(f"Transform {kind.value} must return a list with one document per input")

            in_scope = sum(1 for doc in current if transform.scope.matches(self._identity(doc)))
            changed = sum(1 for old, new in zip(current, out) if old != new)

            if kind == TransformKind.PATCH_SEQUENCE_BY_IDENTITY:
                status = TransformStatus.DIRECTIVE
                summary = "merge directive (applied before merge)"
            elif changed:
                status = TransformStatus.APPLIED
                summary = f"{changed} of {in_scope} documents changed"
            else:
                status = TransformStatus.UNCHANGED
                summary = f"no changes ({in_scope} documents in scope)"

            ctx.record_transform(
                TransformResult(
                    index=index,
                    kind=kind,
                    status=status,
                    documents_in_scope=in_scope,
                    documents_changed=changed,
                    diagnostics=len(ctx.diagnostics) - before,
                    summary=summary,
                )
            )
            current = out
        return current

    def _identity(self, doc: Document):
        return identity_of(doc, kind_field=self.settings.kind_field, name_path=self.settings.name_path)
