# src/stratum/core/transforms/sequences.py
"""
Transform: PatchSequenceByIdentity

Diretiva de merge: habilita o merge por identidade de elemento na
sequência localizada em `path` para os documentos em escopo.

O Composer coleta estas diretivas antes do merge; durante a execução do
pipeline o transform não altera nenhum documento.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, List, Mapping

from stratum.core.config.settings import ComposerSettings, default_settings
from stratum.core.document.model import Document
from stratum.core.document.paths import FieldPath, parse_path
from stratum.core.exceptions import TransformSpecError

from .base import ALL_DOCUMENTS, TransformScope, reject_unknown, require_param
from .types import TransformKind


@dataclass(frozen=True)
class PatchSequenceByIdentity:
    path: FieldPath
    scope: TransformScope = ALL_DOCUMENTS
    settings: ComposerSettings = field(default_factory=default_settings, compare=False, repr=False)

    kind: ClassVar[TransformKind] = TransformKind.PATCH_SEQUENCE_BY_IDENTITY

    def run(self, documents: List[Document], ctx) -> List[Document]:
        return list(documents)

    @classmethod
    def from_spec(
        cls, params: Mapping[str, Any], *, scope: TransformScope, settings: ComposerSettings
    ) -> "PatchSequenceByIdentity":
        reject_unknown(params, frozenset({"path"}), cls.kind)
        raw_path = require_param(params, "path", cls.kind)
        try:
            path = parse_path(raw_path)
        except (ValueError, TypeError) as e:
            raise TransformSpecError(
                message="Parâmetro 'path' inválido",
                details={"kind": cls.kind.value, "path": repr(raw_path)},
            ) from e
        return cls(path=path, scope=scope, settings=settings)
