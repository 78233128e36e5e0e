# src/stratum/core/transforms/fields.py
"""
Transforms: SetField / SetReplicas
==================================

Sobrescrita pontual de um campo escalar em documentos em escopo.

Regras:
-------
- O path é estrito: cada segmento intermediário precisa existir
  (segmentos numéricos indexam sequências)
- Sem `create`, o campo final também precisa existir
- Com `create`, apenas o campo final pode ser criado
- Um documento sem o shape exigido levanta `PathNotFoundError`: o
  pipeline registra `PATH_NOT_FOUND` e mantém o documento como estava

`SetReplicas` é `SetField` sobre o path de réplicas configurado
(`fields.replicas_path`, padrão `spec.replicas`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping

from stratum.core.config.settings import ComposerSettings, default_settings
from stratum.core.document.identity import IdentityKey
from stratum.core.document.model import Document, clone_node
from stratum.core.document.paths import FieldPath, format_path, parse_path, resolve_parent
from stratum.core.exceptions import PathNotFoundError, TransformSpecError

from .base import ALL_DOCUMENTS, DocumentTransform, TransformScope, reject_unknown, require_param, require_scalar
from .types import TransformKind


def set_scalar(body: dict, path: FieldPath, value: Any, *, create: bool = False) -> None:
    """Escreve `value` em `path` (mutação in-place sobre um clone)."""
    container, key = resolve_parent(body, path)
    if isinstance(container, dict) and key not in container and not create:
        raise PathNotFoundError(
            message="Campo inexistente no documento",
            details={"path": format_path(path), "missing": format_path(path)},
            hint="Declare o campo na base ou use 'create: true'.",
        )
    container[key] = value


@dataclass(frozen=True)
class SetField(DocumentTransform):
    """Sobrescreve um campo escalar em um path estrito."""

    path: FieldPath
    value: Any
    create: bool = False
    scope: TransformScope = ALL_DOCUMENTS
    settings: ComposerSettings = field(default_factory=default_settings, compare=False, repr=False)

    kind: ClassVar[TransformKind] = TransformKind.SET_FIELD

    def apply(self, doc: Document, key: IdentityKey, ctx) -> Document:
        body = clone_node(doc.body, max_depth=self.settings.max_depth)
        set_scalar(body, self.path, self.value, create=self.create)
        return Document(body=body)

    @classmethod
    def from_spec(cls, params: Mapping[str, Any], *, scope: TransformScope, settings: ComposerSettings) -> "SetField":
        reject_unknown(params, frozenset({"path", "value", "create"}), cls.kind)
        raw_path = require_param(params, "path", cls.kind)
        try:
            path = parse_path(raw_path)
        except (ValueError, TypeError) as e:
            raise TransformSpecError(
                message="Parâmetro 'path' inválido",
                details={"kind": cls.kind.value, "path": repr(raw_path)},
            ) from e
        create = params.get("create", False)
        if not isinstance(create, bool):
            raise TransformSpecError(
                message="Parâmetro 'create' deve ser booleano",
                details={"kind": cls.kind.value, "received": type(create).__name__},
            )
        return cls(
            path=path,
            value=require_scalar(params, "value", cls.kind),
            create=create,
            scope=scope,
            settings=settings,
        )


@dataclass(frozen=True)
class SetReplicas(DocumentTransform):
    """Define a contagem de réplicas de workloads em escopo."""

    count: int
    scope: TransformScope = ALL_DOCUMENTS
    settings: ComposerSettings = field(default_factory=default_settings, compare=False, repr=False)

    kind: ClassVar[TransformKind] = TransformKind.SET_REPLICAS

    def apply(self, doc: Document, key: IdentityKey, ctx) -> Document:
        body = clone_node(doc.body, max_depth=self.settings.max_depth)
        set_scalar(body, self.settings.replicas_path, self.count)
        return Document(body=body)

    @classmethod
    def from_spec(cls, params: Mapping[str, Any], *, scope: TransformScope, settings: ComposerSettings) -> "SetReplicas":
        reject_unknown(params, frozenset({"count"}), cls.kind)
        count = require_param(params, "count", cls.kind)
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise TransformSpecError(
                message="Parâmetro 'count' deve ser inteiro >= 0",
                details={"kind": cls.kind.value, "received": repr(count)},
            )
        return cls(count=count, scope=scope, settings=settings)
