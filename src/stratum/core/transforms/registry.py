# src/stratum/core/transforms/registry.py
"""
Registro de tipos de Transform.

Este módulo define o `TransformRegistry`, responsável por associar cada
`TransformKind` a uma fábrica e por construir transforms a partir das
declarações de overlay (`{"kind": ..., "scope": {...}, **params}`).

Decisões arquiteturais:
    - O vocabulário é fechado: kinds desconhecidos são erro fatal
      (`TransformSpecError`), detectado antes de qualquer merge
    - Registrar duas fábricas para o mesmo kind é erro de configuração
      (`DuplicateTransformKindError`)
    - Fábricas recebem as settings da composição, de modo que field
      specs e tabela de referências são resolvidos uma única vez

Invariantes:
    - `kinds()` reflete exatamente a ordem de registro
    - `build` nunca devolve um transform parcialmente validado

Limites explícitos:
    - Não executa transforms
    - Não decide a ordem de execução (é a ordem declarada no overlay)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping

from stratum.core.config.settings import ComposerSettings, default_settings
from stratum.core.exceptions import TransformSpecError

from .base import Transform, TransformScope
from .fields import SetField, SetReplicas
from .labels import AddCommonAnnotation, AddCommonLabel
from .names import SetNamePrefix, SetNameSuffix
from .sequences import PatchSequenceByIdentity
from .types import TransformKind

TransformFactory = Callable[..., Transform]


class DuplicateTransformKindError(ValueError):
    """Duas fábricas registradas para o mesmo `TransformKind`."""


@dataclass
class TransformRegistry:
    """Registro canônico `TransformKind -> fábrica`."""

    _factories: Dict[TransformKind, TransformFactory] = field(default_factory=dict, init=False, repr=False)
    _order: List[TransformKind] = field(default_factory=list, init=False, repr=False)

    def register(self, kind: TransformKind, factory: TransformFactory) -> None:
        kind = TransformKind(kind)
        if kind in self._factories:
            raise DuplicateTransformKindError(f"Duplicate transform kind: {kind.value}")
        self._factories[kind] = factory
        self._order.append(kind)

    def kinds(self) -> List[TransformKind]:
        return list(self._order)

    def build(self, spec: Any, settings: ComposerSettings | None = None) -> Transform:
        """
        Constrói um transform a partir de um objeto já pronto ou de uma
        declaração de overlay.

        Raises:
            TransformSpecError: kind ausente/desconhecido ou parâmetros inválidos.
        """
        if isinstance(spec, Transform) and not isinstance(spec, Mapping):
            return spec
        if not isinstance(spec, Mapping):
            raise TransformSpecError(
                message="Declaração de transform deve ser um mapeamento",
                details={"received": type(spec).__name__},
            )

        raw_kind = spec.get("kind")
        try:
            kind = TransformKind(raw_kind)
        except ValueError:
            raise TransformSpecError(
                message=f"Transform desconhecido: {raw_kind!r}",
                details={"kind": raw_kind, "known": [k.value for k in self._order]},
                hint="Use um dos kinds suportados pelo registry.",
            ) from None

        factory = self._factories.get(kind)
        if factory is None:
            raise TransformSpecError(
                message=f"Transform não registrado: {kind.value}",
                details={"kind": kind.value, "known": [k.value for k in self._order]},
            )

        params = {k: v for k, v in spec.items() if k not in ("kind", "scope")}
        scope = TransformScope.from_spec(spec.get("scope"))
        return factory(params, scope=scope, settings=settings or default_settings())


def default_registry() -> TransformRegistry:
    registry = TransformRegistry()
    registry.register(TransformKind.ADD_COMMON_LABEL, AddCommonLabel.from_spec)
    registry.register(TransformKind.ADD_COMMON_ANNOTATION, AddCommonAnnotation.from_spec)
    registry.register(TransformKind.SET_NAME_PREFIX, SetNamePrefix.from_spec)
    registry.register(TransformKind.SET_NAME_SUFFIX, SetNameSuffix.from_spec)
    registry.register(TransformKind.SET_FIELD, SetField.from_spec)
    registry.register(TransformKind.SET_REPLICAS, SetReplicas.from_spec)
    registry.register(TransformKind.PATCH_SEQUENCE_BY_IDENTITY, PatchSequenceByIdentity.from_spec)
    return registry
