# src/stratum/core/config/settings.py
"""
Settings materializadas do composer.

Este módulo converte a configuração resolvida (dict, após deep-merge)
em estruturas imutáveis e tipadas consumidas pelo engine.

Decisões arquiteturais:
    - Settings são frozen dataclasses: podem ser compartilhadas entre
      composições concorrentes sem sincronização
    - A validação acontece uma vez, na materialização
    - `to_config()` devolve o dict canônico usado para hashing

Invariantes:
    - `ComposerSettings.from_config(DEFAULT_CONFIG)` é sempre válido
    - Paths são armazenados já segmentados (tuplas)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Mapping, Optional, Sequence, Tuple

from stratum.core.document.paths import FieldPath, format_path, parse_path

from .defaults import DEFAULT_CONFIG
from .errors import InvalidSettingsError
from .hashing import compute_config_hash
from .merge import deep_merge

SEQUENCE_STRATEGIES = ("replace", "identity")


@dataclass(frozen=True)
class FieldSpec:
    """
    Local onde um transform escreve, opcionalmente restrito a kinds.

    `anchor`, quando presente, é um prefixo de `path` que precisa existir
    no documento; abaixo dele `create` cria os mapas ausentes.
    """

    path: FieldPath
    kinds: Optional[FrozenSet[str]] = None
    create: bool = False
    anchor: Optional[FieldPath] = None

    def applies_to(self, kind: Any) -> bool:
        return self.kinds is None or kind in self.kinds

    @property
    def existing(self) -> int:
        """Quantos segmentos iniciais de `path` nunca são criados."""
        return len(self.anchor) if self.anchor is not None else 0

    def to_config(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"path": format_path(self.path), "create": self.create}
        if self.kinds is not None:
            data["kinds"] = sorted(self.kinds)
        if self.anchor is not None:
            data["anchor"] = format_path(self.anchor)
        return data


@dataclass(frozen=True)
class ReferenceSpec:
    """Paths (em qualquer documento) que referenciam documentos de `kind` por nome."""

    kind: str
    paths: Tuple[FieldPath, ...]

    def to_config(self) -> Dict[str, Any]:
        return {"kind": self.kind, "paths": [format_path(p) for p in self.paths]}


@dataclass(frozen=True)
class ComposerSettings:
    """
    Settings imutáveis do composer (uma instância por configuração resolvida).

    Campos:
        - max_depth: limite de aninhamento de documentos
        - kind_field / name_path: onde ler a identidade
        - sequence_strategy: "replace" (padrão) ou "identity"
        - identity_sequence_paths: paths com merge por identidade habilitado
        - element_key_fields: campos que identificam elementos de sequência
        - label_specs / annotation_specs: field specs de metadados comuns
        - references: tabela de referências por nome
        - replicas_path: path usado por `SetReplicas`
    """

    max_depth: int = 100
    kind_field: str = "kind"
    name_path: FieldPath = ("metadata", "name")
    sequence_strategy: str = "replace"
    identity_sequence_paths: FrozenSet[FieldPath] = frozenset()
    element_key_fields: Tuple[str, ...] = ("name",)
    label_specs: Tuple[FieldSpec, ...] = ()
    annotation_specs: Tuple[FieldSpec, ...] = ()
    references: Tuple[ReferenceSpec, ...] = ()
    replicas_path: FieldPath = ("spec", "replicas")
    source: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "ComposerSettings":
        """
        Materializa settings a partir de uma configuração resolvida.

        A configuração recebida é aplicada sobre `DEFAULT_CONFIG`, de modo
        que dicts parciais são aceitos.

        Raises:
            InvalidSettingsError: Se algum valor estiver fora do domínio.
            ConfigTypeConflictError: Se o override conflitar com os defaults.
        """
        cfg = deep_merge(DEFAULT_CONFIG, dict(config))
        try:
            document = cfg["document"]
            identity = cfg["identity"]
            merge = cfg["merge"]

            max_depth = int(document["max_depth"])
            if max_depth < 1:
                raise InvalidSettingsError("document.max_depth deve ser >= 1")

            strategy = str(merge["sequence_strategy"])
            if strategy not in SEQUENCE_STRATEGIES:
                raise InvalidSettingsError(
                    f"merge.sequence_strategy inválida: {strategy!r} "
                    f"(esperado um de {', '.join(SEQUENCE_STRATEGIES)})"
                )

            key_fields = tuple(str(k) for k in merge["element_key_fields"])
            if not key_fields:
                raise InvalidSettingsError("merge.element_key_fields não pode ser vazio")

            return cls(
                max_depth=max_depth,
                kind_field=str(identity["kind_field"]),
                name_path=parse_path(identity["name_path"]),
                sequence_strategy=strategy,
                identity_sequence_paths=frozenset(
                    parse_path(p) for p in merge["identity_sequence_paths"]
                ),
                element_key_fields=key_fields,
                label_specs=_field_specs(cfg["labels"]["field_specs"], "labels"),
                annotation_specs=_field_specs(cfg["annotations"]["field_specs"], "annotations"),
                references=_reference_specs(cfg["references"]),
                replicas_path=parse_path(cfg["fields"]["replicas_path"]),
                source=cfg,
            )
        except InvalidSettingsError:
            raise
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidSettingsError(f"Configuração inválida para o composer: {e}") from e

    def to_config(self) -> Dict[str, Any]:
        """Representação canônica (dict serializável) destas settings."""
        return {
            "document": {"max_depth": self.max_depth},
            "identity": {
                "kind_field": self.kind_field,
                "name_path": format_path(self.name_path),
            },
            "merge": {
                "sequence_strategy": self.sequence_strategy,
                "identity_sequence_paths": sorted(format_path(p) for p in self.identity_sequence_paths),
                "element_key_fields": list(self.element_key_fields),
            },
            "labels": {"field_specs": [s.to_config() for s in self.label_specs]},
            "annotations": {"field_specs": [s.to_config() for s in self.annotation_specs]},
            "references": [r.to_config() for r in self.references],
            "fields": {"replicas_path": format_path(self.replicas_path)},
        }

    def config_hash(self) -> str:
        return compute_config_hash(self.to_config())


def default_settings() -> ComposerSettings:
    return ComposerSettings.from_config({})


def _field_specs(raw: Sequence[Mapping[str, Any]], section: str) -> Tuple[FieldSpec, ...]:
    specs = []
    for i, item in enumerate(raw):
        if not isinstance(item, Mapping) or "path" not in item:
            raise InvalidSettingsError(f"{section}.field_specs[{i}] deve conter 'path'")
        path = parse_path(item["path"])
        kinds = item.get("kinds")
        anchor = parse_path(item["anchor"]) if item.get("anchor") is not None else None
        if anchor is not None and (len(anchor) >= len(path) or path[: len(anchor)] != anchor):
            raise InvalidSettingsError(
                f"{section}.field_specs[{i}].anchor deve ser um prefixo próprio de '{format_path(path)}'"
            )
        specs.append(
            FieldSpec(
                path=path,
                kinds=frozenset(str(k) for k in kinds) if kinds is not None else None,
                create=bool(item.get("create", False)),
                anchor=anchor,
            )
        )
    return tuple(specs)


def _reference_specs(raw: Sequence[Mapping[str, Any]]) -> Tuple[ReferenceSpec, ...]:
    specs = []
    for i, item in enumerate(raw):
        if not isinstance(item, Mapping) or "kind" not in item:
            raise InvalidSettingsError(f"references[{i}] deve conter 'kind'")
        specs.append(
            ReferenceSpec(
                kind=str(item["kind"]),
                paths=tuple(parse_path(p) for p in item.get("paths", []) or []),
            )
        )
    return tuple(specs)
