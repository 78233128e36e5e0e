# src/stratum/core/transforms/base.py
"""
Contrato canônico de Transform do Stratum.

Um Transform é uma operação declarativa, pura e sensível à ordem,
aplicada ao result set inteiro depois do merge.

Responsabilidades de um Transform:
    - operar exclusivamente sobre clones (nunca mutar o Document recebido)
    - respeitar seu escopo (kinds e/ou names), quando declarado
    - registrar condições não fatais via `CompositionContext`

Princípios fundamentais:
    - Transforms não conhecem o Composer nem a ordem dos demais
    - Conformidade é garantida por duck typing (@runtime_checkable)
    - Falhas recuperáveis (`RecoverableError`) viram diagnóstico e o
      documento é mantido como estava

Invariantes:
    - `run` devolve exatamente um documento por documento recebido,
      na mesma ordem
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, FrozenSet, List, Mapping, Optional, Protocol, runtime_checkable

from stratum.core.config.settings import ComposerSettings
from stratum.core.diagnostics import from_exception
from stratum.core.document.identity import IdentityKey, identity_of
from stratum.core.document.model import Document
from stratum.core.exceptions import RecoverableError, TransformSpecError

from .types import TransformKind

if TYPE_CHECKING:  # pragma: no cover
    from stratum.core.composer.context import CompositionContext


@dataclass(frozen=True)
class TransformScope:
    """
    Filtro de escopo de um transform.

    `None` em um eixo significa "todos". Um documento está em escopo
    quando satisfaz os dois eixos.
    """

    kinds: Optional[FrozenSet[str]] = None
    names: Optional[FrozenSet[str]] = None

    def matches(self, key: IdentityKey) -> bool:
        if self.kinds is not None and key.kind not in self.kinds:
            return False
        if self.names is not None and key.name not in self.names:
            return False
        return True

    @property
    def is_global(self) -> bool:
        return self.kinds is None and self.names is None

    @classmethod
    def from_spec(cls, raw: Any) -> "TransformScope":
        if raw is None:
            return ALL_DOCUMENTS
        if not isinstance(raw, Mapping):
            raise TransformSpecError(
                message="scope deve ser um mapeamento",
                details={"received": type(raw).__name__},
            )
        unknown = set(raw) - {"kinds", "names"}
        if unknown:
            raise TransformSpecError(
                message="Chaves de scope desconhecidas",
                details={"unknown": sorted(unknown)},
                hint="Use apenas 'kinds' e/ou 'names'.",
            )
        return cls(
            kinds=_str_set(raw.get("kinds"), "scope.kinds"),
            names=_str_set(raw.get("names"), "scope.names"),
        )

    def to_dict(self) -> dict:
        data = {}
        if self.kinds is not None:
            data["kinds"] = sorted(self.kinds)
        if self.names is not None:
            data["names"] = sorted(self.names)
        return data


ALL_DOCUMENTS = TransformScope()


@runtime_checkable
class Transform(Protocol):
    """
    Contrato canônico de um Transform.

    Atributos obrigatórios:
        - kind: tipo declarativo (`TransformKind`)
        - scope: filtro de escopo (`TransformScope`)

    Limites explícitos:
        - Não adiciona nem remove documentos
        - Não decide a ordem de execução (responsabilidade do pipeline)
    """

    kind: TransformKind
    scope: TransformScope

    def run(self, documents: List[Document], ctx: "CompositionContext") -> List[Document]:
        """Aplica o transform ao result set e devolve o novo result set."""
        ...


class DocumentTransform:
    """
    Base para transforms que operam documento a documento.

    Subclasses implementam `apply(doc, key, ctx)`; esta base cuida do
    escopo e da conversão de `RecoverableError` em diagnóstico.
    """

    kind: TransformKind
    scope: TransformScope
    settings: ComposerSettings

    def run(self, documents: List[Document], ctx: "CompositionContext") -> List[Document]:
        out: List[Document] = []
        for doc in documents:
            key = self.identity(doc)
            if not self.scope.matches(key):
                out.append(doc)
                continue
            try:
                out.append(self.apply(doc, key, ctx))
            except RecoverableError as exc:
                diagnostic = from_exception(exc, transform=self.kind.value)
                diagnostic.details.setdefault("identity", str(key))
                ctx.add_diagnostic(diagnostic)
                out.append(doc)
        return out

    def apply(self, doc: Document, key: IdentityKey, ctx: "CompositionContext") -> Document:
        raise NotImplementedError

    def identity(self, doc: Document) -> IdentityKey:
        return identity_of(doc, kind_field=self.settings.kind_field, name_path=self.settings.name_path)


# ---------------------------------------------------------------------------
# Validação de parâmetros declarativos
# ---------------------------------------------------------------------------

def require_param(params: Mapping[str, Any], name: str, kind: TransformKind) -> Any:
    if name not in params:
        raise TransformSpecError(
            message=f"Parâmetro obrigatório ausente: {name}",
            details={"kind": kind.value, "param": name},
        )
    return params[name]


def require_text(params: Mapping[str, Any], name: str, kind: TransformKind, *, allow_empty: bool = False) -> str:
    value = require_param(params, name, kind)
    if not isinstance(value, str) or (not allow_empty and not value):
        raise TransformSpecError(
            message=f"Parâmetro '{name}' deve ser string não vazia",
            details={"kind": kind.value, "param": name, "received": type(value).__name__},
        )
    return value


def require_scalar(params: Mapping[str, Any], name: str, kind: TransformKind) -> Any:
    value = require_param(params, name, kind)
    if isinstance(value, (dict, list, tuple)):
        raise TransformSpecError(
            message=f"Parâmetro '{name}' deve ser escalar",
            details={"kind": kind.value, "param": name, "received": type(value).__name__},
        )
    return value


def reject_unknown(params: Mapping[str, Any], allowed: FrozenSet[str], kind: TransformKind) -> None:
    unknown = set(params) - allowed
    if unknown:
        raise TransformSpecError(
            message="Parâmetros desconhecidos para o transform",
            details={"kind": kind.value, "unknown": sorted(unknown)},
        )


def _str_set(raw: Any, label: str) -> Optional[FrozenSet[str]]:
    if raw is None:
        return None
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, (list, tuple)) or not all(isinstance(v, str) for v in raw):
        raise TransformSpecError(
            message=f"{label} deve ser uma lista de strings",
            details={"received": type(raw).__name__},
        )
    return frozenset(raw)
