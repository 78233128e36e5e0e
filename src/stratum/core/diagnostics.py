"""
Stratum — Canonical Diagnostic Structures (v1)

Este módulo define o padrão canônico de diagnósticos não fatais do Stratum.
Diagnósticos acompanham o ResultSet devolvido ao chamador e fazem parte do
contrato operacional da composição, devendo ser:

- explícitos
- serializáveis
- rastreáveis
- acionáveis

Um diagnóstico nunca interrompe a composição: condições fatais são
exceções tipadas (ver `stratum.core.exceptions`).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from stratum.core.exceptions import StratumException


class Severity(str, Enum):
    """Severidade de um diagnóstico (valores textuais canônicos)."""

    INFO = "info"
    WARNING = "warning"


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Diagnostic:
    """
    Payload canônico de diagnóstico do Stratum.

    Campos:
    - type: código estável do diagnóstico (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes (identidade, path, tipos)
    - severity: `Severity.WARNING` por padrão
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    severity: Severity = Severity.WARNING
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do diagnóstico."""
        data = asdict(self)
        data["severity"] = self.severity.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Diagnostic":
        return cls(
            type=str(data["type"]),
            message=str(data.get("message", "")),
            details=dict(data.get("details", {}) or {}),
            severity=Severity(data.get("severity", Severity.WARNING.value)),
            hint=data.get("hint"),
        )


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de diagnóstico (v1)
# ---------------------------------------------------------------------------

# Merge
TYPE_CONFLICT_WARNING = "TYPE_CONFLICT_WARNING"
SEQUENCE_IDENTITY_MISSING = "SEQUENCE_IDENTITY_MISSING"
ORPHAN_DELETE = "ORPHAN_DELETE"

# Transforms
PATH_NOT_FOUND = "PATH_NOT_FOUND"
DANGLING_REFERENCE = "DANGLING_REFERENCE"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def _format_path(path: Sequence[Any]) -> str:
    return ".".join(str(p) for p in path) or "<root>"


def type_conflict_warning(
    *,
    identity: Optional[str],
    path: Sequence[Any],
    base_type: str,
    patch_type: str,
    hint: str = "Revise o patch: o tipo do nó no overlay difere do tipo na base e o valor do patch prevaleceu.",
) -> Diagnostic:
    return Diagnostic(
        type=TYPE_CONFLICT_WARNING,
        message="Conflito de tipo durante o merge (valor do patch prevaleceu)",
        details={
            "identity": identity,
            "path": _format_path(path),
            "base_type": base_type,
            "patch_type": patch_type,
        },
        hint=hint,
    )


def sequence_identity_missing(
    *,
    identity: Optional[str],
    path: Sequence[Any],
    hint: str = "Declare um campo de identidade (ex.: name) em todos os elementos ou remova a estratégia de merge por identidade deste path.",
) -> Diagnostic:
    return Diagnostic(
        type=SEQUENCE_IDENTITY_MISSING,
        message="Sequência sem identidade por elemento: aplicada substituição integral",
        details={
            "identity": identity,
            "path": _format_path(path),
        },
        hint=hint,
    )


def orphan_delete(
    *,
    identity: str,
    layer: Optional[str] = None,
    hint: str = "Remova a diretiva de exclusão do overlay ou corrija a identidade do documento alvo.",
) -> Diagnostic:
    return Diagnostic(
        type=ORPHAN_DELETE,
        message="Diretiva de exclusão sem documento correspondente na base",
        details={
            "identity": identity,
            "layer": layer,
        },
        hint=hint,
    )


def dangling_reference(
    *,
    referrer: str,
    target_kind: str,
    target_name: str,
    path: str,
    transform: Optional[str] = None,
    hint: str = "A referência aponta para um documento fora do conjunto de entrada; confirme que ele existe no destino.",
) -> Diagnostic:
    return Diagnostic(
        type=DANGLING_REFERENCE,
        message="Referência externa não reescrita",
        details={
            "referrer": referrer,
            "target_kind": target_kind,
            "target_name": target_name,
            "path": path,
            "transform": transform,
        },
        hint=hint,
    )


def from_exception(exc: Exception, *, transform: Optional[str] = None) -> Diagnostic:
    """Converte uma exceção recuperável em Diagnostic (serializável, acionável).

    Regras:
    - StratumException: já vem com message/details/hint; o código é o
      catálogo correspondente quando existe, senão o nome da classe.
    - Outras exceções não chegam aqui: o pipeline só converte erros
      recuperáveis, o resto propaga.
    """
    code = {
        "PathNotFoundError": PATH_NOT_FOUND,
        "DanglingReferenceError": DANGLING_REFERENCE,
    }.get(exc.__class__.__name__, exc.__class__.__name__)

    if isinstance(exc, StratumException):
        details = dict(exc.details or {})
        if transform is not None:
            details.setdefault("transform", transform)
        return Diagnostic(
            type=code,
            message=exc.message,
            details=details,
            hint=exc.hint,
        )

    return Diagnostic(
        type=code,
        message=str(exc) or exc.__class__.__name__,
        details={"exception_class": exc.__class__.__name__, "transform": transform},
    )


def count_by_type(diagnostics: Sequence[Diagnostic]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for d in diagnostics:
        counts[d.type] = counts.get(d.type, 0) + 1
    return counts


def filter_by_type(diagnostics: Sequence[Diagnostic], code: str) -> List[Diagnostic]:
    return [d for d in diagnostics if d.type == code]
