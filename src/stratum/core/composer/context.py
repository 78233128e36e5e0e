# src/stratum/core/composer/context.py
"""
Contexto de uma composição.

Este módulo define o `CompositionContext`, a estrutura criada pelo
Composer para cada chamada de `compose` e passada ao Merge Engine e aos
Transforms.

O CompositionContext é o único meio permitido de:
    - registrar eventos estruturados (log) da composição
    - coletar diagnósticos não fatais
    - acumular o resultado de cada transform executado

Princípios fundamentais:
    - Isolamento por composição (um contexto por chamada de `compose`)
    - Nenhum componente acessa estado global
    - Eventos e diagnósticos preservam a ordem em que ocorreram

Invariantes:
    - Eventos sempre incluem `composition_id`, `stage` e `timestamp` UTC
    - O contexto não participa do ResultSet: duas composições iguais
      produzem ResultSets iguais mesmo com ids/timestamps diferentes

Limites explícitos:
    - Não executa merge nem transforms
    - Não persiste dados automaticamente
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from stratum.core.diagnostics import Diagnostic, Severity
from stratum.core.transforms.types import TransformResult


@dataclass
class CompositionContext:
    """
    Contexto de execução de uma composição (base + um overlay).

    Campos canônicos:
    - composition_id: identificador único da composição
    - layer: nome do overlay sendo composto
    - created_at: timestamp UTC de criação
    - diagnostics: diagnósticos não fatais, em ordem de ocorrência
    - events: log estruturado de eventos
    - transform_results: um TransformResult por transform executado
    """

    composition_id: str
    layer: str
    created_at: datetime
    meta: Dict[str, Any] = field(default_factory=dict)

    diagnostics: List[Diagnostic] = field(default_factory=list, init=False)
    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    transform_results: List[TransformResult] = field(default_factory=list, init=False)

    # -----------------------------
    # Logging & diagnostics
    # -----------------------------
    def log(self, *, stage: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "composition_id": self.composition_id,
            "layer": self.layer,
            "stage": stage,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_diagnostic(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)
        self.log(
            stage="diagnostic",
            level=diagnostic.severity.value,
            message=diagnostic.message,
            type=diagnostic.type,
        )

    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.WARNING]

    # -----------------------------
    # Transforms
    # -----------------------------
    def record_transform(self, result: TransformResult) -> None:
        self.transform_results.append(result)


def new_context(layer: str, *, composition_id: Optional[str] = None, **meta: Any) -> CompositionContext:
    return CompositionContext(
        composition_id=composition_id or str(uuid4()),
        layer=layer,
        created_at=datetime.now(timezone.utc),
        meta=dict(meta),
    )
