# src/stratum/core/traceability/report.py
"""
Composition Report v1 — rastreabilidade de composições do Stratum.

Este módulo define o relatório canônico de uma composição: o artefato
que permite auditar, depois do fato, como um result set foi produzido.

O relatório consolida:
    - metadados da composição (id, timestamp UTC, versão do Stratum)
    - entradas (hash das settings, contagem de documentos e camadas)
    - resultado de cada transform executado
    - diagnósticos não fatais
    - o Event Log estruturado da composição
    - o digest canônico do result set

Princípios fundamentais:
    - O relatório é derivado do `CompositionResult`; não o altera
    - O relatório é serializável e reconstruível (round-trip JSON)
    - Timestamps são normalizados para UTC

Limites explícitos:
    - Não inclui os documentos em si (apenas o digest)
    - Não realiza migração entre versões de schema
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from stratum.core.diagnostics import Diagnostic, count_by_type
from stratum.core.transforms.types import TransformResult

REPORT_VERSION = "1"


def _iso_utc(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()


@dataclass
class CompositionReport:
    """
    Relatório v1 de uma composição.

    Campos:
        - composition: id, created_at, stratum_version, layers
        - inputs: settings_hash, base_documents (quando conhecido)
        - outputs: documents, digest, identities
        - transforms: `TransformResult.to_dict()` de cada transform
        - diagnostics: `Diagnostic.to_dict()` de cada diagnóstico
        - events: Event Log da composição, na ordem de ocorrência
    """

    composition: Dict[str, Any]
    inputs: Dict[str, Any]
    outputs: Dict[str, Any]
    transforms: List[Dict[str, Any]] = field(default_factory=list)
    diagnostics: List[Dict[str, Any]] = field(default_factory=list)
    events: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "report_version": REPORT_VERSION,
            "composition": dict(self.composition),
            "inputs": dict(self.inputs),
            "outputs": dict(self.outputs),
            "transforms": [dict(t) for t in self.transforms],
            "diagnostics": [dict(d) for d in self.diagnostics],
            "events": [dict(e) for e in self.events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompositionReport":
        return cls(
            composition=dict(data.get("composition", {})),
            inputs=dict(data.get("inputs", {})),
            outputs=dict(data.get("outputs", {})),
            transforms=[dict(t) for t in (data.get("transforms", []) or [])],
            diagnostics=[dict(d) for d in (data.get("diagnostics", []) or [])],
            events=[dict(e) for e in (data.get("events", []) or [])],
        )

    def transform_results(self) -> List[TransformResult]:
        return [TransformResult.from_dict(t) for t in self.transforms]

    def diagnostic_objects(self) -> List[Diagnostic]:
        return [Diagnostic.from_dict(d) for d in self.diagnostics]


def create_report(
    result: Any,
    *,
    stratum_version: str,
    base_documents: Optional[int] = None,
    created_at: Optional[datetime] = None,
) -> CompositionReport:
    """
    Cria o relatório de um `CompositionResult`.

    `created_at` padrão é o timestamp registrado na composição (meta) ou,
    na ausência dele, o instante atual.
    """
    meta = dict(result.meta or {})
    if created_at is not None:
        created = _iso_utc(created_at)
    else:
        created = meta.get("created_at") or _iso_utc(datetime.now(timezone.utc))

    diagnostics = list(result.diagnostics)
    return CompositionReport(
        composition={
            "composition_id": meta.get("composition_id"),
            "created_at": created,
            "stratum_version": stratum_version,
            "layers": list(result.layers),
        },
        inputs={
            "settings_hash": meta.get("settings_hash"),
            "base_documents": base_documents,
        },
        outputs={
            "documents": len(result.result_set),
            "digest": result.result_set.digest(),
            "identities": [str(k) for k in result.result_set.identities()],
            "diagnostics_by_type": count_by_type(diagnostics),
        },
        transforms=[t.to_dict() for t in result.transform_results],
        diagnostics=[d.to_dict() for d in diagnostics],
        events=[dict(e) for e in result.events],
    )


def save_report(report: Union[CompositionReport, Dict[str, Any]], path: Path) -> None:
    """
    Persiste o relatório em JSON determinístico (chaves ordenadas).

    Raises:
        OSError: Falha ao criar diretórios ou escrever o arquivo.
        TypeError: Conteúdo não serializável.
    """
    data = report.to_dict() if isinstance(report, CompositionReport) else report
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True), encoding="utf-8")


def load_report(path: Path) -> CompositionReport:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return CompositionReport.from_dict(data)
