"""
Rastreabilidade de composições do Stratum (Composition Report v1).

API pública:
    - CompositionReport → estrutura canônica do relatório
    - create_report     → relatório a partir de um CompositionResult
    - save_report       → persistência em JSON determinístico
    - load_report       → restauração (round-trip)
"""

from .report import CompositionReport, create_report, load_report, save_report

__all__ = [
    "CompositionReport",
    "create_report",
    "load_report",
    "save_report",
]
