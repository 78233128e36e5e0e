"""
Stratum — Canonical Exceptions (v1)

Este módulo define as exceções tipadas internas do Stratum.

Objetivo:
- Permitir que o Document Model, o Merge Engine, os Transforms e o Composer
  levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para `Diagnostic`
- Evitar ValueError/RuntimeError genéricos em guardrails estruturais

Política (v1):
- Exceções fatais abortam a composição sem resultado parcial
  (FormatError, IdentityError, DuplicateIdentityError, DepthExceededError,
  DanglingReferenceError interno)
- Exceções recuperáveis (`RecoverableError`) são convertidas em diagnóstico
  pelo pipeline de transforms e a composição prossegue

Regras:
- Exceções devem carregar apenas dados estruturados (serializáveis) em `details`
- A mensagem é curta e humana; o `hint` aponta onde corrigir
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True, eq=False)
class StratumException(Exception):
    """Base class para exceções internas do Stratum.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de diagnóstico
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Estrutura de documentos
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class FormatError(StratumException):
    """Estrutura de documento malformada (raiz, chaves ou tipos inválidos)."""


@dataclass(frozen=True, eq=False)
class DepthExceededError(StratumException):
    """Aninhamento do documento excede o limite de profundidade configurado."""


@dataclass(frozen=True, eq=False)
class TransformSpecError(FormatError):
    """Declaração de transform inválida (kind desconhecido ou parâmetros ruins)."""


# ---------------------------------------------------------------------------
# Identidade
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class IdentityError(StratumException):
    """Documento sem `kind`/`name` escalares: não pode ser indexado."""


@dataclass(frozen=True, eq=False)
class DuplicateIdentityError(IdentityError):
    """Dois documentos da mesma coleção compartilham a chave de identidade."""


# ---------------------------------------------------------------------------
# Transforms
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class RecoverableError(StratumException):
    """Falha de operação best-effort: registrada como diagnóstico, sem abortar."""


@dataclass(frozen=True, eq=False)
class PathNotFoundError(RecoverableError):
    """O documento não possui o shape estrutural exigido pelo transform."""


@dataclass(frozen=True, eq=False)
class DanglingReferenceError(StratumException):
    """Referência reescrita não resolve para nenhum documento do result set."""
