"""
Atlas Lifecycle — Canonical Exceptions (v1)

Este módulo define exceções tipadas internas do Atlas Lifecycle.

Objetivo:
- Permitir que guards, regras e coordenador levantem rejeições tipadas
- Facilitar o mapeamento determinístico para LifecycleErrorPayload
- Evitar ValueError/RuntimeError genéricos nas decisões de ciclo de vida

Regras:
- Exceções carregam apenas dados estruturados (serializáveis) em `details`
- `CascadeFailure` carrega adicionalmente o resultado parcial do closure
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional

from .errors import (
    CASCADE_FAILURE,
    COORDINATOR_ERROR,
    ENGINE_REJECTION,
    INVALID_FIELD,
    MALFORMED_EXPRESSION,
    NOT_FOUND,
    STATE_CONFLICT,
    STRUCTURAL_CONFLICT,
    LifecycleErrorPayload,
)


@dataclass(eq=False)
class LifecycleException(Exception):
    """Base class para rejeições do coordenador.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    error_type: ClassVar[str] = COORDINATOR_ERROR

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message

    @classmethod
    def from_payload(cls, payload: LifecycleErrorPayload, **extra: Any) -> "LifecycleException":
        return cls(message=payload.message, details=dict(payload.details), hint=payload.hint, **extra)

    def to_error_payload(self) -> LifecycleErrorPayload:
        return LifecycleErrorPayload(
            type=self.error_type,
            message=self.message,
            details=dict(self.details),
            hint=self.hint,
        )


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class NotFound(LifecycleException):
    """Id referenciado não existe no registry."""

    error_type: ClassVar[str] = NOT_FOUND


# ---------------------------------------------------------------------------
# Validação de campos
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class InvalidField(LifecycleException):
    """Um ou mais campos falharam suas regras de formato/enum/intervalo (batch)."""

    error_type: ClassVar[str] = INVALID_FIELD


@dataclass(eq=False)
class MalformedExpression(LifecycleException):
    """Expressão cron não pôde ser interpretada; falha a requisição inteira."""

    error_type: ClassVar[str] = MALFORMED_EXPRESSION


# ---------------------------------------------------------------------------
# Conflitos
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class StateConflict(LifecycleException):
    """Transição ilegal a partir do estado atual, ou transição já em andamento."""

    error_type: ClassVar[str] = STATE_CONFLICT


@dataclass(eq=False)
class StructuralConflict(LifecycleException):
    """Conflito estrutural: conexão viva, referências ou ciclo no grafo."""

    error_type: ClassVar[str] = STRUCTURAL_CONFLICT


# ---------------------------------------------------------------------------
# Cascata / Engine
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class CascadeFailure(LifecycleException):
    """Um ou mais membros do closure falharam no guard ou no engine."""

    error_type: ClassVar[str] = CASCADE_FAILURE

    result: Any = None


@dataclass(eq=False)
class EngineRejection(LifecycleException):
    """O engine de execução recusou ou falhou em start/stop/enable/disable."""

    error_type: ClassVar[str] = ENGINE_REJECTION


def to_error_payload(exc: BaseException) -> LifecycleErrorPayload:
    """Converte exceções em LifecycleErrorPayload (serializável, acionável).

    Regras:
    - LifecycleException: já vem com message/details/hint e código estável.
    - Outras exceções: encapsular como COORDINATOR_ERROR sem expor stack trace.
    """
    if isinstance(exc, LifecycleException):
        return exc.to_error_payload()

    return LifecycleErrorPayload(
        type=COORDINATOR_ERROR,
        message=str(exc) or "Erro inesperado no coordenador",
        details={"exception_class": exc.__class__.__name__},
        hint="Verifique o journal do coordenador e o estado do engine",
    )
