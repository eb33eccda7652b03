"""
Atlas Lifecycle — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do Atlas Lifecycle.
Rejeições do coordenador são artefatos de domínio e fazem parte do
contrato operacional do sistema, devendo ser:

- explícitas
- serializáveis
- rastreáveis
- acionáveis

Nenhuma decisão implícita é permitida.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LifecycleErrorPayload:
    """
    Payload canônico de erro do Atlas Lifecycle.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

NOT_FOUND = "NOT_FOUND"
INVALID_FIELD = "INVALID_FIELD"
MALFORMED_EXPRESSION = "MALFORMED_EXPRESSION"
STATE_CONFLICT = "STATE_CONFLICT"
STRUCTURAL_CONFLICT = "STRUCTURAL_CONFLICT"
CASCADE_FAILURE = "CASCADE_FAILURE"
ENGINE_REJECTION = "ENGINE_REJECTION"

# Falha inesperada (exceção não tipada atravessando o coordenador)
COORDINATOR_ERROR = "COORDINATOR_ERROR"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def not_found(
    *,
    component_id: str,
    kind: str,
    group_id: Optional[str] = None,
    hint: str = "Verifique o identificador informado e o grupo ao qual o componente pertence.",
) -> LifecycleErrorPayload:
    return LifecycleErrorPayload(
        type=NOT_FOUND,
        message=f"Unable to find {kind} with id '{component_id}'.",
        details={"component_id": component_id, "kind": kind, "group_id": group_id},
        hint=hint,
    )


def invalid_field(
    *,
    component_id: Optional[str],
    violations: List[Dict[str, Any]],
    hint: str = "Corrija os campos listados em `violations` e reenvie a requisição completa.",
) -> LifecycleErrorPayload:
    return LifecycleErrorPayload(
        type=INVALID_FIELD,
        message="Requisição contém campos inválidos",
        details={"component_id": component_id, "violations": violations},
        hint=hint,
    )


def malformed_expression(
    *,
    component_id: Optional[str],
    field: str,
    expression: str,
    reason: str,
    hint: str = "Informe uma expressão cron Quartz válida (ex.: '0 0/5 * * * ?').",
) -> LifecycleErrorPayload:
    return LifecycleErrorPayload(
        type=MALFORMED_EXPRESSION,
        message=f"Scheduling Period '{expression}' is not a valid cron expression: {reason}",
        details={
            "component_id": component_id,
            "field": field,
            "expression": expression,
            "reason": reason,
        },
        hint=hint,
    )


def state_conflict(
    *,
    component_id: str,
    current_state: Optional[str],
    requested_state: Optional[str],
    reason: str,
    hint: str = "Aguarde a transição em andamento ou leve o componente ao estado exigido antes de reenviar.",
) -> LifecycleErrorPayload:
    return LifecycleErrorPayload(
        type=STATE_CONFLICT,
        message=reason,
        details={
            "component_id": component_id,
            "current_state": current_state,
            "requested_state": requested_state,
        },
        hint=hint,
    )


def structural_conflict(
    *,
    component_id: str,
    reason: str,
    related: Optional[List[str]] = None,
    hint: str = "Remova as conexões ou referências conflitantes antes de reenviar.",
) -> LifecycleErrorPayload:
    return LifecycleErrorPayload(
        type=STRUCTURAL_CONFLICT,
        message=reason,
        details={"component_id": component_id, "related": list(related or [])},
        hint=hint,
    )


def cascade_failure(
    *,
    service_id: str,
    target: str,
    failures: List[Dict[str, Any]],
    hint: str = "Membros já aplicados permanecem no novo estado. Corrija as causas listadas e reenvie para o restante do closure.",
) -> LifecycleErrorPayload:
    return LifecycleErrorPayload(
        type=CASCADE_FAILURE,
        message=f"Cascade to {target} failed for {len(failures)} referencing component(s)",
        details={"service_id": service_id, "target": target, "failures": failures},
        hint=hint,
    )


def engine_rejection(
    *,
    component_id: str,
    action: str,
    engine_message: str,
    hint: str = "Verifique o estado do engine de execução. Nenhum retry é aplicado automaticamente.",
) -> LifecycleErrorPayload:
    return LifecycleErrorPayload(
        type=ENGINE_REJECTION,
        message=f"Execution engine rejected {action} for '{component_id}': {engine_message}",
        details={"component_id": component_id, "action": action, "engine_message": engine_message},
        hint=hint,
    )
