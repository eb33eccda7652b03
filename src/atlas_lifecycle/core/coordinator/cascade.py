# src/atlas_lifecycle/core/coordinator/cascade.py
"""
Cascata sobre o closure de componentes que referenciam um controller service.

Este módulo define:
    - a resolução do alvo da cascata (`resolve_cascade_target`)
    - o plano ordenado de membros (`plan_cascade`)
    - o resultado tipado (`ClosureResult`, `MemberOutcome`)

Seleção de membros por alvo:

| Alvo | Membros | Ordem |
|---|---|---|
| ENABLED | services DISABLED | dependência (referenciados primeiro) |
| DISABLED | services ENABLED | dependência reversa |
| RUNNING | processors STOPPED | por id |
| STOPPED | processors RUNNING | por id |

Decisões arquiteturais:
    - O plano é calculado sobre o snapshot do closure; componentes
      adicionados depois não participam
    - Um membro que depende de um membro que falhou é pulado (SKIPPED),
      nunca tentado

Limites explícitos:
    - Não adquire locks
    - Não chama o engine
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union

from atlas_lifecycle.core.errors import invalid_field
from atlas_lifecycle.core.exceptions import InvalidField
from atlas_lifecycle.core.graph.references import ReferenceClosure, RegistryReferenceGraph
from atlas_lifecycle.core.guards.view import Component
from atlas_lifecycle.core.model.components import ControllerServiceNode, ProcessorNode
from atlas_lifecycle.core.model.types import ControllerServiceState, ScheduledState


CascadeTarget = Union[ControllerServiceState, ScheduledState]

ENABLE = "enable"
DISABLE = "disable"
START = "start"
STOP = "stop"


class MemberStatus(str, Enum):
    PLANNED = "PLANNED"
    APPLIED = "APPLIED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


@dataclass
class MemberOutcome:
    component_id: str
    kind: str
    action: str
    previous_state: str
    state: str
    status: MemberStatus
    cause: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "component_id": self.component_id,
            "kind": self.kind,
            "action": self.action,
            "previous_state": self.previous_state,
            "state": self.state,
            "status": self.status.value,
            "cause": self.cause,
        }


@dataclass
class ClosureResult:
    """
    Resultado de uma cascata (ou do seu plano, quando `verified_only`).

    Membros aplicados permanecem aplicados mesmo quando outros falham;
    o resultado reporta o desfecho de cada membro.
    """

    cascade_id: str
    service_id: str
    target: str
    members: List[MemberOutcome] = field(default_factory=list)
    verified_only: bool = False

    def _with(self, status: MemberStatus) -> List[str]:
        return [m.component_id for m in self.members if m.status == status]

    @property
    def applied(self) -> List[str]:
        return self._with(MemberStatus.APPLIED)

    @property
    def failed(self) -> List[str]:
        return self._with(MemberStatus.FAILED)

    @property
    def skipped(self) -> List[str]:
        return self._with(MemberStatus.SKIPPED)

    @property
    def ok(self) -> bool:
        return not self.failed

    def member(self, component_id: str) -> MemberOutcome:
        for m in self.members:
            if m.component_id == component_id:
                return m
        raise KeyError(component_id)

    def failures(self) -> List[Dict[str, Any]]:
        return [
            {"component_id": m.component_id, "cause": m.cause}
            for m in self.members
            if m.status == MemberStatus.FAILED
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cascade_id": self.cascade_id,
            "service_id": self.service_id,
            "target": self.target,
            "verified_only": self.verified_only,
            "members": [m.to_dict() for m in self.members],
        }


@dataclass(frozen=True)
class CascadeStep:
    component: Component
    action: str
    target: CascadeTarget


def resolve_cascade_target(
    service_id: str,
    target_service_state: Any = None,
    target_schedule_state: Any = None,
) -> CascadeTarget:
    """
    Resolve o alvo da cascata; o alvo de service tem precedência.

    Raises:
        InvalidField: Alvo ausente, desconhecido ou não endereçável.
    """
    def reject(field_name: str, message: str) -> InvalidField:
        return InvalidField.from_payload(
            invalid_field(
                component_id=service_id,
                violations=[{"field": field_name, "message": message, "kind": "field"}],
            )
        )

    if target_service_state is not None:
        try:
            target = ControllerServiceState.parse(target_service_state)
        except ValueError:
            target = None
        if target not in (ControllerServiceState.ENABLED, ControllerServiceState.DISABLED):
            raise reject(
                "state",
                "Controller Service state: Value must be one of [ENABLED, DISABLED]",
            )
        return target

    if target_schedule_state is not None:
        try:
            scheduled = ScheduledState.parse(target_schedule_state)
        except ValueError:
            scheduled = None
        if scheduled not in (ScheduledState.RUNNING, ScheduledState.STOPPED):
            raise reject(
                "state",
                "Referencing component state: Value must be one of [RUNNING, STOPPED]",
            )
        return scheduled

    raise reject("state", "A target state for the referencing components must be specified.")


def plan_cascade(
    closure: ReferenceClosure,
    target: CascadeTarget,
    references: RegistryReferenceGraph,
) -> List[CascadeStep]:
    """Seleciona e ordena os membros do closure que precisam transicionar."""
    if target == ControllerServiceState.ENABLED:
        services = [s for s in closure.services if s.service_state == ControllerServiceState.DISABLED]
        return [CascadeStep(s, ENABLE, target) for s in references.in_dependency_order(services)]

    if target == ControllerServiceState.DISABLED:
        services = [s for s in closure.services if s.service_state == ControllerServiceState.ENABLED]
        ordered = list(reversed(references.in_dependency_order(services)))
        return [CascadeStep(s, DISABLE, target) for s in ordered]

    if target == ScheduledState.RUNNING:
        return [
            CascadeStep(p, START, target)
            for p in closure.processors
            if p.scheduled_state == ScheduledState.STOPPED
        ]

    return [
        CascadeStep(p, STOP, target)
        for p in closure.processors
        if p.scheduled_state == ScheduledState.RUNNING
    ]


def blocked_by(step: CascadeStep, blocked: Sequence[Component]) -> Optional[str]:
    """
    Id do membro não aplicado do qual `step` depende, se houver.

    `blocked` reúne membros falhos e membros pulados por dependência, de
    modo que o bloqueio se propaga por toda a cadeia de referências.
    """
    for other in blocked:
        if not isinstance(other, ControllerServiceNode):
            continue
        if step.action == ENABLE and other.id in step.component.referenced_service_ids():
            return other.id
        if step.action == DISABLE and step.component.id in other.referenced_service_ids():
            return other.id
    return None


def kind_of(component: Component) -> str:
    return "processor" if isinstance(component, ProcessorNode) else "controller service"
