# src/atlas_lifecycle/core/guards/guard.py
"""
Contrato canônico de Transition Guard.

Um guard é a capacidade, implementada por tipo de componente, de responder
se uma ação é admissível *agora*: `can_start`, `can_stop`, `can_enable`,
`can_disable`, `can_update` e `can_delete`.

Decisões arquiteturais:
    - Guards são objetos explícitos invocados pelo coordenador, em vez de
      métodos virtuais espalhados por uma hierarquia de componentes
    - Cada predicado devolve uma `GuardDecision` tipada; quem decide
      levantar a rejeição é o coordenador (`raise_if_denied`)
    - Guards leem outros componentes apenas via `StateView`

Invariantes:
    - Guards nunca mutam componentes
    - Uma negação sempre carrega o motivo e o tipo de conflito

Limites explícitos:
    - Não adquire locks
    - Não chama o engine
    - Não valida campos de configuração
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol, Tuple, runtime_checkable

from atlas_lifecycle.core.errors import state_conflict, structural_conflict
from atlas_lifecycle.core.exceptions import StateConflict, StructuralConflict

from .view import Component, StateView


STATE = "state"
STRUCTURAL = "structural"


@dataclass(frozen=True)
class GuardDecision:
    allowed: bool
    reason: Optional[str] = None
    conflict: str = STATE
    related: Tuple[str, ...] = ()

    @classmethod
    def allow(cls) -> "GuardDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str, *, conflict: str = STATE, related: Tuple[str, ...] = ()) -> "GuardDecision":
        return cls(allowed=False, reason=reason, conflict=conflict, related=related)

    def __bool__(self) -> bool:
        return self.allowed

    def raise_if_denied(self, component: Component, requested_state: Optional[Any] = None) -> None:
        if self.allowed:
            return
        if self.conflict == STRUCTURAL:
            raise StructuralConflict.from_payload(
                structural_conflict(
                    component_id=component.id,
                    reason=self.reason or "Structural conflict",
                    related=list(self.related),
                )
            )
        raise StateConflict.from_payload(
            state_conflict(
                component_id=component.id,
                current_state=component.state.value,
                requested_state=getattr(requested_state, "value", requested_state),
                reason=self.reason or "Illegal state transition",
            )
        )


@runtime_checkable
class Guard(Protocol):
    def can_start(self, component: Component, view: StateView) -> GuardDecision:
        ...

    def can_stop(self, component: Component, view: StateView) -> GuardDecision:
        ...

    def can_enable(self, component: Component, view: StateView) -> GuardDecision:
        ...

    def can_disable(self, component: Component, view: StateView) -> GuardDecision:
        ...

    def can_update(self, component: Component, view: StateView) -> GuardDecision:
        ...

    def can_delete(self, component: Component, view: StateView) -> GuardDecision:
        ...


def in_flight(component: Component, view: StateView) -> Optional[GuardDecision]:
    if view.is_in_flight(component.id):
        return GuardDecision.deny(f"A transition is already in progress for '{component.id}'")
    return None
