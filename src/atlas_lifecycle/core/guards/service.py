# src/atlas_lifecycle/core/guards/service.py
"""
Guard de controller services.

- can_enable: DISABLED, sem erros de validação, todos os services
  referenciados ENABLED e sem transição em andamento
- can_disable: ENABLED, nenhum service dependente ENABLED/ENABLING,
  nenhum processor dependente RUNNING e nenhum dependente com transição
  em andamento
- can_update: DISABLED
- can_delete: DISABLED e sem dependentes

Estados transitórios (ENABLING/DISABLING) sempre negam: o service já
está no meio de uma transição.
"""

from __future__ import annotations

from atlas_lifecycle.core.model.components import ControllerServiceNode, ProcessorNode
from atlas_lifecycle.core.model.types import ControllerServiceState, ScheduledState

from .guard import STRUCTURAL, GuardDecision, in_flight
from .view import StateView


def _transitioning(service: ControllerServiceNode, view: StateView) -> GuardDecision:
    return GuardDecision.deny(
        f"Controller service '{service.id}' is {view.state_of(service).value} and cannot accept another transition"
    )


class ControllerServiceGuard:
    def can_start(self, service: ControllerServiceNode, view: StateView) -> GuardDecision:
        return GuardDecision.deny("Controller services are enabled, not started")

    def can_stop(self, service: ControllerServiceNode, view: StateView) -> GuardDecision:
        return GuardDecision.deny("Controller services are disabled, not stopped")

    def can_enable(self, service: ControllerServiceNode, view: StateView) -> GuardDecision:
        busy = in_flight(service, view)
        if busy is not None:
            return busy

        state = view.state_of(service)
        if state.is_transitional:
            return _transitioning(service, view)
        if state != ControllerServiceState.DISABLED:
            return GuardDecision.deny(f"Controller service '{service.id}' is already enabled")

        if service.validation_errors:
            return GuardDecision.deny(
                f"Controller service '{service.id}' is not in a valid state: {'; '.join(service.validation_errors)}"
            )

        for referenced_id in sorted(service.referenced_service_ids()):
            if view.service_state(referenced_id) != ControllerServiceState.ENABLED:
                return GuardDecision.deny(
                    f"Controller service '{service.id}' references controller service "
                    f"'{referenced_id}' which is not enabled",
                    related=(referenced_id,),
                )
            if view.is_in_flight(referenced_id):
                return GuardDecision.deny(
                    f"Controller service '{service.id}' references controller service "
                    f"'{referenced_id}' which has a transition in progress",
                    related=(referenced_id,),
                )
        return GuardDecision.allow()

    def can_disable(self, service: ControllerServiceNode, view: StateView) -> GuardDecision:
        busy = in_flight(service, view)
        if busy is not None:
            return busy

        state = view.state_of(service)
        if state.is_transitional:
            return _transitioning(service, view)
        if state != ControllerServiceState.ENABLED:
            return GuardDecision.deny(f"Controller service '{service.id}' is already disabled")

        active = []
        for component in view.referencing(service.id):
            current = view.state_of(component)
            if view.is_in_flight(component.id):
                active.append(component.id)
            elif isinstance(component, ProcessorNode) and current == ScheduledState.RUNNING:
                active.append(component.id)
            elif isinstance(component, ControllerServiceNode) and current in (
                ControllerServiceState.ENABLED,
                ControllerServiceState.ENABLING,
            ):
                active.append(component.id)

        if active:
            return GuardDecision.deny(
                f"Controller service '{service.id}' cannot be disabled because it is referenced by "
                f"active components: {', '.join(active)}",
                related=tuple(active),
            )
        return GuardDecision.allow()

    def can_update(self, service: ControllerServiceNode, view: StateView) -> GuardDecision:
        if view.state_of(service) != ControllerServiceState.DISABLED:
            return GuardDecision.deny(f"Controller service '{service.id}' must be disabled to be updated")
        return GuardDecision.allow()

    def can_delete(self, service: ControllerServiceNode, view: StateView) -> GuardDecision:
        if view.state_of(service) != ControllerServiceState.DISABLED:
            return GuardDecision.deny(f"Controller service '{service.id}' must be disabled to be deleted")

        dependents = [c.id for c in view.referencing(service.id)]
        if dependents:
            return GuardDecision.deny(
                f"Controller service '{service.id}' cannot be deleted because it is referenced by: "
                f"{', '.join(dependents)}",
                conflict=STRUCTURAL,
                related=tuple(dependents),
            )
        return GuardDecision.allow()
