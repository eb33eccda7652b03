# src/atlas_lifecycle/core/guards/processor.py
"""
Guard de processors.

Máquina de estados guardada:

| De | Para | Guard |
|---|---|---|
| STOPPED | RUNNING | can_start: sem erros de validação, services referenciados ENABLED e fora de transição |
| RUNNING | STOPPED | can_stop: em execução |
| STOPPED | DISABLED | can_disable: não está em execução |
| DISABLED | STOPPED | can_enable: desabilitado |

DISABLED → RUNNING nunca é admitido diretamente.
"""

from __future__ import annotations

from atlas_lifecycle.core.graph.connections import ConnectionIndex
from atlas_lifecycle.core.model.components import ProcessorNode
from atlas_lifecycle.core.model.types import ControllerServiceState, ScheduledState

from .guard import STRUCTURAL, GuardDecision, in_flight
from .view import StateView


class ProcessorGuard:
    def __init__(self, connections: ConnectionIndex) -> None:
        self._connections = connections

    def can_start(self, processor: ProcessorNode, view: StateView) -> GuardDecision:
        busy = in_flight(processor, view)
        if busy is not None:
            return busy

        state = view.state_of(processor)
        if state == ScheduledState.RUNNING:
            return GuardDecision.deny(f"Processor '{processor.id}' is already running")
        if state == ScheduledState.DISABLED:
            return GuardDecision.deny(
                f"Processor '{processor.id}' is disabled and must be enabled (STOPPED) before it can be started"
            )

        if processor.validation_errors:
            return GuardDecision.deny(
                f"Processor '{processor.id}' is not in a valid state: {'; '.join(processor.validation_errors)}"
            )

        for service_id in sorted(processor.referenced_service_ids()):
            if view.service_state(service_id) != ControllerServiceState.ENABLED:
                return GuardDecision.deny(
                    f"Processor '{processor.id}' references controller service '{service_id}' which is not enabled",
                    related=(service_id,),
                )
            if view.is_in_flight(service_id):
                return GuardDecision.deny(
                    f"Processor '{processor.id}' references controller service '{service_id}' "
                    "which has a transition in progress",
                    related=(service_id,),
                )
        return GuardDecision.allow()

    def can_stop(self, processor: ProcessorNode, view: StateView) -> GuardDecision:
        busy = in_flight(processor, view)
        if busy is not None:
            return busy
        if view.state_of(processor) != ScheduledState.RUNNING:
            return GuardDecision.deny(f"Processor '{processor.id}' is not running")
        return GuardDecision.allow()

    def can_enable(self, processor: ProcessorNode, view: StateView) -> GuardDecision:
        busy = in_flight(processor, view)
        if busy is not None:
            return busy
        if view.state_of(processor) != ScheduledState.DISABLED:
            return GuardDecision.deny(f"Processor '{processor.id}' is not disabled")
        return GuardDecision.allow()

    def can_disable(self, processor: ProcessorNode, view: StateView) -> GuardDecision:
        busy = in_flight(processor, view)
        if busy is not None:
            return busy
        state = view.state_of(processor)
        if state == ScheduledState.RUNNING:
            return GuardDecision.deny(f"Processor '{processor.id}' cannot be disabled while it is running")
        if state != ScheduledState.STOPPED:
            return GuardDecision.deny(f"Processor '{processor.id}' is already disabled")
        return GuardDecision.allow()

    def can_update(self, processor: ProcessorNode, view: StateView) -> GuardDecision:
        if view.state_of(processor) == ScheduledState.RUNNING:
            return GuardDecision.deny(f"Processor '{processor.id}' cannot be updated while it is running")
        return GuardDecision.allow()

    def can_delete(self, processor: ProcessorNode, view: StateView) -> GuardDecision:
        if view.state_of(processor) == ScheduledState.RUNNING:
            return GuardDecision.deny(f"Processor '{processor.id}' cannot be deleted while it is running")

        attached = sorted(c.id for c in self._connections.connections_of(processor))
        if attached:
            return GuardDecision.deny(
                f"Processor '{processor.id}' cannot be deleted because it has connections: {', '.join(attached)}",
                conflict=STRUCTURAL,
                related=tuple(attached),
            )
        return GuardDecision.allow()
