# src/atlas_lifecycle/core/guards/view.py
"""
Visão de estados consultada pelos guards.

Guards avaliam um componente contra o estado *dos outros* componentes
(services referenciados, dependentes ativos). A `StateView` centraliza
essa leitura e permite que a verificação de uma cascata simule membros
anteriores como já transicionados (`assume`), sem mutar nada.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Union

from atlas_lifecycle.core.graph.references import ReferenceGraph
from atlas_lifecycle.core.model.components import ControllerServiceNode, ProcessorNode
from atlas_lifecycle.core.model.types import ControllerServiceState, ScheduledState
from atlas_lifecycle.core.registry.registry import ComponentRegistry


Component = Union[ProcessorNode, ControllerServiceNode]
State = Union[ScheduledState, ControllerServiceState]


class StateView:
    def __init__(
        self,
        registry: ComponentRegistry,
        references: ReferenceGraph,
        in_flight: Optional[Callable[[str], bool]] = None,
    ) -> None:
        self._registry = registry
        self._references = references
        self._in_flight = in_flight
        self._assumed: Dict[str, State] = {}

    def assume(self, component_id: str, state: State) -> None:
        self._assumed[component_id] = state

    def state_of(self, component: Component) -> State:
        assumed = self._assumed.get(component.id)
        if assumed is not None:
            return assumed
        return component.state

    def service_state(self, service_id: str) -> Optional[ControllerServiceState]:
        """Estado (assumido ou real) do service; `None` se não registrado."""
        if service_id in self._assumed:
            return self._assumed[service_id]  # type: ignore[return-value]
        if not self._registry.has_controller_service(service_id):
            return None
        return self._registry.find_controller_service(service_id).service_state

    def is_in_flight(self, component_id: str) -> bool:
        return self._in_flight is not None and self._in_flight(component_id)

    def referencing(self, service_id: str) -> List[Component]:
        return self._references.referencing_components(service_id)
