# src/atlas_lifecycle/core/graph/references.py
"""
Grafo de referências entre componentes.

Este módulo expõe a visão somente-leitura das dependências estruturais
entre componentes: quais componentes referenciam um controller service e
quais services um componente referencia.

Uma aresta A → B existe quando A possui uma propriedade cujo descriptor
identifica um controller service e cujo valor é o id de B.

Responsabilidades do módulo:
    - Consultas diretas (`referencing_components`, `referenced_services`)
    - Snapshot do closure transitivo de referências (`closure`)
    - Ordenação de services por dependência (`in_dependency_order`)

Decisões arquiteturais:
    - O grafo é derivado do registry a cada consulta (sem cache)
    - O closure é um snapshot imutável: componentes adicionados depois
      não entram em uma cascata já iniciada
    - Referências pendentes (id sem service registrado) são ignoradas
      aqui e tratadas pelos guards como service não habilitado

Invariantes:
    - A ordem retornada é determinística (services antes de processors,
      cada grupo por id)
    - O service raiz nunca pertence ao próprio closure

Limites explícitos:
    - Não muta componentes
    - Não avalia guards

Este módulo existe para que cascatas operem sobre um conjunto
estável e ordenado de dependentes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Protocol, Set, Tuple, Union, runtime_checkable

from atlas_lifecycle.core.model.components import ControllerServiceNode, ProcessorNode

from .ordering import dependency_order

if TYPE_CHECKING:
    from atlas_lifecycle.core.registry.registry import ComponentRegistry


Component = Union[ProcessorNode, ControllerServiceNode]


@runtime_checkable
class ReferenceGraph(Protocol):
    def referencing_components(self, service_id: str) -> List[Component]:
        ...

    def referenced_services(self, component_id: str) -> Set[ControllerServiceNode]:
        ...


@dataclass(frozen=True)
class ReferenceClosure:
    """Snapshot do closure transitivo de componentes que referenciam `service_id`."""

    service_id: str
    services: Tuple[ControllerServiceNode, ...]
    processors: Tuple[ProcessorNode, ...]

    @property
    def members(self) -> Tuple[Component, ...]:
        return (*self.services, *self.processors)

    @property
    def ids(self) -> List[str]:
        return [c.id for c in self.members]


def _sort_key(component: Component) -> Tuple[int, str]:
    return (0 if isinstance(component, ControllerServiceNode) else 1, component.id)


class RegistryReferenceGraph:
    """Grafo de referências derivado das propriedades dos componentes registrados."""

    def __init__(self, registry: "ComponentRegistry") -> None:
        self._registry = registry

    def referencing_components(self, service_id: str) -> List[Component]:
        found = [c for c in self._registry.all_components() if service_id in c.referenced_service_ids()]
        return sorted(found, key=_sort_key)

    def referenced_services(self, component_id: str) -> Set[ControllerServiceNode]:
        component = self._registry.find_component(component_id)
        return {
            self._registry.find_controller_service(sid)
            for sid in component.referenced_service_ids()
            if self._registry.has_controller_service(sid)
        }

    def closure(self, service_id: str) -> ReferenceClosure:
        """
        Captura o closure transitivo de componentes que referenciam o service.

        Services que referenciam o service raiz são expandidos recursivamente;
        processors são folhas (nada referencia um processor).
        """
        self._registry.find_controller_service(service_id)

        services: Dict[str, ControllerServiceNode] = {}
        processors: Dict[str, ProcessorNode] = {}
        pending = [service_id]
        visited = {service_id}

        while pending:
            current = pending.pop(0)
            for component in self.referencing_components(current):
                if isinstance(component, ProcessorNode):
                    processors.setdefault(component.id, component)
                    continue
                if component.id in visited:
                    continue
                visited.add(component.id)
                services[component.id] = component
                pending.append(component.id)

        return ReferenceClosure(
            service_id=service_id,
            services=tuple(services[k] for k in sorted(services)),
            processors=tuple(processors[k] for k in sorted(processors)),
        )

    def in_dependency_order(self, services: List[ControllerServiceNode]) -> List[ControllerServiceNode]:
        """Ordena services de forma que referenciados venham antes de quem os referencia."""
        by_id = {s.id: s for s in services}
        order = dependency_order(by_id, {s.id: s.referenced_service_ids() for s in services})
        return [by_id[sid] for sid in order]
