# src/atlas_lifecycle/core/registry/registry.py
"""
Registro de componentes do grafo de dataflow.

Este módulo define o `ComponentRegistry`, o ponto único em que processors
(agrupados por process group) e controller services são registrados pelo
dono do grafo e localizados pelo coordenador.

Responsabilidades do módulo:
    - Validar unicidade de ids
    - Preservar ordem de registro
    - Localizar componentes (NotFound quando ausentes)
    - Remover componentes a pedido do dono, após o guard de remoção

Decisões arquiteturais:
    - O registry é uma dependência explícita do coordenador (sem singleton)
    - O coordenador apenas empresta componentes; nunca os cria ou destrói
    - Acesso é protegido por lock reentrante: registro e consulta podem
      ocorrer concorrentemente com transições

Invariantes:
    - Cada id é único entre processors e services
    - A listagem reflete exatamente a ordem de registro

Limites explícitos:
    - Não avalia guards
    - Não transiciona componentes
    - Não persiste configuração

Este módulo existe para garantir localização previsível
e propriedade explícita dos componentes registrados.
"""

from __future__ import annotations

import threading
from typing import Dict, List, Optional, Union

from atlas_lifecycle.core.errors import not_found
from atlas_lifecycle.core.exceptions import NotFound
from atlas_lifecycle.core.graph.connections import InMemoryConnectionIndex
from atlas_lifecycle.core.model.components import ControllerServiceNode, ProcessorNode


Component = Union[ProcessorNode, ControllerServiceNode]


class DuplicateComponentIdError(ValueError):
    """
    Exceção levantada quando se tenta registrar dois componentes com o mesmo id.

    A duplicidade é tratada como erro fatal de registro; nenhum registro
    parcial é aceito.
    """


class ComponentRegistry:
    """
    Registro canônico de processors e controller services.

    Além dos componentes, o registry mantém o índice de conexões do grafo
    (`connections`), consultado pelas regras de auto-terminação e pelo
    guard de remoção.
    """

    def __init__(self, connections: Optional[InMemoryConnectionIndex] = None) -> None:
        self._groups: Dict[str, Dict[str, ProcessorNode]] = {}
        self._services: Dict[str, ControllerServiceNode] = {}
        self._lock = threading.RLock()
        self.connections = connections if connections is not None else InMemoryConnectionIndex()

    # -----------------------------
    # Registro (dono do grafo)
    # -----------------------------
    def _ensure_unique(self, component_id: str) -> None:
        if not isinstance(component_id, str) or not component_id.strip():
            raise ValueError("component.id must be a non-empty string")
        if component_id in self._services or any(component_id in g for g in self._groups.values()):
            raise DuplicateComponentIdError(f"Duplicate component id: {component_id}")

    def add_processor(self, processor: ProcessorNode) -> ProcessorNode:
        with self._lock:
            self._ensure_unique(processor.id)
            self._groups.setdefault(processor.group_id, {})[processor.id] = processor
        return processor

    def add_controller_service(self, service: ControllerServiceNode) -> ControllerServiceNode:
        with self._lock:
            self._ensure_unique(service.id)
            self._services[service.id] = service
        return service

    def remove_processor(self, group_id: str, processor_id: str) -> ProcessorNode:
        with self._lock:
            processor = self.find_processor(group_id, processor_id)
            del self._groups[group_id][processor_id]
            return processor

    def remove_controller_service(self, service_id: str) -> ControllerServiceNode:
        with self._lock:
            service = self.find_controller_service(service_id)
            del self._services[service_id]
            return service

    # -----------------------------
    # Consulta
    # -----------------------------
    def has_processor(self, group_id: str, processor_id: str) -> bool:
        with self._lock:
            group = self._groups.get(group_id)
            return group is not None and processor_id in group

    def has_controller_service(self, service_id: str) -> bool:
        with self._lock:
            return service_id in self._services

    def find_processor(self, group_id: str, processor_id: str) -> ProcessorNode:
        with self._lock:
            group = self._groups.get(group_id)
            if group is None or processor_id not in group:
                raise NotFound.from_payload(
                    not_found(component_id=processor_id, kind="processor", group_id=group_id)
                )
            return group[processor_id]

    def find_controller_service(self, service_id: str) -> ControllerServiceNode:
        with self._lock:
            service = self._services.get(service_id)
            if service is None:
                raise NotFound.from_payload(not_found(component_id=service_id, kind="controller service"))
            return service

    def find_component(self, component_id: str, group_id: Optional[str] = None) -> Component:
        """Localiza um componente pelo id; `group_id` restringe a busca de processors."""
        with self._lock:
            if group_id is not None:
                return self.find_processor(group_id, component_id)
            if component_id in self._services:
                return self._services[component_id]
            for group in self._groups.values():
                if component_id in group:
                    return group[component_id]
            raise NotFound.from_payload(not_found(component_id=component_id, kind="component"))

    def get_processors(self, group_id: Optional[str] = None) -> List[ProcessorNode]:
        with self._lock:
            if group_id is not None:
                if group_id not in self._groups:
                    raise NotFound.from_payload(not_found(component_id=group_id, kind="process group"))
                return list(self._groups[group_id].values())
            return [p for g in self._groups.values() for p in g.values()]

    def get_controller_services(self) -> List[ControllerServiceNode]:
        with self._lock:
            return list(self._services.values())

    def all_components(self) -> List[Component]:
        with self._lock:
            return [*self.get_controller_services(), *self.get_processors()]
