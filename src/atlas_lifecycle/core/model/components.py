# src/atlas_lifecycle/core/model/components.py
"""
Componentes gerenciados pelo coordenador de ciclo de vida.

Este módulo define as estruturas mutáveis que representam os componentes
de um grafo de dataflow em execução, na forma em que o coordenador os
enxerga:
    - ProcessorNode: componente agendável com relationships
    - ControllerServiceNode: componente compartilhado e referenciável
    - Connection: vínculo de uma relationship a um componente downstream
    - PropertyDescriptor: metadados de uma propriedade configurável
    - Position: metadados de exibição

Decisões arquiteturais:
    - Componentes são criados por uma factory externa e apenas
      emprestados ao coordenador (nunca criados ou destruídos por ele)
    - Propriedades são strings; chave ausente e valor limpo são distintos
    - Referências entre componentes são derivadas de propriedades cujo
      descriptor identifica um controller service

Invariantes:
    - `id` é opaco e único dentro do registry
    - Uma relationship nunca é auto-terminada e ligada a uma conexão viva
      ao mesmo tempo (garantido pelas regras de validação)

Limites explícitos:
    - Não decide transições
    - Não executa lógica de negócio de processors
    - Não persiste configuração

Este módulo existe para dar um modelo explícito,
testável e independente de transporte aos componentes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from .types import (
    BulletinLevel,
    ComponentKind,
    ControllerServiceState,
    ScheduledState,
    SchedulingStrategy,
)


@dataclass(frozen=True)
class Position:
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class PropertyDescriptor:
    """
    Metadados de uma propriedade configurável de um componente.

    Campos relevantes para o coordenador:
        - allowable_values: quando declarado, restringe os valores aceitos
        - required: a propriedade não pode ser removida
        - identifies_controller_service: o valor é o id de um controller
          service, e portanto define uma aresta de referência
    """

    name: str
    display_name: Optional[str] = None
    description: Optional[str] = None
    default_value: Optional[str] = None
    allowable_values: Optional[Tuple[str, ...]] = None
    required: bool = False
    sensitive: bool = False
    dynamic: bool = False
    supports_el: bool = False
    identifies_controller_service: bool = False


@dataclass(frozen=True)
class Connection:
    """Vínculo de uma relationship de um processor a um componente downstream."""

    id: str
    source_id: str
    relationship: str
    destination_id: str


@dataclass(eq=False)
class _ComponentNode:
    id: str
    name: str = ""
    comments: Optional[str] = None
    annotation_data: Optional[str] = None
    properties: Dict[str, str] = field(default_factory=dict)
    property_descriptors: Dict[str, PropertyDescriptor] = field(default_factory=dict)
    validation_errors: List[str] = field(default_factory=list)

    kind: ComponentKind = field(init=False)

    def descriptor_for(self, name: str) -> Optional[PropertyDescriptor]:
        return self.property_descriptors.get(name)

    def referenced_service_ids(self) -> Set[str]:
        """Ids de controller services identificados pelas propriedades do componente."""
        ids: Set[str] = set()
        for prop, value in self.properties.items():
            descriptor = self.property_descriptors.get(prop)
            if descriptor is None or not descriptor.identifies_controller_service:
                continue
            if value:
                ids.add(value)
        return ids

    def set_property(self, name: str, value: str) -> None:
        self.properties[name] = value

    def remove_property(self, name: str) -> None:
        self.properties.pop(name, None)

    def snapshot(self) -> Dict[str, Any]:
        raise NotImplementedError


@dataclass(eq=False)
class ProcessorNode(_ComponentNode):
    """
    Processor: componente agendável com relationships e estratégia de agendamento.

    O estado de agendamento (`scheduled_state`) só é alterado pelo
    coordenador, sob o lock de transição do componente.
    """

    group_id: str = "root"
    scheduled_state: ScheduledState = ScheduledState.STOPPED
    scheduling_strategy: SchedulingStrategy = SchedulingStrategy.TIMER_DRIVEN
    concurrent_tasks: int = 1
    scheduling_period: str = "0 sec"
    penalty_duration: str = "30 sec"
    yield_duration: str = "1 sec"
    run_duration_millis: int = 0
    bulletin_level: BulletinLevel = BulletinLevel.WARN
    loss_tolerant: bool = False
    relationships: Set[str] = field(default_factory=set)
    auto_terminated_relationships: Set[str] = field(default_factory=set)
    position: Position = field(default_factory=Position)
    style: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.kind = ComponentKind.PROCESSOR

    @property
    def state(self) -> ScheduledState:
        return self.scheduled_state

    def snapshot(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "group_id": self.group_id,
            "name": self.name,
            "state": self.scheduled_state.value,
            "scheduling_strategy": self.scheduling_strategy.value,
            "concurrent_tasks": self.concurrent_tasks,
            "scheduling_period": self.scheduling_period,
            "penalty_duration": self.penalty_duration,
            "yield_duration": self.yield_duration,
            "run_duration_millis": self.run_duration_millis,
            "bulletin_level": self.bulletin_level.value,
            "loss_tolerant": self.loss_tolerant,
            "comments": self.comments,
            "annotation_data": self.annotation_data,
            "properties": dict(self.properties),
            "auto_terminated_relationships": sorted(self.auto_terminated_relationships),
            "position": {"x": self.position.x, "y": self.position.y},
            "style": dict(self.style),
        }


@dataclass(eq=False)
class ControllerServiceNode(_ComponentNode):
    """
    Controller service: componente compartilhado com ciclo enable/disable próprio.

    `service_type` é informativo e usado apenas por consultas de lookup
    (ex.: ids de services de um determinado tipo).
    """

    service_type: str = ""
    service_state: ControllerServiceState = ControllerServiceState.DISABLED

    def __post_init__(self) -> None:
        self.kind = ComponentKind.CONTROLLER_SERVICE

    @property
    def state(self) -> ControllerServiceState:
        return self.service_state

    @property
    def is_active(self) -> bool:
        return self.service_state in (ControllerServiceState.ENABLED, ControllerServiceState.ENABLING)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "name": self.name,
            "service_type": self.service_type,
            "state": self.service_state.value,
            "comments": self.comments,
            "annotation_data": self.annotation_data,
            "properties": dict(self.properties),
        }
