# src/atlas_lifecycle/core/coordinator/applier.py
"""
Configuration Applier.

Aplica um change set já validado a um componente, em ordem fixa:

    1. scheduling strategy
    2. comments, annotation data
    3. concurrent tasks, scheduling period, penalty, yield, run duration,
       bulletin level, loss tolerant
    4. properties (`None` remove a propriedade)
    5. auto-terminated relationships (substituição total)
    6. position, style
    7. name

Invariantes:
    - Só é chamado depois de toda validação e guard passarem
    - Campos não informados (`None`) permanecem intocados
    - Change set vazio é no-op

Limites explícitos:
    - Não valida
    - Não altera estado de agendamento
"""

from __future__ import annotations

from typing import List, Mapping, Optional

from atlas_lifecycle.core.model.changes import ControllerServiceChanges, ProcessorChanges
from atlas_lifecycle.core.model.components import ProcessorNode, _ComponentNode
from atlas_lifecycle.core.model.types import BulletinLevel, SchedulingStrategy


def _apply_properties(component: _ComponentNode, properties: Optional[Mapping[str, Optional[str]]]) -> bool:
    if properties is None:
        return False
    for name, value in properties.items():
        if value is None:
            component.remove_property(name)
        else:
            component.set_property(name, value)
    return True


def apply_processor_changes(processor: ProcessorNode, changes: ProcessorChanges) -> List[str]:
    """
    Aplica o change set ao processor.

    Returns:
        List[str]: Campos aplicados, na ordem de aplicação.
    """
    applied: List[str] = []

    if changes.scheduling_strategy is not None:
        processor.scheduling_strategy = SchedulingStrategy.parse(changes.scheduling_strategy)
        applied.append("scheduling_strategy")

    if changes.comments is not None:
        processor.comments = changes.comments
        applied.append("comments")
    if changes.annotation_data is not None:
        processor.annotation_data = changes.annotation_data
        applied.append("annotation_data")

    if changes.concurrent_tasks is not None:
        processor.concurrent_tasks = changes.concurrent_tasks
        applied.append("concurrent_tasks")
    if changes.scheduling_period is not None:
        processor.scheduling_period = changes.scheduling_period
        applied.append("scheduling_period")
    if changes.penalty_duration is not None:
        processor.penalty_duration = changes.penalty_duration
        applied.append("penalty_duration")
    if changes.yield_duration is not None:
        processor.yield_duration = changes.yield_duration
        applied.append("yield_duration")
    if changes.run_duration_millis is not None:
        processor.run_duration_millis = changes.run_duration_millis
        applied.append("run_duration_millis")
    if changes.bulletin_level is not None:
        processor.bulletin_level = BulletinLevel.parse(changes.bulletin_level)
        applied.append("bulletin_level")
    if changes.loss_tolerant is not None:
        processor.loss_tolerant = changes.loss_tolerant
        applied.append("loss_tolerant")

    if _apply_properties(processor, changes.properties):
        applied.append("properties")

    if changes.auto_terminated_relationships is not None:
        processor.auto_terminated_relationships = set(changes.auto_terminated_relationships)
        applied.append("auto_terminated_relationships")

    if changes.position is not None:
        processor.position = changes.position
        applied.append("position")
    if changes.style is not None:
        processor.style = dict(changes.style)
        applied.append("style")

    if changes.name is not None:
        processor.name = changes.name
        applied.append("name")

    return applied


def apply_service_changes(service: _ComponentNode, changes: ControllerServiceChanges) -> List[str]:
    applied: List[str] = []

    if changes.comments is not None:
        service.comments = changes.comments
        applied.append("comments")
    if changes.annotation_data is not None:
        service.annotation_data = changes.annotation_data
        applied.append("annotation_data")

    if _apply_properties(service, changes.properties):
        applied.append("properties")

    if changes.name is not None:
        service.name = changes.name
        applied.append("name")

    return applied
