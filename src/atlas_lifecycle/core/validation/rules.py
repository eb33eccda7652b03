# src/atlas_lifecycle/core/validation/rules.py
"""
Regras de validação de campos propostos.

Este módulo reúne as funções puras que verificam, campo a campo, um
change set proposto contra a estratégia de agendamento *efetiva* do
processor: a proposta, quando presente e válida, ou a atual.

Regras implementadas:
    - penalty / yield duration → gramática de duração
    - bulletin level → enum fechado
    - scheduling strategy → enum fechado
    - concurrent tasks → > 0 (TIMER_DRIVEN / PRIMARY_NODE_ONLY),
      >= 0 (EVENT_DRIVEN), sem restrição (CRON_DRIVEN)
    - scheduling period → duração (TIMER_DRIVEN / PRIMARY_NODE_ONLY) ou
      expressão cron Quartz (CRON_DRIVEN, fail-fast)
    - run duration → inteiro >= 0
    - properties → allowable values, referência a service existente,
      propriedades obrigatórias não removíveis
    - auto-terminated relationships → nenhuma conexão viva (estrutural)
    - referências entre services → nenhum ciclo (estrutural)
    - estado alvo → valor conhecido e endereçável

Decisões arquiteturais:
    - Funções não mutam componentes; apenas acumulam em ValidationResult
    - A única regra fail-fast é o parse de cron
    - A ordem de avaliação é fixa e determinística

Invariantes:
    - O mesmo (componente, change set) sempre produz o mesmo resultado
    - Regras dependentes da estratégia usam a estratégia efetiva

Limites explícitos:
    - Não avalia guards de transição
    - Não aplica mudanças
    - Não chama o engine

Este módulo existe para que toda validação de campo aconteça
antes de qualquer mutação, em uma única passada.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Optional, Set

from atlas_lifecycle.core.graph.connections import ConnectionIndex
from atlas_lifecycle.core.model.changes import ControllerServiceChanges, ProcessorChanges
from atlas_lifecycle.core.model.components import ControllerServiceNode, ProcessorNode, _ComponentNode
from atlas_lifecycle.core.model.types import (
    REQUESTABLE_SERVICE_STATES,
    BulletinLevel,
    ControllerServiceState,
    ScheduledState,
    SchedulingStrategy,
)

from .cron import CronParseError, parse_cron_expression
from .durations import is_valid_duration
from .result import STRUCTURAL, ValidationResult


ServiceExists = Callable[[str], bool]
ReferencesOf = Callable[[str], Set[str]]

DURATION_HINT = "(ie 30 sec, 5 min)"


def validate_duration(result: ValidationResult, field_name: str, label: str, value: Any) -> None:
    if value is None:
        return
    if not is_valid_duration(value):
        result.add(field_name, f"{label} is not a valid time duration {DURATION_HINT}", value=value)


def validate_bulletin_level(result: ValidationResult, value: Any) -> None:
    if value is None:
        return
    try:
        BulletinLevel.parse(value)
    except ValueError:
        result.add(
            "bulletin_level",
            f"Bulletin level: Value must be one of [{', '.join(BulletinLevel.names())}]",
            value=value,
        )


def resolve_strategy(
    result: ValidationResult,
    current: SchedulingStrategy,
    proposed: Any,
) -> SchedulingStrategy:
    """Devolve a estratégia efetiva; proposta inválida é reportada e a atual mantida."""
    if proposed is None:
        return current
    try:
        return SchedulingStrategy.parse(proposed)
    except ValueError:
        result.add(
            "scheduling_strategy",
            f"Scheduling strategy: Value must be one of [{', '.join(SchedulingStrategy.names())}]",
            value=proposed,
        )
        return current


def validate_concurrent_tasks(result: ValidationResult, strategy: SchedulingStrategy, value: Any) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        result.add("concurrent_tasks", "Concurrent tasks must be an integer.", value=value)
        return

    if strategy.is_timer_like and value <= 0:
        result.add("concurrent_tasks", "Concurrent tasks must be greater than 0.", value=value)
    elif strategy == SchedulingStrategy.EVENT_DRIVEN and value < 0:
        result.add("concurrent_tasks", "Concurrent tasks must be greater or equal to 0.", value=value)


def validate_scheduling_period(result: ValidationResult, strategy: SchedulingStrategy, value: Any) -> bool:
    """
    Valida o período de agendamento contra a estratégia efetiva.

    Returns:
        bool: False quando a validação deve ser interrompida (cron malformado).
    """
    if value is None:
        return True

    if strategy.is_timer_like:
        validate_duration(result, "scheduling_period", "Scheduling period", value)
    elif strategy == SchedulingStrategy.CRON_DRIVEN:
        try:
            parse_cron_expression(value)
        except CronParseError as e:
            result.fail_fast("scheduling_period", str(e), value=value)
            return False
    return True


def validate_run_duration(result: ValidationResult, value: Any) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        result.add("run_duration_millis", "Run duration must be a non-negative integer (millis).", value=value)


def validate_loss_tolerant(result: ValidationResult, value: Any) -> None:
    if value is not None and not isinstance(value, bool):
        result.add("loss_tolerant", "Loss tolerant must be a boolean.", value=value)


def validate_properties(
    result: ValidationResult,
    component: _ComponentNode,
    properties: Optional[Mapping[str, Optional[str]]],
    service_exists: ServiceExists,
) -> None:
    if properties is None:
        return

    for name, value in properties.items():
        if not name:
            result.add("properties", "Property names must be non-empty strings.", value=name)
            continue

        descriptor = component.descriptor_for(name)

        if value is None:
            if descriptor is not None and descriptor.required:
                result.add(f"properties.{name}", f"Property '{name}' is required and cannot be removed.", value=name)
            continue

        if not isinstance(value, str):
            result.add(f"properties.{name}", f"Property '{name}' must be a string value.", value=value)
            continue

        if descriptor is None:
            continue

        if descriptor.allowable_values is not None and value not in descriptor.allowable_values:
            result.add(
                f"properties.{name}",
                f"Property '{name}': Value must be one of [{', '.join(descriptor.allowable_values)}]",
                value=value,
            )
        elif descriptor.identifies_controller_service and value and not service_exists(value):
            result.add(
                f"properties.{name}",
                f"Property '{name}' references unknown controller service '{value}'.",
                value=value,
            )
        elif descriptor.identifies_controller_service and value == component.id:
            result.add(f"properties.{name}", f"Property '{name}' cannot reference the component itself.", value=value)


def validate_auto_termination(
    result: ValidationResult,
    processor: ProcessorNode,
    relationships: Optional[Iterable[str]],
    connections: ConnectionIndex,
) -> None:
    if relationships is None:
        return
    if isinstance(relationships, str):
        result.add("auto_terminated_relationships", "Auto-terminated relationships must be a set of names.", value=relationships)
        return

    for name in sorted(set(relationships)):
        live = connections.connections_for(processor, name)
        if live:
            result.add(
                "auto_terminated_relationships",
                f"Cannot Auto-Terminate '{name}' relationship because a Connection already exists with this relationship",
                kind=STRUCTURAL,
                value=name,
            )


def validate_processor_target(result: ValidationResult, value: Any) -> Optional[ScheduledState]:
    if value is None:
        return None
    try:
        return ScheduledState.parse(value)
    except ValueError:
        result.add(
            "state",
            f"The specified processor state ({value}) is not valid. "
            f"Valid options are 'RUNNING', 'STOPPED', and 'DISABLED'.",
            value=value,
        )
        return None


def validate_service_target(result: ValidationResult, value: Any) -> Optional[ControllerServiceState]:
    if value is None:
        return None
    try:
        target = ControllerServiceState.parse(value)
    except ValueError:
        target = None
    if target not in REQUESTABLE_SERVICE_STATES:
        result.add("state", "Controller Service state: Value must be one of [ENABLED, DISABLED]", value=value)
        return None
    return target


def validate_processor_changes(
    processor: ProcessorNode,
    changes: ProcessorChanges,
    *,
    connections: ConnectionIndex,
    service_exists: ServiceExists,
) -> ValidationResult:
    """
    Valida um change set proposto para um processor.

    A ordem de avaliação é fixa; o parse de cron interrompe a validação
    e descarta violações já acumuladas.

    Args:
        processor (ProcessorNode): Processor alvo (não é mutado).
        changes (ProcessorChanges): Mudanças propostas.
        connections (ConnectionIndex): Índice de conexões vivas.
        service_exists (Callable[[str], bool]): Existência de controller services.

    Returns:
        ValidationResult: Resultado agregado da validação.
    """
    result = ValidationResult(component_id=processor.id)

    validate_processor_target(result, changes.state)
    validate_duration(result, "penalty_duration", "Penalty duration", changes.penalty_duration)
    validate_duration(result, "yield_duration", "Yield duration", changes.yield_duration)
    validate_bulletin_level(result, changes.bulletin_level)

    strategy = resolve_strategy(result, processor.scheduling_strategy, changes.scheduling_strategy)
    validate_concurrent_tasks(result, strategy, changes.concurrent_tasks)
    if not validate_scheduling_period(result, strategy, changes.scheduling_period):
        return result

    validate_run_duration(result, changes.run_duration_millis)
    validate_loss_tolerant(result, changes.loss_tolerant)
    validate_properties(result, processor, changes.properties, service_exists)
    validate_auto_termination(result, processor, changes.auto_terminated_relationships, connections)
    return result


def validate_reference_cycle(
    result: ValidationResult,
    service: ControllerServiceNode,
    properties: Optional[Mapping[str, Optional[str]]],
    references_of: ReferencesOf,
) -> None:
    """Rejeita propriedades que fechariam um ciclo no grafo de referências (estrutural)."""
    if not properties:
        return

    for name, value in sorted(properties.items()):
        descriptor = service.descriptor_for(name)
        if descriptor is None or not descriptor.identifies_controller_service:
            continue
        if not isinstance(value, str) or not value or value == service.id:
            continue

        pending = [value]
        visited = {value}
        while pending:
            current = pending.pop()
            if current == service.id:
                result.add(
                    f"properties.{name}",
                    f"Property '{name}' would create a reference cycle through controller service '{value}'.",
                    kind=STRUCTURAL,
                    value=value,
                )
                break
            for nxt in sorted(references_of(current) - visited):
                visited.add(nxt)
                pending.append(nxt)


def validate_service_changes(
    service: ControllerServiceNode,
    changes: ControllerServiceChanges,
    *,
    service_exists: ServiceExists,
    references_of: Optional[ReferencesOf] = None,
) -> ValidationResult:
    """Valida um change set proposto para um controller service."""
    result = ValidationResult(component_id=service.id)
    validate_service_target(result, changes.state)
    validate_properties(result, service, changes.properties, service_exists)
    if references_of is not None:
        validate_reference_cycle(result, service, changes.properties, references_of)
    return result
