# tests/core/validation/test_rules.py
"""
Testes das regras de validação de campos.

As regras são funções puras: recebem o componente (sem mutá-lo) e o
change set, e acumulam violações em um ValidationResult.

Cobertura:
    - concurrent tasks conforme a estratégia efetiva
    - scheduling period como duração ou cron (fail-fast)
    - estado alvo de processors e services
    - propriedades (allowable values, obrigatórias, referências)
    - auto-terminação com conexão viva
    - ciclo de referências entre services
"""

import pytest

try:
    from atlas_lifecycle.core.graph.connections import InMemoryConnectionIndex
    from atlas_lifecycle.core.model.changes import ControllerServiceChanges, ProcessorChanges
    from atlas_lifecycle.core.model.components import (
        Connection,
        ControllerServiceNode,
        ProcessorNode,
        PropertyDescriptor,
    )
    from atlas_lifecycle.core.model.types import SchedulingStrategy
    from atlas_lifecycle.core.validation.result import STRUCTURAL
    from atlas_lifecycle.core.validation.rules import (
        validate_processor_changes,
        validate_service_changes,
    )
except Exception as e:  # noqa: BLE001
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing validation rules. Implement:\n"
            "- src/atlas_lifecycle/core/validation/rules.py\n"
            f"Import error: {_IMPORT_ERR}"
        )


def _processor(**fields):
    return ProcessorNode(
        id="p1",
        name="p1",
        property_descriptors={
            "Service": PropertyDescriptor(name="Service", identifies_controller_service=True),
            "Mode": PropertyDescriptor(name="Mode", allowable_values=("fast", "safe")),
            "Directory": PropertyDescriptor(name="Directory", required=True),
        },
        **fields,
    )


def _validate(processor, connections=None, known_services=(), **changes):
    return validate_processor_changes(
        processor,
        ProcessorChanges(**changes),
        connections=connections or InMemoryConnectionIndex(),
        service_exists=lambda sid: sid in known_services,
    )


@pytest.mark.parametrize(
    "strategy, tasks, message",
    [
        ("TIMER_DRIVEN", 0, "Concurrent tasks must be greater than 0."),
        ("PRIMARY_NODE_ONLY", -2, "Concurrent tasks must be greater than 0."),
        ("EVENT_DRIVEN", -1, "Concurrent tasks must be greater or equal to 0."),
        ("TIMER_DRIVEN", "4", "Concurrent tasks must be an integer."),
        ("TIMER_DRIVEN", True, "Concurrent tasks must be an integer."),
    ],
)
def test_concurrent_tasks_by_strategy(strategy, tasks, message):
    _require_imports()
    result = _validate(_processor(), scheduling_strategy=strategy, concurrent_tasks=tasks)
    assert result.messages == [message]


@pytest.mark.parametrize("strategy, tasks", [("EVENT_DRIVEN", 0), ("CRON_DRIVEN", -5), ("TIMER_DRIVEN", 1)])
def test_concurrent_tasks_accepted(strategy, tasks):
    _require_imports()
    assert _validate(_processor(), scheduling_strategy=strategy, concurrent_tasks=tasks).ok


def test_strategy_rules_use_current_strategy_when_not_proposed():
    _require_imports()
    processor = _processor(scheduling_strategy=SchedulingStrategy.EVENT_DRIVEN)
    assert _validate(processor, concurrent_tasks=0).ok


def test_invalid_strategy_keeps_current_for_dependent_rules():
    _require_imports()
    result = _validate(_processor(), scheduling_strategy="SOMETIMES", concurrent_tasks=0)
    assert [v.field for v in result.violations] == ["scheduling_strategy", "concurrent_tasks"]


def test_timer_period_must_be_duration():
    _require_imports()
    result = _validate(_processor(), scheduling_period="0 0/5 * * * ?")
    assert result.messages == ["Scheduling period is not a valid time duration (ie 30 sec, 5 min)"]


def test_cron_period_fail_fast_discards_batch():
    _require_imports()
    result = _validate(
        _processor(),
        penalty_duration="bad",
        scheduling_strategy="CRON_DRIVEN",
        scheduling_period="* * *",
        run_duration_millis=-1,
    )

    assert result.violations == []
    assert result.malformed is not None
    assert result.malformed.field == "scheduling_period"
    assert result.malformed.value == "* * *"


def test_event_driven_ignores_scheduling_period():
    _require_imports()
    assert _validate(_processor(), scheduling_strategy="EVENT_DRIVEN", scheduling_period="whatever").ok


def test_penalty_message():
    _require_imports()
    result = _validate(_processor(), penalty_duration="5 lightyears")
    assert result.messages == ["Penalty duration is not a valid time duration (ie 30 sec, 5 min)"]


def test_invalid_processor_state_message():
    _require_imports()
    result = _validate(_processor(), state="PAUSED")
    assert result.messages == [
        "The specified processor state (PAUSED) is not valid. Valid options are 'RUNNING', 'STOPPED', and 'DISABLED'."
    ]


def test_run_duration_and_loss_tolerant():
    _require_imports()
    result = _validate(_processor(), run_duration_millis=-5, loss_tolerant="yes")
    assert [v.field for v in result.violations] == ["run_duration_millis", "loss_tolerant"]


def test_property_rules():
    _require_imports()
    result = _validate(
        _processor(),
        known_services=("svc",),
        properties={"Mode": "turbo", "Directory": None, "Service": "ghost", "Custom": "anything"},
    )

    assert result.messages == [
        "Property 'Mode': Value must be one of [fast, safe]",
        "Property 'Directory' is required and cannot be removed.",
        "Property 'Service' references unknown controller service 'ghost'.",
    ]


def test_clearing_service_reference_is_allowed():
    _require_imports()
    assert _validate(_processor(), properties={"Service": ""}).ok


def test_auto_termination_with_live_connection_is_structural():
    _require_imports()
    processor = _processor(relationships={"success", "failure"})
    connections = InMemoryConnectionIndex()
    connections.add(Connection(id="c1", source_id="p1", relationship="success", destination_id="p2"))

    result = _validate(processor, connections=connections, auto_terminated_relationships=["failure", "success"])

    assert len(result.violations) == 1
    assert result.violations[0].kind == STRUCTURAL
    assert result.violations[0].value == "success"


def test_auto_termination_rejects_plain_string():
    _require_imports()
    result = _validate(_processor(), auto_terminated_relationships="success")
    assert result.violations[0].field == "auto_terminated_relationships"


def _service(service_id, **properties):
    return ControllerServiceNode(
        id=service_id,
        name=service_id,
        properties=dict(properties),
        property_descriptors={"Service": PropertyDescriptor(name="Service", identifies_controller_service=True)},
    )


def test_service_target_state():
    _require_imports()
    result = validate_service_changes(
        _service("a"),
        ControllerServiceChanges(state="DISABLING"),
        service_exists=lambda sid: True,
    )
    assert result.messages == ["Controller Service state: Value must be one of [ENABLED, DISABLED]"]


def test_service_reference_cycle():
    """
    a → b → c; propor c → a fecharia o ciclo.
    """
    _require_imports()
    graph = {"a": {"b"}, "b": {"c"}, "c": set()}
    c = _service("c")

    result = validate_service_changes(
        c,
        ControllerServiceChanges(properties={"Service": "a"}),
        service_exists=lambda sid: sid in graph,
        references_of=lambda sid: set(graph.get(sid, set())),
    )

    assert len(result.violations) == 1
    assert result.violations[0].kind == STRUCTURAL
    assert "reference cycle" in result.violations[0].message


def test_service_self_reference_is_field_violation():
    _require_imports()
    result = validate_service_changes(
        _service("a"),
        ControllerServiceChanges(properties={"Service": "a"}),
        service_exists=lambda sid: True,
        references_of=lambda sid: set(),
    )
    assert result.messages == ["Property 'Service' cannot reference the component itself."]
