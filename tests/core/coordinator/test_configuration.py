# tests/core/coordinator/test_configuration.py
"""
Testes de configuração via coordenador: proposta, verificação, aplicação
e remoção.

Os testes asseguram que:
- `propose_configuration` nunca levanta por problemas de validação
- violações comuns são reportadas em lote
- auto-terminação com conexão viva é um conflito estrutural
- `verify_update` e `verify_delete` não mutam nada
- cada decisão do coordenador aparece no journal
"""

import pytest

try:
    from atlas_lifecycle.core.exceptions import (
        InvalidField,
        StateConflict,
        StructuralConflict,
    )
    from atlas_lifecycle.core.model.changes import ProcessorChanges
    from atlas_lifecycle.core.model.components import Connection
    from atlas_lifecycle.core.model.types import (
        BulletinLevel,
        ControllerServiceState,
        ScheduledState,
        SchedulingStrategy,
    )
except Exception as e:  # noqa: BLE001
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing coordinator modules. Implement:\n"
            "- src/atlas_lifecycle/core/coordinator/coordinator.py\n"
            "- src/atlas_lifecycle/core/coordinator/applier.py\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_propose_configuration_reports_batch_without_raising(coordinator, make_processor):
    _require_imports()
    p = make_processor("p1")

    result = coordinator.propose_configuration(
        "p1",
        {
            "penalty_duration": "soon",
            "yield_duration": "1 fortnight",
            "bulletin_level": "LOUD",
            "properties": {"Mode": "turbo", "Directory": None},
        },
    )

    assert result.ok is False
    assert [v.field for v in result.violations] == [
        "penalty_duration",
        "yield_duration",
        "bulletin_level",
        "properties.Mode",
        "properties.Directory",
    ]
    assert "Property 'Mode': Value must be one of [fast, safe]" in result.messages
    assert "Property 'Directory' is required and cannot be removed." in result.messages
    assert p.penalty_duration == "30 sec"


def test_propose_configuration_with_unknown_field(coordinator, make_processor):
    _require_imports()
    make_processor("p1")

    result = coordinator.propose_configuration("p1", {"colour": "blue"})

    assert result.ok is False
    assert result.violations[0].field == "changes"


def test_propose_configuration_ok(coordinator, make_processor):
    _require_imports()
    make_processor("p1")

    result = coordinator.propose_configuration("p1", ProcessorChanges(concurrent_tasks=3))

    assert result.ok is True
    assert result.messages == []


def test_apply_configuration_applies_all_fields(coordinator, make_processor):
    _require_imports()
    p = make_processor("p1")

    coordinator.apply_configuration(
        "p1",
        {
            "name": "Fetch",
            "scheduling_strategy": "cron_driven",
            "scheduling_period": "0 0/5 * * * ?",
            "bulletin_level": "error",
            "properties": {"Mode": "safe"},
        },
    )

    assert p.name == "Fetch"
    assert p.scheduling_strategy == SchedulingStrategy.CRON_DRIVEN
    assert p.scheduling_period == "0 0/5 * * * ?"
    assert p.bulletin_level == BulletinLevel.ERROR
    assert p.properties["Mode"] == "safe"
    assert p.scheduled_state == ScheduledState.STOPPED


def test_apply_configuration_removes_optional_property(coordinator, make_processor):
    _require_imports()
    p = make_processor("p1", properties={"Mode": "fast"})

    coordinator.apply_configuration("p1", {"properties": {"Mode": None}})

    assert "Mode" not in p.properties


def test_apply_configuration_honors_state_in_change_set(coordinator, engine, make_processor):
    _require_imports()
    p = make_processor("p1")

    coordinator.apply_configuration("p1", {"concurrent_tasks": 2, "state": "RUNNING"})

    assert p.concurrent_tasks == 2
    assert p.scheduled_state == ScheduledState.RUNNING
    assert engine.calls == [("start", "p1")]


def test_batch_violations_leave_component_untouched(coordinator, make_processor):
    _require_imports()
    p = make_processor("p1")

    with pytest.raises(InvalidField) as exc:
        coordinator.apply_configuration(
            "p1",
            {"concurrent_tasks": 0, "penalty_duration": "later", "comments": "ok"},
        )

    fields = [v["field"] for v in exc.value.details["violations"]]
    assert fields == ["penalty_duration", "concurrent_tasks"]
    assert p.comments is None
    assert p.concurrent_tasks == 1


def test_empty_change_set_is_a_no_op(coordinator, engine, make_processor):
    _require_imports()
    p = make_processor("p1", scheduled_state=ScheduledState.RUNNING)

    out = coordinator.apply_configuration("p1", {})

    assert out is p
    assert p.scheduled_state == ScheduledState.RUNNING
    assert engine.calls == []


def test_auto_terminate_with_live_connection_is_structural(coordinator, registry, make_processor):
    """
    Auto-terminar `success` com uma conexão viva falha; removida a
    conexão, a mesma requisição é aceita.
    """
    _require_imports()
    p = make_processor("p1")
    make_processor("p2")
    registry.connections.add(Connection(id="c1", source_id="p1", relationship="success", destination_id="p2"))

    with pytest.raises(StructuralConflict) as exc:
        coordinator.apply_configuration("p1", {"auto_terminated_relationships": ["success"]})

    assert exc.value.message == (
        "Cannot Auto-Terminate 'success' relationship because a Connection already exists with this relationship"
    )
    assert p.auto_terminated_relationships == set()

    registry.connections.remove("c1")
    coordinator.apply_configuration("p1", {"auto_terminated_relationships": ["success"]})
    assert p.auto_terminated_relationships == {"success"}


def test_structural_and_field_violations_together_are_invalid_field(coordinator, registry, make_processor):
    _require_imports()
    make_processor("p1")
    make_processor("p2")
    registry.connections.add(Connection(id="c1", source_id="p1", relationship="success", destination_id="p2"))

    with pytest.raises(InvalidField) as exc:
        coordinator.apply_configuration(
            "p1",
            {"penalty_duration": "never", "auto_terminated_relationships": ["success"]},
        )

    kinds = [v["kind"] for v in exc.value.details["violations"]]
    assert kinds == ["field", "structural"]


def test_property_referencing_unknown_service(coordinator, make_processor):
    _require_imports()
    make_processor("p1")

    with pytest.raises(InvalidField) as exc:
        coordinator.apply_configuration("p1", {"properties": {"Service": "ghost"}})

    assert "references unknown controller service" in exc.value.details["violations"][0]["message"]


def test_service_property_closing_a_cycle_is_structural(coordinator, make_service):
    _require_imports()
    make_service("a")
    b = make_service("b", references="a")
    a_service = coordinator.registry.find_controller_service("a")

    with pytest.raises(StructuralConflict) as exc:
        coordinator.apply_configuration("a", {"properties": {"Service": "b"}})

    assert "reference cycle" in exc.value.message
    assert "Service" not in a_service.properties
    assert b.properties["Service"] == "a"


def test_verify_update_does_not_mutate(coordinator, engine, make_service, make_processor):
    _require_imports()
    make_service("svc", service_state=ControllerServiceState.ENABLED)
    p = make_processor("p1", service="svc")

    coordinator.verify_update("p1", {"state": "RUNNING", "comments": "checked"})

    assert p.scheduled_state == ScheduledState.STOPPED
    assert p.comments is None
    assert engine.calls == []


def test_verify_update_raises_first_rejection(coordinator, make_processor):
    _require_imports()
    make_processor("p1", scheduled_state=ScheduledState.DISABLED)

    with pytest.raises(StateConflict):
        coordinator.verify_update("p1", {"state": "RUNNING"})


def test_verify_delete(coordinator, registry, make_service, make_processor):
    _require_imports()
    make_service("svc")
    make_processor("p1", service="svc")
    make_processor("p2")
    make_processor("p3", scheduled_state=ScheduledState.RUNNING)
    registry.connections.add(Connection(id="c1", source_id="p2", relationship="success", destination_id="p1"))

    with pytest.raises(StructuralConflict) as exc:
        coordinator.verify_delete("svc")
    assert exc.value.details["related"] == ["p1"]

    with pytest.raises(StructuralConflict) as exc:
        coordinator.verify_delete("p2")
    assert exc.value.details["related"] == ["c1"]

    with pytest.raises(StateConflict):
        coordinator.verify_delete("p3")

    registry.connections.remove("c1")
    coordinator.verify_delete("p2")


def test_journal_records_single_component_decisions(coordinator, engine, make_processor):
    _require_imports()
    make_processor("p1")
    make_processor("p2", scheduled_state=ScheduledState.DISABLED)

    coordinator.request_state("p1", "RUNNING", {"comments": "go"})
    with pytest.raises(StateConflict):
        coordinator.request_state("p2", "RUNNING")

    events = coordinator.journal.events
    assert [e["event_type"] for e in events] == [
        "transition_requested",
        "configuration_applied",
        "transition_applied",
        "transition_requested",
        "transition_rejected",
    ]
    assert events[2]["payload"] == {"action": "start", "previous_state": "STOPPED", "state": "RUNNING"}
    assert events[4]["component_id"] == "p2"
    assert events[4]["payload"]["type"] == "STATE_CONFLICT"
    assert coordinator.journal.header["config_hash"] == coordinator.settings.config_hash


def test_journal_can_be_disabled(registry, engine, make_processor):
    _require_imports()
    from atlas_lifecycle.core.config.settings import settings_from_config
    from atlas_lifecycle.core.coordinator.coordinator import LifecycleCoordinator

    coordinator = LifecycleCoordinator(
        registry,
        engine,
        settings=settings_from_config({"journal": {"enabled": False}}),
    )
    make_processor("p1")

    coordinator.request_state("p1", "RUNNING")

    assert coordinator.journal is None
