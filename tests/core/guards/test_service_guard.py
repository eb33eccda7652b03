# tests/core/guards/test_service_guard.py
"""
Testes do guard de controller services.
"""

import pytest

try:
    from atlas_lifecycle.core.graph.references import RegistryReferenceGraph
    from atlas_lifecycle.core.guards import STRUCTURAL, ControllerServiceGuard, StateView
    from atlas_lifecycle.core.model.types import ControllerServiceState, ScheduledState
except Exception as e:  # noqa: BLE001
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing guards. Implement:\n"
            "- src/atlas_lifecycle/core/guards/service.py (ControllerServiceGuard)\n"
            f"Import error: {_IMPORT_ERR}"
        )


@pytest.fixture
def guard():
    return ControllerServiceGuard()


@pytest.fixture
def view(registry):
    return StateView(registry, RegistryReferenceGraph(registry))


def test_services_are_never_started_or_stopped(guard, view, make_service):
    _require_imports()
    s = make_service("svc")
    assert not guard.can_start(s, view)
    assert not guard.can_stop(s, view)


def test_enable_requires_referenced_services_enabled(guard, view, make_service):
    _require_imports()
    make_service("base")
    dependent = make_service("dependent", references="base")

    assert not guard.can_enable(dependent, view)
    view.assume("base", ControllerServiceState.ENABLED)
    assert guard.can_enable(dependent, view)


def test_enable_with_validation_errors_is_denied(guard, view, make_service):
    _require_imports()
    s = make_service("svc", validation_errors=["URL is required"])
    assert "URL is required" in guard.can_enable(s, view).reason


@pytest.mark.parametrize("state", ["ENABLING", "DISABLING"])
def test_transitional_states_deny_everything(guard, view, make_service, state):
    _require_imports()
    s = make_service("svc", service_state=ControllerServiceState.parse(state))

    assert not guard.can_enable(s, view)
    assert not guard.can_disable(s, view)
    assert not guard.can_update(s, view)


def test_disable_blocked_by_active_referencing_components(guard, view, make_service, make_processor):
    _require_imports()
    s = make_service("svc", service_state=ControllerServiceState.ENABLED)
    make_service("dep", references="svc", service_state=ControllerServiceState.ENABLED)
    make_processor("p1", service="svc", scheduled_state=ScheduledState.RUNNING)
    make_processor("p2", service="svc")

    decision = guard.can_disable(s, view)
    assert not decision
    assert decision.related == ("dep", "p1")

    view.assume("dep", ControllerServiceState.DISABLED)
    view.assume("p1", ScheduledState.STOPPED)
    assert guard.can_disable(s, view)


def test_update_requires_disabled(guard, view, make_service):
    _require_imports()
    assert guard.can_update(make_service("a"), view)
    assert not guard.can_update(make_service("b", service_state=ControllerServiceState.ENABLED), view)


def test_delete_with_referencing_components_is_structural(guard, view, make_service, make_processor):
    _require_imports()
    s = make_service("svc")
    make_processor("p1", service="svc")

    decision = guard.can_delete(s, view)
    assert decision.conflict == STRUCTURAL
    assert decision.related == ("p1",)


def test_disable_blocked_by_referencing_component_in_flight(guard, registry, make_service, make_processor):
    """Um start ainda aguardando o engine conta como dependente ativo."""
    _require_imports()
    s = make_service("svc", service_state=ControllerServiceState.ENABLED)
    make_processor("p1", service="svc")
    view = StateView(registry, RegistryReferenceGraph(registry), in_flight=lambda cid: cid == "p1")

    decision = guard.can_disable(s, view)
    assert not decision
    assert decision.related == ("p1",)


def test_enable_denied_while_referenced_service_in_flight(guard, registry, make_service):
    _require_imports()
    make_service("base", service_state=ControllerServiceState.ENABLED)
    dependent = make_service("dependent", references="base")
    view = StateView(registry, RegistryReferenceGraph(registry), in_flight=lambda cid: cid == "base")

    decision = guard.can_enable(dependent, view)
    assert not decision
    assert decision.related == ("base",)
    assert "transition in progress" in decision.reason
