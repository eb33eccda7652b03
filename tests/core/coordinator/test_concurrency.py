# tests/core/coordinator/test_concurrency.py
"""
Testes de exclusão mútua de transições.

O engine falso segura a chamada de um componente (`engine.hold`) até o
teste liberá-la, tornando determinístico o cenário "transição em
andamento".
"""

import threading

import pytest

try:
    from atlas_lifecycle.core.coordinator.locks import TransitionLocks
    from atlas_lifecycle.core.exceptions import CascadeFailure, StateConflict
    from atlas_lifecycle.core.model.types import ControllerServiceState, ScheduledState
except Exception as e:  # noqa: BLE001
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing lock modules. Implement:\n"
            "- src/atlas_lifecycle/core/coordinator/locks.py (TransitionLocks)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def _in_background(fn, *args, **kwargs):
    errors = []

    def run():
        try:
            fn(*args, **kwargs)
        except Exception as e:  # noqa: BLE001
            errors.append(e)

    t = threading.Thread(target=run, daemon=True)
    t.start()
    return t, errors


def test_second_request_during_transition_is_rejected(coordinator, engine, make_processor):
    """
    Enquanto o start de p1 aguarda o engine, um stop concorrente falha
    com StateConflict; depois da liberação o start conclui normalmente.
    """
    _require_imports()
    p = make_processor("p1")
    entered, release = engine.hold("p1")

    t, errors = _in_background(coordinator.request_state, "p1", "RUNNING")
    assert entered.wait(timeout=5)

    with pytest.raises(StateConflict) as exc:
        coordinator.request_state("p1", "STOPPED")
    assert exc.value.message == "A transition is already in progress for 'p1'"

    with pytest.raises(StateConflict):
        coordinator.verify_update("p1", {"comments": "x"})

    release.set()
    t.join(timeout=5)

    assert errors == []
    assert p.scheduled_state == ScheduledState.RUNNING
    assert engine.calls == [("start", "p1")]
    assert coordinator.locks.is_held("p1") is False


def test_other_components_are_not_blocked(coordinator, engine, make_processor):
    _require_imports()
    make_processor("p1")
    p2 = make_processor("p2")
    entered, release = engine.hold("p1")

    t, errors = _in_background(coordinator.request_state, "p1", "RUNNING")
    assert entered.wait(timeout=5)

    coordinator.request_state("p2", "RUNNING")
    assert p2.scheduled_state == ScheduledState.RUNNING

    release.set()
    t.join(timeout=5)
    assert errors == []


def test_cascade_over_member_in_flight_fails(coordinator, engine, make_service, make_processor):
    _require_imports()
    make_service("svc", service_state=ControllerServiceState.ENABLED)
    make_processor("p1", service="svc")
    p2 = make_processor("p2", service="svc")
    entered, release = engine.hold("p1")

    t, errors = _in_background(coordinator.request_state, "p1", "RUNNING")
    assert entered.wait(timeout=5)

    with pytest.raises(CascadeFailure) as exc:
        coordinator.cascade_referencing("svc", target_schedule_state="RUNNING")
    assert exc.value.result.failed == ["p1"]
    assert p2.scheduled_state == ScheduledState.STOPPED

    release.set()
    t.join(timeout=5)
    assert errors == []


def test_single_request_during_cascade_is_rejected(coordinator, engine, make_service, make_processor):
    _require_imports()
    make_service("svc", service_state=ControllerServiceState.ENABLED)
    make_processor("p1", service="svc", scheduled_state=ScheduledState.RUNNING)
    make_processor("p2", service="svc", scheduled_state=ScheduledState.RUNNING)
    entered, release = engine.hold("p1")

    t, errors = _in_background(coordinator.cascade_referencing, "svc", target_schedule_state="STOPPED")
    assert entered.wait(timeout=5)

    with pytest.raises(StateConflict):
        coordinator.request_state("p2", "STOPPED")
    with pytest.raises(StateConflict):
        coordinator.request_state("svc", "DISABLED")

    release.set()
    t.join(timeout=5)
    assert errors == []
    assert engine.calls == [("stop", "p1"), ("stop", "p2")]


def test_disable_service_while_referencing_start_in_flight_is_rejected(
    coordinator, engine, make_service, make_processor
):
    """
    O start de p1 já passou pelo guard e aguarda o engine; o disable do
    service que p1 referencia é recusado, e p1 termina RUNNING com o
    service ENABLED.
    """
    _require_imports()
    svc = make_service("svc", service_state=ControllerServiceState.ENABLED)
    p = make_processor("p1", service="svc")
    entered, release = engine.hold("p1")

    t, errors = _in_background(coordinator.request_state, "p1", "RUNNING")
    assert entered.wait(timeout=5)

    with pytest.raises(StateConflict) as exc:
        coordinator.request_state("svc", "DISABLED")
    assert exc.value.message.endswith("referenced by active components: p1")

    with pytest.raises(StateConflict):
        coordinator.verify_update("svc", {"state": "DISABLED"})

    release.set()
    t.join(timeout=5)

    assert errors == []
    assert p.scheduled_state == ScheduledState.RUNNING
    assert svc.service_state == ControllerServiceState.ENABLED
    assert engine.actions_for("svc") == []


class TestTransitionLocks:
    def test_acquire_all_is_all_or_nothing(self):
        _require_imports()
        locks = TransitionLocks()
        assert locks.acquire_all(["a"]) == []

        assert locks.acquire_all(["b", "a", "c"]) == ["a"]
        assert locks.is_held("b") is False
        assert locks.is_held("c") is False

        locks.release_all(["a"])
        assert locks.acquire_all(["b", "a", "c"]) == []

    def test_hold_releases_on_error(self, make_processor):
        _require_imports()
        locks = TransitionLocks()
        p = make_processor("p1")

        with pytest.raises(RuntimeError):
            with locks.hold([p]):
                assert locks.is_held("p1")
                raise RuntimeError("boom")

        assert locks.is_held("p1") is False

    def test_hold_busy_raises_state_conflict(self, make_processor):
        _require_imports()
        locks = TransitionLocks()
        p = make_processor("p1")
        locks.acquire_all(["p1"])

        with pytest.raises(StateConflict) as exc:
            with locks.hold([p], ScheduledState.RUNNING):
                pass

        assert exc.value.details["requested_state"] == "RUNNING"
        assert locks.is_held("p1") is True
