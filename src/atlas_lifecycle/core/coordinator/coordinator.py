# src/atlas_lifecycle/core/coordinator/coordinator.py
"""
Lifecycle Coordinator — ponto de entrada das requisições de ciclo de vida.

Uma requisição externa chega como (id do componente, change set
proposto). O coordenador:

    1. localiza o componente no registry
    2. adquire o lock de transição do componente (não bloqueante)
    3. valida os campos propostos (ValidationResult → rejeição tipada)
    4. consulta o guard da transição (se o estado muda) e o guard de
       atualização (se a requisição modifica configuração)
    5. aplica a configuração (Configuration Applier)
    6. executa a transição (engine de execução)
    7. registra cada decisão no journal

Cascatas (`cascade_referencing`) operam sobre o closure de componentes
que referenciam um controller service: o closure inteiro é verificado,
sob os locks de todos os membros, antes de qualquer mutação.

Decisões arquiteturais:
    - Guards são objetos explícitos por tipo de componente
    - O registry é uma dependência explícita; componentes são apenas
      emprestados ao coordenador
    - Falhas de execução em cascata são coletadas e reportadas, sem
      retry e sem rollback (`cascade.on_failure` decide continuar ou
      abortar)

Invariantes:
    - Requisições de componente único verificam tudo antes de mutar
    - No máximo uma transição em andamento por componente
    - Pedidos com estado igual ao atual nunca consultam guards de
      transição

Limites explícitos:
    - Não cria nem destrói componentes
    - Não agenda execuções por conta própria
    - Não persiste configuração
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, Tuple, Union

from atlas_lifecycle.core.config.settings import CoordinatorSettings
from atlas_lifecycle.core.errors import (
    cascade_failure,
    invalid_field,
    not_found,
    state_conflict,
    structural_conflict,
)
from atlas_lifecycle.core.exceptions import (
    CascadeFailure,
    InvalidField,
    LifecycleException,
    NotFound,
    StateConflict,
    StructuralConflict,
)
from atlas_lifecycle.core.execution.engine import ExecutionEngine, invoke_engine
from atlas_lifecycle.core.graph.ordering import CycleDetectedError
from atlas_lifecycle.core.graph.references import RegistryReferenceGraph
from atlas_lifecycle.core.guards.guard import Guard
from atlas_lifecycle.core.guards.processor import ProcessorGuard
from atlas_lifecycle.core.guards.service import ControllerServiceGuard
from atlas_lifecycle.core.guards.view import Component, State, StateView
from atlas_lifecycle.core.model.changes import ControllerServiceChanges, ProcessorChanges
from atlas_lifecycle.core.model.components import ControllerServiceNode, ProcessorNode
from atlas_lifecycle.core.model.types import ControllerServiceState, ScheduledState
from atlas_lifecycle.core.registry.registry import ComponentRegistry
from atlas_lifecycle.core.traceability.journal import (
    CASCADE_FINISHED,
    CASCADE_MEMBER_APPLIED,
    CASCADE_MEMBER_FAILED,
    CASCADE_MEMBER_SKIPPED,
    CASCADE_STARTED,
    CONFIGURATION_APPLIED,
    TRANSITION_APPLIED,
    TRANSITION_REJECTED,
    TRANSITION_REQUESTED,
    LifecycleJournal,
    create_journal,
)
from atlas_lifecycle.core.validation.result import ValidationResult
from atlas_lifecycle.core.validation.rules import validate_processor_changes, validate_service_changes

from .applier import apply_processor_changes, apply_service_changes
from .cascade import (
    DISABLE,
    ENABLE,
    START,
    STOP,
    CascadeStep,
    CascadeTarget,
    ClosureResult,
    MemberOutcome,
    MemberStatus,
    blocked_by,
    kind_of,
    plan_cascade,
    resolve_cascade_target,
)
from .locks import TransitionLocks


Changes = Union[ProcessorChanges, ControllerServiceChanges]
ChangesInput = Union[Changes, Mapping[str, Any], None]

CASCADE_RUNNING = "RUNNING"
CASCADE_FINISHED_STATUS = "FINISHED"


def _value(state: Any) -> Optional[str]:
    if state is None:
        return None
    return str(getattr(state, "value", state))


class LifecycleCoordinator:
    """
    Coordenador de transições de processors e controller services.

    Args:
        registry (ComponentRegistry): Registro dos componentes e conexões.
        engine (ExecutionEngine): Engine de execução (colaborador externo).
        settings (Optional[CoordinatorSettings]): Settings resolvidas; defaults embutidos se ausente.
        journal (Optional[LifecycleJournal]): Journal a usar; criado a partir das settings se ausente.
    """

    def __init__(
        self,
        registry: ComponentRegistry,
        engine: ExecutionEngine,
        *,
        settings: Optional[CoordinatorSettings] = None,
        journal: Optional[LifecycleJournal] = None,
    ) -> None:
        self.registry = registry
        self.engine = engine
        self.settings = settings if settings is not None else CoordinatorSettings()
        self.reference_graph = RegistryReferenceGraph(registry)
        self.locks = TransitionLocks()

        if journal is None and self.settings.journal_enabled:
            journal = create_journal(
                config_hash=self.settings.config_hash,
                max_events=self.settings.journal_max_events,
            )
        self.journal = journal

        self._processor_guard = ProcessorGuard(registry.connections)
        self._service_guard = ControllerServiceGuard()
        self._cascades: Dict[str, str] = {}
        self._cascades_lock = threading.Lock()

    # -----------------------------
    # Infra
    # -----------------------------
    def _record(self, event_type: str, component_id: Optional[str] = None, payload: Optional[Dict[str, Any]] = None) -> None:
        if self.journal is not None:
            self.journal.record(event_type, component_id=component_id, payload=payload)

    def _track_cascade(self, cascade_id: str, status: str) -> None:
        """Registra o status da cascata; as concluídas mais antigas saem além de `cascade_history_limit`."""
        with self._cascades_lock:
            self._cascades[cascade_id] = status
            finished = [cid for cid, s in self._cascades.items() if s == CASCADE_FINISHED_STATUS]
            for cid in finished[: max(0, len(self._cascades) - self.settings.cascade_history_limit)]:
                del self._cascades[cid]

    def _guard_for(self, component: Component) -> Guard:
        if isinstance(component, ProcessorNode):
            return self._processor_guard
        return self._service_guard

    def _view(self, *, owned: Sequence[str] = ()) -> StateView:
        """
        Visão de estados para os guards.

        Componentes cujo lock está ocupado contam como em transição, exceto
        os `owned` (locks mantidos pela própria requisição).
        """
        owned_ids = frozenset(owned)

        def in_flight(component_id: str) -> bool:
            return component_id not in owned_ids and self.locks.is_held(component_id)

        return StateView(self.registry, self.reference_graph, in_flight=in_flight)

    @staticmethod
    def _in_progress(component: Component, requested_state: Any = None) -> StateConflict:
        return StateConflict.from_payload(
            state_conflict(
                component_id=component.id,
                current_state=component.state.value,
                requested_state=_value(requested_state),
                reason=f"A transition is already in progress for '{component.id}'",
            )
        )

    def _ensure_idle(self, component: Component, requested_state: Any = None) -> None:
        if self.locks.is_held(component.id):
            raise self._in_progress(component, requested_state)

    def _coerce_changes(self, component: Component, changes: ChangesInput) -> Changes:
        expected = ProcessorChanges if isinstance(component, ProcessorNode) else ControllerServiceChanges

        if changes is None:
            return expected()
        if isinstance(changes, expected):
            return changes

        if isinstance(changes, Mapping):
            try:
                return expected.from_dict(changes)
            except (TypeError, ValueError) as e:
                message = str(e)
        else:
            message = f"Change set {type(changes).__name__} does not apply to {kind_of(component)} '{component.id}'"

        raise InvalidField.from_payload(
            invalid_field(
                component_id=component.id,
                violations=[{"field": "changes", "message": message, "kind": "field"}],
            )
        )

    def _validate(self, component: Component, changes: Changes) -> ValidationResult:
        if isinstance(component, ProcessorNode):
            return validate_processor_changes(
                component,
                changes,
                connections=self.registry.connections,
                service_exists=self.registry.has_controller_service,
            )
        return validate_service_changes(
            component,
            changes,
            service_exists=self.registry.has_controller_service,
            references_of=self._references_of,
        )

    def _references_of(self, service_id: str) -> Set[str]:
        if not self.registry.has_controller_service(service_id):
            return set()
        return self.registry.find_controller_service(service_id).referenced_service_ids()

    # -----------------------------
    # Decisão de transição
    # -----------------------------
    @staticmethod
    def _parse_target(component: Component, value: Any) -> Optional[State]:
        if value is None:
            return None
        if isinstance(component, ProcessorNode):
            return ScheduledState.parse(value)
        return ControllerServiceState.parse(value)

    @staticmethod
    def _action_for(component: Component, target: State) -> str:
        if isinstance(component, ProcessorNode):
            if target == ScheduledState.RUNNING:
                return START
            if target == ScheduledState.DISABLED:
                return DISABLE
            if component.scheduled_state == ScheduledState.DISABLED:
                return ENABLE
            return STOP
        return ENABLE if target == ControllerServiceState.ENABLED else DISABLE

    def _check(self, component: Component, action: str, view: StateView, target: Any = None) -> None:
        decision = getattr(self._guard_for(component), f"can_{action}")(component, view)
        decision.raise_if_denied(component, target)

    def _verify(self, component: Component, changes: Changes, view: StateView) -> Tuple[Optional[State], Optional[str]]:
        """Valida campos e consulta guards; devolve (alvo, ação) sem mutar nada."""
        self._validate(component, changes).raise_for_errors()

        target = self._parse_target(component, changes.state)
        action = None
        if target is not None and target != component.state:
            action = self._action_for(component, target)
            self._check(component, action, view, target)

        if changes.is_modification:
            self._check(component, "update", view, target)

        return target, action

    def _execute(self, component: Component, action: str) -> None:
        """Executa a ação de transição; falhas do engine viram EngineRejection."""
        timeout = self.settings.ack_timeout_seconds

        if isinstance(component, ProcessorNode):
            if action == START:
                invoke_engine(START, component.id, lambda: self.engine.start_schedule(component), timeout=timeout)
                component.scheduled_state = ScheduledState.RUNNING
            elif action == STOP:
                invoke_engine(STOP, component.id, lambda: self.engine.stop_schedule(component), timeout=timeout)
                component.scheduled_state = ScheduledState.STOPPED
            elif action == ENABLE:
                component.scheduled_state = ScheduledState.STOPPED
            else:
                component.scheduled_state = ScheduledState.DISABLED
            return

        if action == ENABLE:
            component.service_state = ControllerServiceState.ENABLING
            try:
                invoke_engine(ENABLE, component.id, lambda: self.engine.enable_service(component), timeout=timeout)
            except LifecycleException:
                component.service_state = ControllerServiceState.DISABLED
                raise
            component.service_state = ControllerServiceState.ENABLED
        else:
            component.service_state = ControllerServiceState.DISABLING
            try:
                invoke_engine(DISABLE, component.id, lambda: self.engine.disable_service(component), timeout=timeout)
            except LifecycleException:
                component.service_state = ControllerServiceState.ENABLED
                raise
            component.service_state = ControllerServiceState.DISABLED

    # -----------------------------
    # Configuração e transições de componente único
    # -----------------------------
    def propose_configuration(
        self,
        component_id: str,
        changes: ChangesInput,
        *,
        group_id: Optional[str] = None,
    ) -> ValidationResult:
        """
        Valida um change set sem aplicar nada.

        Problemas de validação nunca levantam exceção: são devolvidos no
        `ValidationResult`. Apenas um id desconhecido levanta NotFound.
        """
        component = self.registry.find_component(component_id, group_id)
        try:
            coerced = self._coerce_changes(component, changes)
        except InvalidField as e:
            result = ValidationResult(component_id=component.id)
            for violation in e.details.get("violations", []):
                result.add(violation["field"], violation["message"])
            return result
        return self._validate(component, coerced)

    def verify_update(
        self,
        component_id: str,
        changes: ChangesInput,
        *,
        group_id: Optional[str] = None,
    ) -> None:
        """Verifica a requisição completa (campos e guards); levanta a primeira rejeição."""
        component = self.registry.find_component(component_id, group_id)
        coerced = self._coerce_changes(component, changes)
        self._ensure_idle(component, coerced.state)
        self._verify(component, coerced, self._view())

    def apply_configuration(
        self,
        component_id: str,
        changes: ChangesInput,
        *,
        group_id: Optional[str] = None,
    ) -> Component:
        """Valida e aplica um change set; um `state` presente no change set também é honrado."""
        component = self.registry.find_component(component_id, group_id)
        return self._update(component, self._coerce_changes(component, changes))

    def request_state(
        self,
        component_id: str,
        target_state: Any,
        changes: ChangesInput = None,
        *,
        group_id: Optional[str] = None,
    ) -> Component:
        """Solicita uma transição de estado, opcionalmente combinada com mudanças de configuração."""
        component = self.registry.find_component(component_id, group_id)
        coerced = replace(self._coerce_changes(component, changes), state=target_state)
        return self._update(component, coerced)

    def _update(self, component: Component, changes: Changes) -> Component:
        self._record(
            TRANSITION_REQUESTED,
            component.id,
            {"state": component.state.value, "target": _value(changes.state), "fields": sorted(changes.provided())},
        )
        try:
            with self.locks.hold([component], changes.state):
                view = self._view(owned=[component.id])
                _, action = self._verify(component, changes, view)

                if isinstance(component, ProcessorNode):
                    applied = apply_processor_changes(component, changes)
                else:
                    applied = apply_service_changes(component, changes)
                if applied:
                    self._record(CONFIGURATION_APPLIED, component.id, {"fields": applied})

                if action is not None:
                    previous = component.state.value
                    self._execute(component, action)
                    self._record(
                        TRANSITION_APPLIED,
                        component.id,
                        {"action": action, "previous_state": previous, "state": component.state.value},
                    )
        except LifecycleException as e:
            self._record(TRANSITION_REJECTED, component.id, e.to_error_payload().to_dict())
            raise
        return component

    def verify_delete(self, component_id: str, *, group_id: Optional[str] = None) -> None:
        """Verifica se o componente pode ser removido pelo dono do registry."""
        component = self.registry.find_component(component_id, group_id)
        self._ensure_idle(component)
        self._check(component, "delete", self._view())

    # -----------------------------
    # Cascatas
    # -----------------------------
    def _plan(self, service_id: str, target_service_state: Any, target_schedule_state: Any) -> Tuple[ControllerServiceNode, CascadeTarget, List[CascadeStep]]:
        service = self.registry.find_controller_service(service_id)
        target = resolve_cascade_target(service_id, target_service_state, target_schedule_state)
        closure = self.reference_graph.closure(service_id)
        try:
            steps = plan_cascade(closure, target, self.reference_graph)
        except CycleDetectedError as e:
            raise StructuralConflict.from_payload(
                structural_conflict(component_id=service.id, reason=str(e), related=closure.ids)
            ) from e
        return service, target, steps

    def _verify_steps(self, result: ClosureResult, steps: Sequence[CascadeStep], view: StateView) -> None:
        """Avalia os guards de todos os membros, simulando os anteriores como já transicionados."""
        for step in steps:
            component = step.component
            decision = getattr(self._guard_for(component), f"can_{step.action}")(component, view)
            outcome = MemberOutcome(
                component_id=component.id,
                kind=kind_of(component),
                action=step.action,
                previous_state=component.state.value,
                state=component.state.value,
                status=MemberStatus.PLANNED,
            )
            if decision.allowed:
                view.assume(component.id, step.target)
                outcome.state = step.target.value
            else:
                outcome.status = MemberStatus.FAILED
                outcome.cause = decision.reason
            result.members.append(outcome)

    @staticmethod
    def _failure(result: ClosureResult) -> CascadeFailure:
        return CascadeFailure.from_payload(
            cascade_failure(service_id=result.service_id, target=result.target, failures=result.failures()),
            result=result,
        )

    def verify_cascade(
        self,
        service_id: str,
        target_service_state: Any = None,
        target_schedule_state: Any = None,
    ) -> ClosureResult:
        """
        Verifica uma cascata sem mutar nada.

        Returns:
            ClosureResult: Plano (`verified_only=True`) com os membros em ordem.

        Raises:
            CascadeFailure: Se algum membro falhar no guard; nomeia todos.
        """
        service, target, steps = self._plan(service_id, target_service_state, target_schedule_state)
        self._ensure_idle(service)

        result = ClosureResult(
            cascade_id=uuid.uuid4().hex,
            service_id=service.id,
            target=target.value,
            verified_only=True,
        )
        self._verify_steps(result, steps, self._view())
        if not result.ok:
            raise self._failure(result)
        return result

    def cascade_referencing(
        self,
        service_id: str,
        target_service_state: Any = None,
        target_schedule_state: Any = None,
    ) -> ClosureResult:
        """
        Aplica um estado a todo o closure de componentes que referenciam o service.

        O closure é verificado sob os locks de todos os membros antes de
        qualquer mutação. Na execução, falhas são coletadas: membros que
        dependem de um membro falho são pulados e, com
        `cascade.on_failure: abort`, todos os membros restantes também.

        Raises:
            CascadeFailure: Verificação ou execução falhou para algum membro;
                carrega o `ClosureResult` em `result`.
        """
        service, target, steps = self._plan(service_id, target_service_state, target_schedule_state)
        result = ClosureResult(cascade_id=uuid.uuid4().hex, service_id=service.id, target=target.value)

        self._ensure_idle(service, target)
        ids = [service.id, *(s.component.id for s in steps)]
        busy = self.locks.acquire_all(ids)
        if busy:
            if service.id in busy:
                raise self._in_progress(service, target)
            for step in steps:
                status = MemberStatus.FAILED if step.component.id in busy else MemberStatus.PLANNED
                result.members.append(
                    MemberOutcome(
                        component_id=step.component.id,
                        kind=kind_of(step.component),
                        action=step.action,
                        previous_state=step.component.state.value,
                        state=step.component.state.value,
                        status=status,
                        cause=f"A transition is already in progress for '{step.component.id}'"
                        if status == MemberStatus.FAILED
                        else None,
                    )
                )
            failure = self._failure(result)
            self._record(TRANSITION_REJECTED, service.id, failure.to_error_payload().to_dict())
            raise failure

        try:
            self._verify_steps(result, steps, self._view(owned=ids))
            if not result.ok:
                failure = self._failure(result)
                self._record(TRANSITION_REJECTED, service.id, failure.to_error_payload().to_dict())
                raise failure

            self._track_cascade(result.cascade_id, CASCADE_RUNNING)
            self._record(
                CASCADE_STARTED,
                service.id,
                {"cascade_id": result.cascade_id, "target": result.target, "members": [s.component.id for s in steps]},
            )

            result.members = []
            self._run_steps(result, steps, ids)

            self._track_cascade(result.cascade_id, CASCADE_FINISHED_STATUS)
            self._record(
                CASCADE_FINISHED,
                service.id,
                {
                    "cascade_id": result.cascade_id,
                    "applied": result.applied,
                    "failed": result.failed,
                    "skipped": result.skipped,
                },
            )
        finally:
            self.locks.release_all(ids)

        if not result.ok:
            raise self._failure(result)
        return result

    def _run_steps(self, result: ClosureResult, steps: Sequence[CascadeStep], owned: Sequence[str]) -> None:
        """
        Executa os membros em ordem, coletando falhas.

        Cada membro é reavaliado pelo seu guard contra os estados reais
        imediatamente antes da chamada ao engine. Membros pulados por
        dependência também bloqueiam quem depende deles.
        """
        failed: List[Component] = []
        blocked: List[Component] = []

        for step in steps:
            component = step.component
            previous = component.state.value
            outcome = MemberOutcome(
                component_id=component.id,
                kind=kind_of(component),
                action=step.action,
                previous_state=previous,
                state=previous,
                status=MemberStatus.SKIPPED,
            )

            blocker = blocked_by(step, blocked)
            if failed and self.settings.abort_on_failure:
                outcome.cause = "Cascade aborted after a member failed"
            elif blocker is not None:
                outcome.cause = f"Depends on member '{blocker}' which was not applied"
                blocked.append(component)
            else:
                decision = getattr(self._guard_for(component), f"can_{step.action}")(
                    component, self._view(owned=owned)
                )
                if not decision.allowed:
                    outcome.status = MemberStatus.FAILED
                    outcome.cause = decision.reason
                else:
                    try:
                        self._execute(component, step.action)
                        outcome.status = MemberStatus.APPLIED
                    except LifecycleException as e:
                        outcome.status = MemberStatus.FAILED
                        outcome.cause = e.message
                if outcome.status == MemberStatus.FAILED:
                    failed.append(component)
                    blocked.append(component)
                outcome.state = component.state.value

            result.members.append(outcome)
            event_type = {
                MemberStatus.APPLIED: CASCADE_MEMBER_APPLIED,
                MemberStatus.FAILED: CASCADE_MEMBER_FAILED,
                MemberStatus.SKIPPED: CASCADE_MEMBER_SKIPPED,
            }[outcome.status]
            self._record(event_type, component.id, {"cascade_id": result.cascade_id, **outcome.to_dict()})

    def cancel_cascade(self, cascade_id: str) -> None:
        """
        Cascatas não são canceláveis depois de iniciadas.

        Raises:
            NotFound: Id de cascata desconhecido ou já descartado do histórico
                (`cascade.history_limit`).
            StateConflict: Cascata já iniciada ou concluída.
        """
        with self._cascades_lock:
            status = self._cascades.get(cascade_id)

        if status is None:
            raise NotFound.from_payload(not_found(component_id=cascade_id, kind="cascade"))

        raise StateConflict.from_payload(
            state_conflict(
                component_id=cascade_id,
                current_state=status,
                requested_state="CANCELLED",
                reason=f"Cascade '{cascade_id}' has already started and cannot be cancelled",
            )
        )

    # -----------------------------
    # Consultas
    # -----------------------------
    def references(self, service_id: str) -> List[Dict[str, Any]]:
        """Snapshot dos componentes que referenciam diretamente o service."""
        self.registry.find_controller_service(service_id)
        return [
            {
                "id": c.id,
                "kind": kind_of(c),
                "name": c.name,
                "state": c.state.value,
            }
            for c in self.reference_graph.referencing_components(service_id)
        ]
