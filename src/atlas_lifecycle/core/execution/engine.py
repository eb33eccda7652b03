# src/atlas_lifecycle/core/execution/engine.py
"""
Porta do engine de execução.

O engine de execução é um colaborador externo: agenda execuções de
processors e habilita/desabilita controller services no seu próprio
domínio de concorrência. Este módulo define apenas o contrato que o
coordenador consome e a espera pela confirmação do engine.

Contrato:
    - `start_schedule(processor)`, `stop_schedule(processor)`,
      `enable_service(service)`, `disable_service(service)`
    - cada chamada retorna `None` (efeito síncrono) ou um objeto de
      confirmação com `result(timeout=None)` (ex.: `concurrent.futures.Future`)
    - recusas são sinalizadas levantando `EngineError` (ou qualquer exceção)

Decisões arquiteturais:
    - O coordenador trata a conclusão como síncrona do seu ponto de vista,
      bloqueando na confirmação
    - O prazo da espera pertence ao engine; o coordenador só aplica o
      timeout configurado em `engine.ack_timeout_seconds` quando definido
    - Qualquer falha (recusa, erro ou timeout) vira `EngineRejection`
      com o id do componente e a mensagem original

Limites explícitos:
    - Não agenda nada por conta própria
    - Não faz retry
"""

from __future__ import annotations

import concurrent.futures
from typing import Any, Optional, Protocol, runtime_checkable

from atlas_lifecycle.core.errors import engine_rejection
from atlas_lifecycle.core.exceptions import EngineRejection
from atlas_lifecycle.core.model.components import ControllerServiceNode, ProcessorNode


class EngineError(Exception):
    """Recusa tipada do engine de execução."""


@runtime_checkable
class ExecutionEngine(Protocol):
    def start_schedule(self, processor: ProcessorNode) -> Any:
        ...

    def stop_schedule(self, processor: ProcessorNode) -> Any:
        ...

    def enable_service(self, service: ControllerServiceNode) -> Any:
        ...

    def disable_service(self, service: ControllerServiceNode) -> Any:
        ...


def await_acknowledgement(ack: Any, timeout: Optional[float] = None) -> None:
    """Bloqueia até o engine confirmar a ação (quando a confirmação é assíncrona)."""
    if ack is None:
        return
    result = getattr(ack, "result", None)
    if callable(result):
        result(timeout=timeout)


def invoke_engine(action: str, component_id: str, call: Any, *, timeout: Optional[float] = None) -> None:
    """
    Executa uma chamada ao engine e aguarda sua confirmação.

    Args:
        action (str): Nome da ação (start, stop, enable, disable).
        component_id (str): Id do componente alvo.
        call (Callable[[], Any]): Chamada ao engine.
        timeout (Optional[float]): Prazo da espera; `None` delega ao engine.

    Raises:
        EngineRejection: Se o engine recusar, falhar ou não confirmar no prazo.
    """
    try:
        await_acknowledgement(call(), timeout)
    except concurrent.futures.TimeoutError:
        raise EngineRejection.from_payload(
            engine_rejection(
                component_id=component_id,
                action=action,
                engine_message=f"no acknowledgement within {timeout} seconds",
            )
        ) from None
    except Exception as e:
        raise EngineRejection.from_payload(
            engine_rejection(
                component_id=component_id,
                action=action,
                engine_message=str(e) or e.__class__.__name__,
            )
        ) from e
