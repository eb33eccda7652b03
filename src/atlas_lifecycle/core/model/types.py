# src/atlas_lifecycle/core/model/types.py
"""
Tipos canônicos do modelo de componentes do Atlas Lifecycle.

Este módulo define os enums fundamentais que padronizam a comunicação
entre registry, guards, regras de validação e o coordenador de ciclo
de vida.

Os tipos aqui definidos representam:
    - estados agendáveis de processors (ScheduledState)
    - estados de controller services (ControllerServiceState)
    - estratégias de agendamento (SchedulingStrategy)
    - níveis de bulletin aceitos (BulletinLevel)
    - classificação do componente (ComponentKind)

Princípios fundamentais:
    - Valores textuais são estáveis e serializáveis
    - A conversão a partir de texto é explícita (`parse`)
    - Nenhuma lógica de transição vive neste módulo

Invariantes:
    - `parse` nunca devolve valor fora do enum
    - Texto desconhecido sempre resulta em ValueError

Limites explícitos:
    - Não decide transições
    - Não valida campos de configuração
    - Não conhece o registry nem o engine

Este módulo existe para garantir consistência
e clareza semântica no modelo de componentes.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Type, TypeVar


E = TypeVar("E", bound="_ParsableEnum")


class _ParsableEnum(str, Enum):
    """Enum textual com conversão explícita a partir de texto livre."""

    @classmethod
    def parse(cls: Type[E], value: Any) -> E:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise ValueError(
            f"{cls.__name__}: Value must be one of [{', '.join(cls.names())}]"
        )

    @classmethod
    def names(cls) -> List[str]:
        return [m.value for m in cls]


class ComponentKind(_ParsableEnum):
    """Classificação do componente gerenciado pelo coordenador."""

    PROCESSOR = "PROCESSOR"
    CONTROLLER_SERVICE = "CONTROLLER_SERVICE"


class ScheduledState(_ParsableEnum):
    """
    Estados de agendamento de um processor.

    Estados definidos:
        - DISABLED: não agendável, excluído de pedidos de start
        - STOPPED: agendável, sem execuções agendadas
        - RUNNING: execuções agendadas pelo engine

    Invariantes:
        - DISABLED -> RUNNING nunca é uma transição direta
        - O estado inicial de um processor criado é STOPPED
    """

    DISABLED = "DISABLED"
    STOPPED = "STOPPED"
    RUNNING = "RUNNING"


class ControllerServiceState(_ParsableEnum):
    """
    Estados de um controller service.

    ENABLING e DISABLING são estados transitórios: existem apenas como
    efeito colateral de uma ação de enable/disable e nunca são alvos
    endereçáveis de uma requisição.
    """

    DISABLED = "DISABLED"
    ENABLING = "ENABLING"
    ENABLED = "ENABLED"
    DISABLING = "DISABLING"

    @property
    def is_transitional(self) -> bool:
        return self in (ControllerServiceState.ENABLING, ControllerServiceState.DISABLING)


REQUESTABLE_SERVICE_STATES = (ControllerServiceState.ENABLED, ControllerServiceState.DISABLED)


class SchedulingStrategy(_ParsableEnum):
    """
    Estratégias de agendamento de processors.

    A estratégia efetiva governa quais campos de agendamento têm
    significado e qual validação se aplica a eles.
    """

    TIMER_DRIVEN = "TIMER_DRIVEN"
    EVENT_DRIVEN = "EVENT_DRIVEN"
    CRON_DRIVEN = "CRON_DRIVEN"
    PRIMARY_NODE_ONLY = "PRIMARY_NODE_ONLY"

    @property
    def is_timer_like(self) -> bool:
        return self in (SchedulingStrategy.TIMER_DRIVEN, SchedulingStrategy.PRIMARY_NODE_ONLY)


class BulletinLevel(_ParsableEnum):
    """Níveis de bulletin aceitos na configuração de processors."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    FATAL = "FATAL"
    NONE = "NONE"
