# src/atlas_lifecycle/core/model/__init__.py
"""
Modelo de componentes do Atlas Lifecycle.

Este pacote define as estruturas que o coordenador lê e transiciona:

- **types**
  - `ScheduledState`, `ControllerServiceState`: estados de ciclo de vida
  - `SchedulingStrategy`, `BulletinLevel`, `ComponentKind`

- **components**
  - `ProcessorNode`, `ControllerServiceNode`: componentes mutáveis
  - `Connection`, `PropertyDescriptor`, `Position`

- **changes**
  - `ProcessorChanges`, `ControllerServiceChanges`: mudanças propostas

## Limites Explícitos

- Não decide transições
- Não valida campos
- Não depende de transporte, DTOs ou persistência
"""

from .types import (
    BulletinLevel,
    ComponentKind,
    ControllerServiceState,
    REQUESTABLE_SERVICE_STATES,
    ScheduledState,
    SchedulingStrategy,
)
from .components import (
    Connection,
    ControllerServiceNode,
    Position,
    ProcessorNode,
    PropertyDescriptor,
)
from .changes import ControllerServiceChanges, ProcessorChanges

__all__ = [
    "BulletinLevel",
    "ComponentKind",
    "ControllerServiceState",
    "REQUESTABLE_SERVICE_STATES",
    "ScheduledState",
    "SchedulingStrategy",
    "Connection",
    "ControllerServiceNode",
    "Position",
    "ProcessorNode",
    "PropertyDescriptor",
    "ControllerServiceChanges",
    "ProcessorChanges",
]
