# src/atlas_lifecycle/__init__.py
"""
Atlas Lifecycle — coordenador de ciclo de vida de componentes de dataflow.

Este pacote decide se uma transição de estado solicitada
(start/stop/enable/disable) para um componente é legal *agora*, a executa
e propaga suas consequências a todos os componentes que dependem dele.

Arquitetura em alto nível:
    - core.validation   → regras de campo sobre change sets propostos
    - core.graph        → grafo de referências entre componentes
    - core.guards       → admissibilidade de cada transição
    - core.coordinator  → orquestração, cascatas e aplicação de configuração
    - core.traceability → journal de decisões

Limites explícitos:
    - Não implementa o engine de execução
    - Não expõe transporte (REST) nem DTOs
    - Não cria nem destrói componentes
"""

from .core.coordinator import ClosureResult, LifecycleCoordinator
from .core.exceptions import (
    CascadeFailure,
    EngineRejection,
    InvalidField,
    LifecycleException,
    MalformedExpression,
    NotFound,
    StateConflict,
    StructuralConflict,
)
from .core.registry import ComponentRegistry

__version__ = "0.1.0"

__all__ = [
    "ClosureResult",
    "LifecycleCoordinator",
    "CascadeFailure",
    "EngineRejection",
    "InvalidField",
    "LifecycleException",
    "MalformedExpression",
    "NotFound",
    "StateConflict",
    "StructuralConflict",
    "ComponentRegistry",
]
