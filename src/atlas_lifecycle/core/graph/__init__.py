# src/atlas_lifecycle/core/graph/__init__.py
"""
Grafo estrutural do Atlas Lifecycle.

Componentes principais:
    - connections → índice de conexões vivas por relationship
    - references  → grafo de referências, closure e ordenação por dependência
    - ordering    → ordenação topológica determinística (Kahn modificado)

Invariantes:
    - O grafo é consultado, nunca mutado, pelo coordenador
    - A ordenação por dependência é determinística para o mesmo grafo
"""

from .connections import ConnectionIndex, InMemoryConnectionIndex
from .ordering import CycleDetectedError, dependency_order
from .references import ReferenceClosure, ReferenceGraph, RegistryReferenceGraph

__all__ = [
    "ConnectionIndex",
    "InMemoryConnectionIndex",
    "CycleDetectedError",
    "dependency_order",
    "ReferenceClosure",
    "ReferenceGraph",
    "RegistryReferenceGraph",
]
