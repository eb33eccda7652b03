# src/atlas_lifecycle/core/graph/connections.py
"""
Índice de conexões vivas.

O coordenador consulta conexões apenas para dois fins:
    - conflito entre auto-terminação e conexão viva
    - guard de remoção de processors

`InMemoryConnectionIndex` é a implementação de referência usada pelo
registry em memória e pelos testes; a camada de transporte pode fornecer
qualquer objeto que satisfaça o protocolo `ConnectionIndex`.
"""

from __future__ import annotations

import threading
from typing import Dict, List, Protocol, Set, runtime_checkable

from atlas_lifecycle.core.model.components import Connection, _ComponentNode


@runtime_checkable
class ConnectionIndex(Protocol):
    def connections_for(self, component: _ComponentNode, relationship_name: str) -> Set[Connection]:
        """Conexões vivas ligadas à relationship `relationship_name` do componente."""
        ...

    def connections_of(self, component: _ComponentNode) -> Set[Connection]:
        """Todas as conexões em que o componente é origem ou destino."""
        ...


class InMemoryConnectionIndex:
    """Índice de conexões thread-safe mantido pelo dono do grafo."""

    def __init__(self) -> None:
        self._by_id: Dict[str, Connection] = {}
        self._lock = threading.Lock()

    def add(self, connection: Connection) -> None:
        with self._lock:
            if connection.id in self._by_id:
                raise ValueError(f"Duplicate connection id: {connection.id}")
            self._by_id[connection.id] = connection

    def remove(self, connection_id: str) -> None:
        with self._lock:
            self._by_id.pop(connection_id, None)

    def list(self) -> List[Connection]:
        with self._lock:
            return list(self._by_id.values())

    def connections_for(self, component: _ComponentNode, relationship_name: str) -> Set[Connection]:
        with self._lock:
            return {
                c
                for c in self._by_id.values()
                if c.source_id == component.id and c.relationship == relationship_name
            }

    def connections_of(self, component: _ComponentNode) -> Set[Connection]:
        with self._lock:
            return {
                c
                for c in self._by_id.values()
                if component.id in (c.source_id, c.destination_id)
            }
