# src/atlas_lifecycle/core/coordinator/locks.py
"""
Locks de transição por componente.

Cada componente possui no máximo uma transição em andamento. A aquisição
é não bloqueante: um segundo pedido para um componente ocupado falha
imediatamente com StateConflict, em vez de esperar.

Decisões arquiteturais:
    - A aquisição de vários ids é atômica (todos ou nenhum), o que evita
      deadlock entre cascatas com closures sobrepostos
    - O estado dos locks é consultável (`is_held`) para a verificação de
      cascatas, que precisa reportar membros em transição

Invariantes:
    - Um id nunca é mantido por dois holders ao mesmo tempo
    - `release_all` libera exatamente os ids adquiridos
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Sequence, Set

from atlas_lifecycle.core.errors import state_conflict
from atlas_lifecycle.core.exceptions import StateConflict
from atlas_lifecycle.core.guards.view import Component


class TransitionLocks:
    def __init__(self) -> None:
        self._mutex = threading.Lock()
        self._held: Set[str] = set()

    def is_held(self, component_id: str) -> bool:
        with self._mutex:
            return component_id in self._held

    def acquire_all(self, component_ids: Iterable[str]) -> List[str]:
        """
        Tenta adquirir todos os ids de uma vez.

        Returns:
            List[str]: Ids já ocupados (ordenados). Vazio significa que
            todos foram adquiridos; caso contrário nenhum foi.
        """
        ids = set(component_ids)
        with self._mutex:
            busy = sorted(ids & self._held)
            if not busy:
                self._held |= ids
            return busy

    def release_all(self, component_ids: Iterable[str]) -> None:
        with self._mutex:
            self._held -= set(component_ids)

    @contextmanager
    def hold(self, components: Sequence[Component], requested_state: object = None) -> Iterator[None]:
        """Mantém os locks dos componentes durante o bloco; ocupado → StateConflict."""
        ids = [c.id for c in components]
        busy = self.acquire_all(ids)
        if busy:
            component = next(c for c in components if c.id == busy[0])
            raise StateConflict.from_payload(
                state_conflict(
                    component_id=component.id,
                    current_state=component.state.value,
                    requested_state=getattr(requested_state, "value", requested_state),
                    reason=f"A transition is already in progress for '{component.id}'",
                )
            )
        try:
            yield
        finally:
            self.release_all(ids)
