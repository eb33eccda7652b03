# src/atlas_lifecycle/core/graph/ordering.py
"""
Ordenação de dependências do grafo de referências.

Este módulo produz a ordem determinística em que membros de um closure
de referências devem ser processados por uma cascata:
    - enable → dependências (services referenciados) antes dos dependentes
    - disable → ordem inversa

Decisões arquiteturais:
    - Utiliza ordenação topológica determinística (Kahn modificado)
    - Empates são resolvidos por ordem lexicográfica do id
    - Dependências fora do conjunto ordenado são ignoradas (já satisfeitas
      ou fora do escopo da cascata)
    - Ciclos são tratados como erro estrutural fatal

Invariantes:
    - Nenhum membro aparece antes de suas dependências
    - Todos os membros aparecem exatamente uma vez
    - A mesma entrada produz sempre a mesma ordem

Limites explícitos:
    - Não avalia guards
    - Não transiciona componentes
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Set


class CycleDetectedError(ValueError):
    """
    Exceção levantada quando o grafo de referências contém um ciclo.

    Um ciclo torna a ordem de enable/disable indefinida: nenhum membro do
    ciclo pode ser habilitado antes dos demais.
    """


def dependency_order(ids: Iterable[str], depends_on: Mapping[str, Iterable[str]]) -> List[str]:
    """
    Produz uma ordem topológica determinística de `ids`.

    Args:
        ids (Iterable[str]): Membros a ordenar.
        depends_on (Mapping[str, Iterable[str]]): Para cada membro, os ids
            dos quais depende. Ids fora de `ids` são ignorados.

    Returns:
        List[str]: Membros em ordem de dependência (dependências primeiro).

    Raises:
        CycleDetectedError: Se houver ciclo entre os membros.
    """
    members: Set[str] = set(ids)

    incoming_count: Dict[str, int] = {mid: 0 for mid in members}
    outgoing: Dict[str, Set[str]] = {mid: set() for mid in members}

    for mid in members:
        deps = {d for d in (depends_on.get(mid) or ()) if d in members and d != mid}
        if mid in set(depends_on.get(mid) or ()):
            raise CycleDetectedError(f"Component '{mid}' references itself")
        incoming_count[mid] = len(deps)
        for dep in deps:
            outgoing[dep].add(mid)

    ready: List[str] = sorted(mid for mid, c in incoming_count.items() if c == 0)
    order: List[str] = []

    while ready:
        mid = ready.pop(0)  # smallest lexicographic
        order.append(mid)
        for child in sorted(outgoing[mid]):
            incoming_count[child] -= 1
            if incoming_count[child] == 0:
                ready.append(child)
                ready.sort()

    if len(order) != len(members):
        stuck = sorted(members - set(order))
        raise CycleDetectedError(f"Cycle detected in reference graph among: {', '.join(stuck)}")

    return order
