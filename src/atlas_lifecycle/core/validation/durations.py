# src/atlas_lifecycle/core/validation/durations.py
"""
Gramática canônica de durações ("30 sec", "5 min", "100ms").

Uma duração é um inteiro não negativo seguido de uma unidade de tempo,
com espaço opcional entre eles. Unidades são aceitas sem distinção de
maiúsculas/minúsculas.

Limites explícitos:
    - Não aceita frações ("1.5 sec")
    - Não aceita múltiplas unidades ("1 min 30 sec")
"""

from __future__ import annotations

import re
from typing import Dict, Optional


_UNIT_NANOS: Dict[str, int] = {}

for _aliases, _nanos in (
    (("ns", "nanos", "nanosecond", "nanoseconds"), 1),
    (("ms", "milli", "millis", "millisecond", "milliseconds"), 1_000_000),
    (("s", "sec", "secs", "second", "seconds"), 1_000_000_000),
    (("m", "min", "mins", "minute", "minutes"), 60 * 1_000_000_000),
    (("h", "hr", "hrs", "hour", "hours"), 3600 * 1_000_000_000),
    (("d", "day", "days"), 86400 * 1_000_000_000),
):
    for _alias in _aliases:
        _UNIT_NANOS[_alias] = _nanos

# alternativas mais longas primeiro para o regex não casar prefixos
VALID_TIME_UNITS = "|".join(sorted(_UNIT_NANOS, key=len, reverse=True))

TIME_DURATION_PATTERN = re.compile(rf"^\s*(\d+)\s*({VALID_TIME_UNITS})\s*$", re.IGNORECASE)


def is_valid_duration(value: object) -> bool:
    return isinstance(value, str) and TIME_DURATION_PATTERN.match(value) is not None


def duration_to_nanos(value: str) -> Optional[int]:
    """Converte uma duração válida para nanossegundos; `None` se inválida."""
    if not isinstance(value, str):
        return None
    m = TIME_DURATION_PATTERN.match(value)
    if m is None:
        return None
    return int(m.group(1)) * _UNIT_NANOS[m.group(2).lower()]

