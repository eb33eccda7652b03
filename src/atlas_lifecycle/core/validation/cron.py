# src/atlas_lifecycle/core/validation/cron.py
"""
Parser de expressões cron no formato Quartz.

Este módulo valida e interpreta o período de agendamento de processors
com estratégia CRON_DRIVEN. A sintaxe aceita é a do Quartz Scheduler:

    <segundos> <minutos> <horas> <dia-do-mês> <mês> <dia-da-semana> [<ano>]

Elementos suportados:
    - `*`, valores, intervalos (`a-b`, inclusive com volta: `22-2`),
      listas (`a,b,c`) e incrementos (`*/n`, `a/n`, `a-b/n`)
    - nomes de meses (`JAN`..`DEC`) e dias da semana (`SUN`..`SAT`)
    - `?` em exatamente um dos campos dia-do-mês / dia-da-semana
    - dia-do-mês: `L`, `L-n`, `LW`, `nW`
    - dia-da-semana: `L`, `nL`, `n#k`

Decisões arquiteturais:
    - Falha de parse é sempre `CronParseError` (subclasse de ValueError)
    - O resultado é uma estrutura imutável com os conjuntos expandidos
    - O cálculo de próximos disparos pertence ao engine, não a este módulo

Invariantes:
    - Uma expressão aceita sempre possui 6 ou 7 campos
    - Conjuntos expandidos contêm apenas valores dentro do domínio do campo

Limites explícitos:
    - Não agenda execuções
    - Não calcula datas de disparo
    - Não conhece fuso horário

Este módulo existe para que o fail-fast de expressões cron inválidas
seja determinístico e independente do engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional


class CronParseError(ValueError):
    """Expressão cron sintaticamente inválida."""


@dataclass(frozen=True)
class _FieldSpec:
    label: str
    minimum: int
    maximum: int
    names: Optional[Dict[str, int]] = None


_MONTH_NAMES = {
    name: i + 1
    for i, name in enumerate(
        ["JAN", "FEB", "MAR", "APR", "MAY", "JUN", "JUL", "AUG", "SEP", "OCT", "NOV", "DEC"]
    )
}
_DAY_NAMES = {name: i + 1 for i, name in enumerate(["SUN", "MON", "TUE", "WED", "THU", "FRI", "SAT"])}

SECONDS = _FieldSpec("Seconds", 0, 59)
MINUTES = _FieldSpec("Minutes", 0, 59)
HOURS = _FieldSpec("Hours", 0, 23)
DAY_OF_MONTH = _FieldSpec("Day-of-Month", 1, 31)
MONTH = _FieldSpec("Month", 1, 12, _MONTH_NAMES)
DAY_OF_WEEK = _FieldSpec("Day-of-Week", 1, 7, _DAY_NAMES)
YEAR = _FieldSpec("Year", 1970, 2099)


@dataclass(frozen=True)
class CronExpression:
    """
    Expressão cron Quartz interpretada.

    Campos com `None` não restringem a data (uso de `?` no campo de dia
    ou ano omitido).
    """

    expression: str
    seconds: FrozenSet[int]
    minutes: FrozenSet[int]
    hours: FrozenSet[int]
    days_of_month: Optional[FrozenSet[int]]
    months: FrozenSet[int]
    days_of_week: Optional[FrozenSet[int]]
    years: Optional[FrozenSet[int]] = None
    last_day_of_month: bool = False
    last_day_offset: int = 0
    nearest_weekday: bool = False
    last_day_of_week: bool = False
    nth_day_of_week: int = 0

    @classmethod
    def parse(cls, expression: str) -> "CronExpression":
        return parse_cron_expression(expression)


def _value(token: str, field: _FieldSpec) -> int:
    t = token.strip().upper()
    if field.names and t in field.names:
        return field.names[t]
    if not t.isdigit():
        raise CronParseError(f"Illegal characters for {field.label} position: '{token}'")
    v = int(t)
    if v < field.minimum or v > field.maximum:
        raise CronParseError(
            f"{field.label} values must be between {field.minimum} and {field.maximum}: '{token}'"
        )
    return v


def _expand(start: int, end: int, step: int, field: _FieldSpec) -> List[int]:
    if start <= end:
        return list(range(start, end + 1, step))
    # intervalo com volta (ex.: 22-2 em horas, FRI-MON em dias)
    span = list(range(start, field.maximum + 1)) + list(range(field.minimum, end + 1))
    return span[::step]


def _parse_standard(text: str, field: _FieldSpec) -> FrozenSet[int]:
    values: set = set()
    for item in text.split(","):
        if not item:
            raise CronParseError(f"Empty list element in {field.label} position: '{text}'")

        base, sep, step_text = item.partition("/")
        step = 1
        if sep:
            if not step_text.isdigit() or int(step_text) == 0:
                raise CronParseError(f"Illegal increment in {field.label} position: '{item}'")
            step = int(step_text)
            if step > field.maximum - field.minimum + 1:
                raise CronParseError(f"Increment too large in {field.label} position: '{item}'")

        if base == "*":
            start, end = field.minimum, field.maximum
        elif "-" in base:
            low, _, high = base.partition("-")
            start, end = _value(low, field), _value(high, field)
        else:
            start = _value(base, field)
            end = field.maximum if sep else start

        values.update(_expand(start, end, step, field))
    return frozenset(values)


def parse_cron_expression(expression: str) -> CronExpression:
    """
    Valida e interpreta uma expressão cron Quartz.

    Args:
        expression (str): Expressão no formato Quartz (6 ou 7 campos).

    Returns:
        CronExpression: Estrutura imutável com os campos expandidos.

    Raises:
        CronParseError: Se a expressão não for sintaticamente válida.
    """
    if not isinstance(expression, str):
        raise CronParseError("Cron expression must be a string")

    parts = expression.split()
    if len(parts) < 6:
        raise CronParseError("Unexpected end of expression: expected 6 or 7 fields")
    if len(parts) > 7:
        raise CronParseError("Too many fields in expression: expected 6 or 7 fields")

    dom_text, dow_text = parts[3].upper(), parts[5].upper()
    if (dom_text == "?") == (dow_text == "?"):
        raise CronParseError("'?' must be specified for exactly one of Day-of-Month and Day-of-Week")

    flags: Dict[str, int] = {}

    days_of_month: Optional[FrozenSet[int]] = None
    if dom_text != "?":
        if dom_text == "L":
            flags["last_day_of_month"] = 1
        elif dom_text == "LW":
            flags["last_day_of_month"] = 1
            flags["nearest_weekday"] = 1
        elif dom_text.startswith("L-"):
            offset = dom_text[2:]
            if not offset.isdigit() or not 1 <= int(offset) <= 30:
                raise CronParseError(f"Offset from last day must be between 1 and 30: '{parts[3]}'")
            flags["last_day_of_month"] = 1
            flags["last_day_offset"] = int(offset)
        elif dom_text.endswith("W"):
            days_of_month = frozenset([_value(dom_text[:-1], DAY_OF_MONTH)])
            flags["nearest_weekday"] = 1
        else:
            days_of_month = _parse_standard(dom_text, DAY_OF_MONTH)

    days_of_week: Optional[FrozenSet[int]] = None
    if dow_text != "?":
        if dow_text == "L":
            days_of_week = frozenset([7])
        elif dow_text.endswith("L"):
            days_of_week = frozenset([_value(dow_text[:-1], DAY_OF_WEEK)])
            flags["last_day_of_week"] = 1
        elif "#" in dow_text:
            day, _, nth = dow_text.partition("#")
            if not nth.isdigit() or not 1 <= int(nth) <= 5:
                raise CronParseError(f"A numeric value between 1 and 5 must follow the '#' option: '{parts[5]}'")
            days_of_week = frozenset([_value(day, DAY_OF_WEEK)])
            flags["nth_day_of_week"] = int(nth)
        else:
            days_of_week = _parse_standard(dow_text, DAY_OF_WEEK)

    years = _parse_standard(parts[6], YEAR) if len(parts) == 7 else None

    return CronExpression(
        expression=expression,
        seconds=_parse_standard(parts[0], SECONDS),
        minutes=_parse_standard(parts[1], MINUTES),
        hours=_parse_standard(parts[2], HOURS),
        days_of_month=days_of_month,
        months=_parse_standard(parts[4].upper(), MONTH),
        days_of_week=days_of_week,
        years=years,
        last_day_of_month=bool(flags.get("last_day_of_month")),
        last_day_offset=flags.get("last_day_offset", 0),
        nearest_weekday=bool(flags.get("nearest_weekday")),
        last_day_of_week=bool(flags.get("last_day_of_week")),
        nth_day_of_week=flags.get("nth_day_of_week", 0),
    )
