# src/atlas_lifecycle/core/validation/__init__.py
"""
Regras de validação de campos do Atlas Lifecycle.

Componentes principais:
    - durations → gramática de durações com unidade
    - cron      → parser de expressões cron Quartz
    - result    → ValidationResult tipado (lote + fail-fast)
    - rules     → regras por campo e validação completa de change sets

Princípios fundamentais:
    - Validação é pura: nenhum componente é mutado
    - Violações são acumuladas em lote, exceto o parse de cron
    - A estratégia de agendamento efetiva governa as regras dependentes
"""

from .cron import CronExpression, CronParseError, parse_cron_expression
from .durations import TIME_DURATION_PATTERN, duration_to_nanos, is_valid_duration
from .result import FieldViolation, ValidationResult
from .rules import (
    validate_processor_changes,
    validate_processor_target,
    validate_service_changes,
    validate_service_target,
)

__all__ = [
    "CronExpression",
    "CronParseError",
    "parse_cron_expression",
    "TIME_DURATION_PATTERN",
    "duration_to_nanos",
    "is_valid_duration",
    "FieldViolation",
    "ValidationResult",
    "validate_processor_changes",
    "validate_processor_target",
    "validate_service_changes",
    "validate_service_target",
]
