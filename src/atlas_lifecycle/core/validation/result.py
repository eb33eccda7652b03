# src/atlas_lifecycle/core/validation/result.py
"""
Resultado tipado de validação de campos.

Substitui o uso de exceções como fluxo de controle: as regras acumulam
violações em um `ValidationResult`, e apenas o coordenador decide
quando convertê-lo em rejeição.

Política de agregação:
    - violações comuns (formato, enum, intervalo) são acumuladas em lote
    - violações estruturais (conexão viva) também são acumuladas, com
      `kind="structural"`
    - uma expressão malformada (`malformed`) interrompe a validação: o
      resultado passa a conter somente ela

Conversão para exceção (`raise_for_errors`):
    - `malformed` presente → MalformedExpression
    - todas as violações estruturais → StructuralConflict
    - qualquer outra combinação → InvalidField com todas as violações
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from atlas_lifecycle.core.errors import (
    invalid_field,
    malformed_expression,
    structural_conflict,
)
from atlas_lifecycle.core.exceptions import (
    InvalidField,
    MalformedExpression,
    StructuralConflict,
)


FIELD = "field"
STRUCTURAL = "structural"


@dataclass(frozen=True)
class FieldViolation:
    field: str
    message: str
    kind: str = FIELD
    value: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {"field": self.field, "message": self.message, "kind": self.kind}


@dataclass
class ValidationResult:
    component_id: Optional[str] = None
    violations: List[FieldViolation] = field(default_factory=list)
    malformed: Optional[FieldViolation] = None

    @property
    def ok(self) -> bool:
        return self.malformed is None and not self.violations

    @property
    def messages(self) -> List[str]:
        if self.malformed is not None:
            return [self.malformed.message]
        return [v.message for v in self.violations]

    def add(self, field_name: str, message: str, *, kind: str = FIELD, value: Any = None) -> None:
        self.violations.append(FieldViolation(field=field_name, message=message, kind=kind, value=value))

    def fail_fast(self, field_name: str, message: str, *, value: Any = None) -> None:
        # descarta o lote: a expressão malformada é reportada sozinha
        self.violations = []
        self.malformed = FieldViolation(field=field_name, message=message, value=value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "component_id": self.component_id,
            "ok": self.ok,
            "violations": [v.to_dict() for v in self.violations],
            "malformed": self.malformed.to_dict() if self.malformed else None,
        }

    def raise_for_errors(self) -> None:
        if self.malformed is not None:
            raise MalformedExpression.from_payload(
                malformed_expression(
                    component_id=self.component_id,
                    field=self.malformed.field,
                    expression=str(self.malformed.value),
                    reason=self.malformed.message,
                )
            )

        if not self.violations:
            return

        if all(v.kind == STRUCTURAL for v in self.violations):
            raise StructuralConflict.from_payload(
                structural_conflict(
                    component_id=self.component_id or "",
                    reason="; ".join(v.message for v in self.violations),
                    related=[str(v.value) for v in self.violations],
                )
            )

        raise InvalidField.from_payload(
            invalid_field(
                component_id=self.component_id,
                violations=[v.to_dict() for v in self.violations],
            )
        )
