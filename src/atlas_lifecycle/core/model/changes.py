# src/atlas_lifecycle/core/model/changes.py
"""
Conjuntos de mudanças propostas para componentes.

Um change set descreve, campo a campo, o que uma requisição externa
pretende alterar em um componente. Todo campo tem default `None`,
que significa "não informado".

Política para `properties`:
    - chave com valor `None` → remover a propriedade
    - chave com valor string → definir a propriedade
    - chave não mencionada → propriedade intocada

Decisões arquiteturais:
    - Valores de enum chegam como texto (como na camada de transporte) ou
      já como enum; a conversão é responsabilidade das regras de validação
    - `from_dict` rejeita chaves desconhecidas explicitamente
    - `state` faz parte do change set para requisições combinadas
      (configuração + transição)

Limites explícitos:
    - Não valida valores
    - Não aplica mudanças
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, ClassVar, Dict, Iterable, Mapping, Optional, Tuple, Type, TypeVar

from .components import Position


C = TypeVar("C", bound="_Changes")


@dataclass(frozen=True)
class _Changes:
    # campos que caracterizam uma "modification request"
    MODIFICATION_FIELDS: ClassVar[Tuple[str, ...]] = ()

    @classmethod
    def from_dict(cls: Type[C], data: Optional[Mapping[str, Any]]) -> C:
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown change fields for {cls.__name__}: {unknown}")
        if isinstance(data.get("position"), Mapping):
            data["position"] = Position(**data["position"])
        return cls(**data)

    def provided(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}

    @property
    def is_empty(self) -> bool:
        return not self.provided()

    @property
    def is_modification(self) -> bool:
        return any(getattr(self, name) is not None for name in self.MODIFICATION_FIELDS)

    def without_state(self: C) -> C:
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values["state"] = None
        return type(self)(**values)


@dataclass(frozen=True)
class ProcessorChanges(_Changes):
    """Mudanças propostas para um processor."""

    name: Optional[str] = None
    state: Optional[Any] = None
    scheduling_strategy: Optional[Any] = None
    comments: Optional[str] = None
    annotation_data: Optional[str] = None
    concurrent_tasks: Optional[Any] = None
    scheduling_period: Optional[str] = None
    penalty_duration: Optional[str] = None
    yield_duration: Optional[str] = None
    run_duration_millis: Optional[Any] = None
    bulletin_level: Optional[Any] = None
    loss_tolerant: Optional[bool] = None
    properties: Optional[Mapping[str, Optional[str]]] = None
    auto_terminated_relationships: Optional[Iterable[str]] = None
    position: Optional[Position] = None
    style: Optional[Mapping[str, str]] = None

    MODIFICATION_FIELDS = (
        "name",
        "scheduling_strategy",
        "comments",
        "annotation_data",
        "concurrent_tasks",
        "scheduling_period",
        "penalty_duration",
        "yield_duration",
        "run_duration_millis",
        "bulletin_level",
        "loss_tolerant",
        "properties",
        "auto_terminated_relationships",
    )


@dataclass(frozen=True)
class ControllerServiceChanges(_Changes):
    """Mudanças propostas para um controller service."""

    name: Optional[str] = None
    state: Optional[Any] = None
    comments: Optional[str] = None
    annotation_data: Optional[str] = None
    properties: Optional[Mapping[str, Optional[str]]] = None

    MODIFICATION_FIELDS = ("name", "comments", "annotation_data", "properties")
