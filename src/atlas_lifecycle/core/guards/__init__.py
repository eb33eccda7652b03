# src/atlas_lifecycle/core/guards/__init__.py
"""
Transition Guards do Atlas Lifecycle.

- **guard**: `Guard` (Protocol) e `GuardDecision`
- **processor**: `ProcessorGuard`
- **service**: `ControllerServiceGuard`
- **view**: `StateView`, leitura (e simulação) de estados para os guards
"""

from .guard import STATE, STRUCTURAL, Guard, GuardDecision
from .processor import ProcessorGuard
from .service import ControllerServiceGuard
from .view import StateView

__all__ = ["STATE", "STRUCTURAL", "Guard", "GuardDecision", "ProcessorGuard", "ControllerServiceGuard", "StateView"]
