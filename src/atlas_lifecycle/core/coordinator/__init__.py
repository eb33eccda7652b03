# src/atlas_lifecycle/core/coordinator/__init__.py
"""
Lifecycle Coordinator do Atlas Lifecycle.

- **coordinator**: `LifecycleCoordinator`, ponto de entrada das requisições
- **cascade**: `ClosureResult`, `MemberOutcome`, plano de cascata
- **applier**: aplicação ordenada de change sets
- **locks**: `TransitionLocks`, um lock de transição por componente
"""

from .applier import apply_processor_changes, apply_service_changes
from .cascade import ClosureResult, MemberOutcome, MemberStatus
from .coordinator import LifecycleCoordinator
from .locks import TransitionLocks

__all__ = [
    "apply_processor_changes",
    "apply_service_changes",
    "ClosureResult",
    "MemberOutcome",
    "MemberStatus",
    "LifecycleCoordinator",
    "TransitionLocks",
]
