# src/atlas_lifecycle/core/execution/__init__.py
"""
Porta do engine de execução consumida pelo coordenador.

- `ExecutionEngine` (Protocol): start/stop de processors, enable/disable de services
- `EngineError`: recusa tipada do engine
- `invoke_engine`: chamada + espera de confirmação, convertendo falhas em EngineRejection
"""

from .engine import EngineError, ExecutionEngine, await_acknowledgement, invoke_engine

__all__ = ["EngineError", "ExecutionEngine", "await_acknowledgement", "invoke_engine"]
