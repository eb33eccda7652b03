# src/atlas_lifecycle/core/registry/__init__.py
"""
Registry de componentes do Atlas Lifecycle.

- **registry**
  - `ComponentRegistry`: registro e localização de processors e services
  - `DuplicateComponentIdError`: violação de unicidade de id

- **lookup**
  - `ServiceLookup`: consultas somente-leitura sobre controller services
"""

from .registry import Component, ComponentRegistry, DuplicateComponentIdError
from .lookup import ServiceLookup

__all__ = ["Component", "ComponentRegistry", "DuplicateComponentIdError", "ServiceLookup"]
