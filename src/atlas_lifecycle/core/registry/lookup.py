# src/atlas_lifecycle/core/registry/lookup.py
"""
Consulta somente-leitura de controller services.

`ServiceLookup` é a visão que componentes e guards recebem para perguntar
sobre services sem acesso ao registry completo: se um service está
habilitado, se está em habilitação, qual o seu nome e quais ids existem
para um determinado tipo.
"""

from __future__ import annotations

from typing import Optional, Set

from atlas_lifecycle.core.model.components import ControllerServiceNode
from atlas_lifecycle.core.model.types import ControllerServiceState

from .registry import ComponentRegistry


class ServiceLookup:
    def __init__(self, registry: ComponentRegistry) -> None:
        self._registry = registry

    def get_controller_service(self, service_id: str) -> Optional[ControllerServiceNode]:
        if not self._registry.has_controller_service(service_id):
            return None
        return self._registry.find_controller_service(service_id)

    def is_controller_service_enabled(self, service_id: str) -> bool:
        service = self.get_controller_service(service_id)
        return service is not None and service.service_state == ControllerServiceState.ENABLED

    def is_controller_service_enabling(self, service_id: str) -> bool:
        service = self.get_controller_service(service_id)
        return service is not None and service.service_state == ControllerServiceState.ENABLING

    def get_controller_service_name(self, service_id: str) -> Optional[str]:
        service = self.get_controller_service(service_id)
        return service.name if service is not None else None

    def get_controller_service_identifiers(self, service_type: str) -> Set[str]:
        return {s.id for s in self._registry.get_controller_services() if s.service_type == service_type}
