# tests/conftest.py
"""
Fixtures compartilhados para testes do Atlas Lifecycle.

Este módulo fornece:
- registry em memória isolado por teste
- engine de execução falso (`RecordingEngine`)
- coordenador montado sobre ambos
- factories de processors e controller services com descriptors
  determinísticos

Decisões arquiteturais:
    - Componentes são criados pelas factories e registrados no registry,
      como faria o dono do grafo
    - O engine falso nunca agenda nada; apenas registra e recusa
    - Imports do core são realizados de forma lazy

Invariantes:
    - Nenhuma fixture realiza I/O
    - Cada teste recebe registry, engine e coordenador novos

Limites explícitos:
    - Não substituir testes de integração com um engine real
"""

import pytest


SERVICE_PROPERTY = "Service"
MODE_PROPERTY = "Mode"
DIRECTORY_PROPERTY = "Directory"


@pytest.fixture
def registry():
    """Registry em memória, vazio, com índice de conexões próprio."""
    from atlas_lifecycle.core.registry.registry import ComponentRegistry

    return ComponentRegistry()


@pytest.fixture
def engine():
    """Engine falso que registra chamadas e recusa componentes marcados."""
    from tests.fixtures.engine import RecordingEngine

    return RecordingEngine()


@pytest.fixture
def coordinator(registry, engine):
    """Coordenador com settings embutidas (continue-and-report, journal habilitado)."""
    from atlas_lifecycle.core.coordinator.coordinator import LifecycleCoordinator

    return LifecycleCoordinator(registry, engine)


def _descriptors():
    from atlas_lifecycle.core.model.components import PropertyDescriptor

    return {
        SERVICE_PROPERTY: PropertyDescriptor(
            name=SERVICE_PROPERTY,
            display_name="Controller Service",
            identifies_controller_service=True,
        ),
        MODE_PROPERTY: PropertyDescriptor(name=MODE_PROPERTY, allowable_values=("fast", "safe")),
        DIRECTORY_PROPERTY: PropertyDescriptor(name=DIRECTORY_PROPERTY, required=True),
    }


@pytest.fixture
def make_processor(registry):
    """
    Factory de processors registrados.

    Args aceitos pela factory:
        processor_id (str): Id do processor.
        service (Optional[str]): Id do service referenciado via propriedade `Service`.
        **fields: Campos adicionais de `ProcessorNode` (ex.: scheduled_state).

    Returns:
        Callable[..., ProcessorNode]
    """
    from atlas_lifecycle.core.model.components import ProcessorNode

    def _make(processor_id, service=None, **fields):
        properties = dict(fields.pop("properties", {}))
        properties.setdefault(DIRECTORY_PROPERTY, "/data/in")
        if service is not None:
            properties[SERVICE_PROPERTY] = service
        fields.setdefault("relationships", {"success", "failure"})
        processor = ProcessorNode(
            id=processor_id,
            name=processor_id,
            properties=properties,
            property_descriptors=_descriptors(),
            **fields,
        )
        return registry.add_processor(processor)

    return _make


@pytest.fixture
def make_service(registry):
    """
    Factory de controller services registrados.

    `references` é o id de outro service referenciado via propriedade `Service`.
    """
    from atlas_lifecycle.core.model.components import ControllerServiceNode

    def _make(service_id, references=None, **fields):
        properties = dict(fields.pop("properties", {}))
        if references is not None:
            properties[SERVICE_PROPERTY] = references
        fields.setdefault("service_type", "DBCPService")
        service = ControllerServiceNode(
            id=service_id,
            name=service_id,
            properties=properties,
            property_descriptors=_descriptors(),
            **fields,
        )
        return registry.add_controller_service(service)

    return _make
