# src/atlas_lifecycle/core/config/__init__.py

"""
Camada de configuração do Atlas Lifecycle.

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (YAML/JSON)
    - Resolução de configuração final via deep-merge determinístico
    - Interpretação tipada das settings do coordenador
    - Geração de hash canônico para o journal

Princípios fundamentais:
    - Configuração não contém lógica de domínio
    - Overrides são sempre explícitos
    - Conflitos estruturais são tratados como erro
"""

from .errors import (
    ConfigError,
    ConfigFileNotFoundError,
    ConfigTypeConflictError,
    InvalidConfigRootTypeError,
    InvalidSettingError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .loader import load_config, load_file
from .merge import deep_merge
from .settings import (
    DEFAULT_CONFIG,
    ON_FAILURE_ABORT,
    ON_FAILURE_CONTINUE,
    CoordinatorSettings,
    load_settings,
    settings_from_config,
)

__all__ = [
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigTypeConflictError",
    "InvalidConfigRootTypeError",
    "InvalidSettingError",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "load_config",
    "load_file",
    "deep_merge",
    "DEFAULT_CONFIG",
    "ON_FAILURE_ABORT",
    "ON_FAILURE_CONTINUE",
    "CoordinatorSettings",
    "load_settings",
    "settings_from_config",
]
