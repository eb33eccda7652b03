# src/atlas_lifecycle/core/config/errors.py
"""
Exceções canônicas da camada de configuração do Atlas Lifecycle.

As exceções aqui definidas representam falhas estruturais de
configuração do coordenador, e não rejeições de ciclo de vida.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção de configuração é uma `LifecycleException`

Limites explícitos:
    - Não realiza fallback ou recovery
    - Não depende do coordenador
"""


class ConfigError(Exception):
    """
    Exceção base para erros de configuração do Atlas Lifecycle.

    Permite captura genérica de falhas durante carregamento, merge e
    interpretação das settings do coordenador.
    """


class ConfigFileNotFoundError(ConfigError):
    """
    Arquivo de configuração explicitamente informado não existe.

    Decisões arquiteturais:
        - Um caminho de defaults informado é obrigatório
        - O override local ausente é ignorado (é opcional por definição)
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Formato do arquivo de configuração não suportado.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """Conteúdo raiz da configuração não é um dicionário (`dict`)."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"cascade": {"on_failure": "continue"}}
        - override: {"cascade": "abort"}

    Invariantes:
        - Nenhum merge parcial é produzido em caso de conflito
    """


class InvalidSettingError(ConfigError):
    """
    Valor de setting fora do domínio aceito.

    Exemplo:
        - cascade.on_failure: "retry"   (aceitos: continue, abort)
        - engine.ack_timeout_seconds: -1
    """
