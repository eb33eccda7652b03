# src/atlas_lifecycle/core/config/loader.py
"""
Loader canônico de configuração do Atlas Lifecycle.

A configuração efetiva é resolvida a partir de:
    - defaults embutidos (`DEFAULT_CONFIG`, em `settings`)
    - um arquivo de defaults (opcional, mas obrigatório se informado)
    - um arquivo local de overrides (opcional, ignorado se ausente)

Princípios fundamentais:
    - Configuração é declarativa e explícita
    - Erros estruturais são tratados como falhas fatais
    - A mesma entrada sempre produz a mesma configuração final

Limites explícitos:
    - Não interpreta settings (ver `settings.CoordinatorSettings`)
    - Não persiste configuração ou hash
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml  # PyYAML

from .errors import (
    ConfigFileNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge


PathLike = Union[str, Path]


def load_file(path: PathLike) -> Dict[str, Any]:
    """
    Carrega um arquivo de configuração YAML ou JSON.

    Arquivos vazios são interpretados como dicionários vazios.

    Raises:
        ConfigFileNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se a extensão não for suportada.
        InvalidConfigRootTypeError: Se o conteúdo raiz não for um dicionário.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigFileNotFoundError(f"Arquivo de configuração não encontrado: {path}")

    suffix = path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

    else:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(f"Config root deve ser dict, recebido: {type(data).__name__}")

    return data


def load_config(
    *,
    base: Dict[str, Any],
    defaults_path: Optional[PathLike] = None,
    local_path: Optional[PathLike] = None,
) -> Dict[str, Any]:
    """
    Resolve a configuração efetiva: base → defaults → local.

    Args:
        base (Dict[str, Any]): Configuração embutida (nunca mutada).
        defaults_path (Optional[PathLike]): Arquivo de defaults; se informado, deve existir.
        local_path (Optional[PathLike]): Overrides locais; ignorado se ausente.

    Returns:
        Dict[str, Any]: Configuração final resolvida.

    Raises:
        ConfigFileNotFoundError: Se `defaults_path` for informado e não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo não for um dicionário.
        ConfigTypeConflictError: Se ocorrer conflito estrutural durante o merge.
    """
    effective = deep_merge(base, {})

    if defaults_path is not None:
        effective = deep_merge(effective, load_file(defaults_path))

    if local_path is not None and Path(local_path).exists():
        effective = deep_merge(effective, load_file(local_path))

    return effective
