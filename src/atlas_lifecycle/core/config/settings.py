# src/atlas_lifecycle/core/config/settings.py
"""
Settings tipadas do coordenador de ciclo de vida.

Defaults embutidos:

    cascade:
      on_failure: continue   # continue | abort
      history_limit: 1000    # ids de cascatas concluídas mantidos para consulta
    engine:
      ack_timeout_seconds: null
    journal:
      enabled: true
      max_events: null       # null = sem limite; o dono rotaciona o journal

Decisões arquiteturais:
    - As settings são um snapshot imutável da configuração resolvida
    - O hash da configuração resolvida acompanha as settings e é
      registrado no journal
    - Valores fora do domínio falham na construção (`InvalidSettingError`)
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .errors import InvalidSettingError
from .hashing import compute_config_hash
from .loader import PathLike, load_config


ON_FAILURE_CONTINUE = "continue"
ON_FAILURE_ABORT = "abort"
ON_FAILURE_POLICIES = (ON_FAILURE_CONTINUE, ON_FAILURE_ABORT)

DEFAULT_CASCADE_HISTORY_LIMIT = 1000

DEFAULT_CONFIG: Dict[str, Any] = {
    "cascade": {"on_failure": ON_FAILURE_CONTINUE, "history_limit": DEFAULT_CASCADE_HISTORY_LIMIT},
    "engine": {"ack_timeout_seconds": None},
    "journal": {"enabled": True, "max_events": None},
}


@dataclass(frozen=True)
class CoordinatorSettings:
    cascade_on_failure: str = ON_FAILURE_CONTINUE
    cascade_history_limit: int = DEFAULT_CASCADE_HISTORY_LIMIT
    ack_timeout_seconds: Optional[float] = None
    journal_enabled: bool = True
    journal_max_events: Optional[int] = None
    config: Dict[str, Any] = field(default_factory=lambda: deepcopy(DEFAULT_CONFIG), compare=False)
    config_hash: str = field(default_factory=lambda: compute_config_hash(DEFAULT_CONFIG))

    @property
    def abort_on_failure(self) -> bool:
        return self.cascade_on_failure == ON_FAILURE_ABORT


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = config.get(name) or {}
    if not isinstance(value, dict):
        raise InvalidSettingError(f"Seção '{name}' deve ser um mapa, recebido: {type(value).__name__}")
    return value


def _positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def settings_from_config(config: Dict[str, Any]) -> CoordinatorSettings:
    """
    Interpreta uma configuração resolvida como `CoordinatorSettings`.

    Raises:
        InvalidSettingError: Se algum valor estiver fora do domínio aceito.
    """
    cascade = _section(config, "cascade")
    on_failure = cascade.get("on_failure", ON_FAILURE_CONTINUE)
    if on_failure not in ON_FAILURE_POLICIES:
        raise InvalidSettingError(
            f"cascade.on_failure deve ser um de {list(ON_FAILURE_POLICIES)}, recebido: {on_failure!r}"
        )

    history_limit = cascade.get("history_limit", DEFAULT_CASCADE_HISTORY_LIMIT)
    if not _positive_int(history_limit):
        raise InvalidSettingError(
            f"cascade.history_limit deve ser inteiro positivo, recebido: {history_limit!r}"
        )

    timeout = _section(config, "engine").get("ack_timeout_seconds")
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise InvalidSettingError(
                f"engine.ack_timeout_seconds deve ser número positivo ou null, recebido: {timeout!r}"
            )
        timeout = float(timeout)

    journal = _section(config, "journal")
    journal_enabled = journal.get("enabled", True)
    if not isinstance(journal_enabled, bool):
        raise InvalidSettingError(f"journal.enabled deve ser booleano, recebido: {journal_enabled!r}")

    max_events = journal.get("max_events")
    if max_events is not None and not _positive_int(max_events):
        raise InvalidSettingError(
            f"journal.max_events deve ser inteiro positivo ou null, recebido: {max_events!r}"
        )

    return CoordinatorSettings(
        cascade_on_failure=on_failure,
        cascade_history_limit=history_limit,
        ack_timeout_seconds=timeout,
        journal_enabled=journal_enabled,
        journal_max_events=max_events,
        config=deepcopy(config),
        config_hash=compute_config_hash(config),
    )


def load_settings(
    defaults_path: Optional[PathLike] = None,
    local_path: Optional[PathLike] = None,
) -> CoordinatorSettings:
    """Carrega, resolve e interpreta as settings do coordenador."""
    config = load_config(base=DEFAULT_CONFIG, defaults_path=defaults_path, local_path=local_path)
    return settings_from_config(config)
