# src/atlas_lifecycle/core/traceability/journal.py
"""
Journal de ciclo de vida — rastreabilidade das decisões do coordenador.

O journal consolida, de forma ordenada e auditável:
    - cabeçalho (criação, hash da configuração em uso)
    - Event Log de eventos explícitos emitidos pelo coordenador

Eventos canônicos:
    - transition_requested / transition_applied / transition_rejected
    - configuration_applied
    - cascade_started / cascade_member_applied / cascade_member_failed /
      cascade_member_skipped / cascade_finished

Decisões arquiteturais:
    - UTC é o timezone canônico para todos os timestamps
    - O append é thread-safe: transições de componentes distintos
      registram eventos concorrentemente
    - O formato de persistência é JSON determinístico (round-trip)

Invariantes:
    - `events` é sempre uma lista ordenada pela ordem de registro
    - Nenhum evento é emitido implicitamente

Limites explícitos:
    - Não decide transições
    - Não persiste automaticamente: o dono salva e rotaciona o journal
      (`save_journal` + `create_journal`) ou limita `max_events`
"""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


TRANSITION_REQUESTED = "transition_requested"
TRANSITION_APPLIED = "transition_applied"
TRANSITION_REJECTED = "transition_rejected"
CONFIGURATION_APPLIED = "configuration_applied"
CASCADE_STARTED = "cascade_started"
CASCADE_MEMBER_APPLIED = "cascade_member_applied"
CASCADE_MEMBER_FAILED = "cascade_member_failed"
CASCADE_MEMBER_SKIPPED = "cascade_member_skipped"
CASCADE_FINISHED = "cascade_finished"


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


@dataclass
class LifecycleJournal:
    """
    Registro ordenado das decisões do coordenador.

    Campos principais:
        - header: metadados (created_at, config_hash)
        - events: Event Log ordenado
        - max_events: limite opcional; eventos mais antigos são descartados
          e contados em `header["dropped_events"]`
    """

    header: Dict[str, Any]
    events: List[Dict[str, Any]] = field(default_factory=list)
    max_events: Optional[int] = field(default=None, compare=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record(
        self,
        event_type: str,
        *,
        component_id: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
        ts: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Adiciona exatamente um evento ao Event Log e o devolve."""
        ev: Dict[str, Any] = {
            "event_type": event_type,
            "timestamp": _iso(ts or datetime.now(timezone.utc)),
        }
        if component_id is not None:
            ev["component_id"] = component_id
        if payload is not None:
            ev["payload"] = payload

        with self._lock:
            self.events.append(ev)
            excess = len(self.events) - self.max_events if self.max_events else 0
            if excess > 0:
                del self.events[:excess]
                self.header["dropped_events"] = self.header.get("dropped_events", 0) + excess
        return ev

    def events_of(self, event_type: str) -> List[Dict[str, Any]]:
        with self._lock:
            return [dict(e) for e in self.events if e["event_type"] == event_type]

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            return {"header": dict(self.header), "events": [dict(e) for e in self.events]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LifecycleJournal":
        return cls(
            header=dict(data.get("header", {})),
            events=[dict(e) for e in (data.get("events", []) or [])],
        )


def create_journal(
    *,
    config_hash: str,
    created_at: Optional[datetime] = None,
    max_events: Optional[int] = None,
) -> LifecycleJournal:
    """Cria um journal vazio; nenhum evento é registrado implicitamente."""
    created_at = _ensure_tzaware_utc(created_at or datetime.now(timezone.utc))
    return LifecycleJournal(
        header={"created_at": _iso(created_at), "config_hash": config_hash},
        max_events=max_events,
    )


def save_journal(journal: LifecycleJournal, path: Union[str, Path]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        json.dump(journal.to_dict(), f, ensure_ascii=False, indent=2, sort_keys=True)


def load_journal(path: Union[str, Path]) -> LifecycleJournal:
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        data = json.load(f)
    return LifecycleJournal.from_dict(data)
