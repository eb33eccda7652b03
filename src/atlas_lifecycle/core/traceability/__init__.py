# src/atlas_lifecycle/core/traceability/__init__.py
"""Rastreabilidade do Atlas Lifecycle (journal de decisões do coordenador)."""

from .journal import (
    CASCADE_FINISHED,
    CASCADE_MEMBER_APPLIED,
    CASCADE_MEMBER_FAILED,
    CASCADE_MEMBER_SKIPPED,
    CASCADE_STARTED,
    CONFIGURATION_APPLIED,
    TRANSITION_APPLIED,
    TRANSITION_REJECTED,
    TRANSITION_REQUESTED,
    LifecycleJournal,
    create_journal,
    load_journal,
    save_journal,
)

__all__ = [
    "CASCADE_FINISHED",
    "CASCADE_MEMBER_APPLIED",
    "CASCADE_MEMBER_FAILED",
    "CASCADE_MEMBER_SKIPPED",
    "CASCADE_STARTED",
    "CONFIGURATION_APPLIED",
    "TRANSITION_APPLIED",
    "TRANSITION_REJECTED",
    "TRANSITION_REQUESTED",
    "LifecycleJournal",
    "create_journal",
    "load_journal",
    "save_journal",
]
