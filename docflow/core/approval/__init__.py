"""Approval workflow module for DocFlow.

Implements the document state machine, the decision history ledger and
the document service built on them.
"""

from .states import (
    ActorRole,
    DocumentAction,
    DocumentStatus,
    Priority,
    TransitionRule,
    TRANSITION_RULES,
    VALID_TRANSITIONS,
)
from .machine import DocumentStateMachine
from .history import HistoryLedger
from .service import DocumentService

__all__ = [
    "ActorRole",
    "DocumentAction",
    "DocumentStatus",
    "Priority",
    "TransitionRule",
    "TRANSITION_RULES",
    "VALID_TRANSITIONS",
    "DocumentStateMachine",
    "HistoryLedger",
    "DocumentService",
]
