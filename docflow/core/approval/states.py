"""Document statuses, actions and the transition table.

State Machine Diagram:

    ┌──────────┐   edit
    │  DRAFT   │◄──────┐
    └────┬─────┘───────┘
         │ submit           ▲
    ┌────▼──────┐           │ return
    │ SUBMITTED │───────────┤
    │ / PENDING │           │
    └────┬──────┘           │
         │                  │
         ├──────────────────┘
         │
         ├─────────────┐
         │             │
    ┌────▼─────┐  ┌────▼─────┐
    │ APPROVED │  │ REJECTED │
    └──────────┘  └──────────┘

    DRAFT / SUBMITTED ──cancel──► CANCELLED

APPROVED, REJECTED and CANCELLED are terminal. SUBMITTED and PENDING are
both "awaiting decision"; the engine moves documents to SUBMITTED.

This table is the single source of truth for the engine and for anything
presenting available actions.
"""

from enum import Enum
from typing import Set, Dict, Optional, NamedTuple


class DocumentStatus(str, Enum):
    """Statuses of an approval document."""

    DRAFT = "draft"               # Being written; submitter may edit
    SUBMITTED = "submitted"       # Awaiting the decision owner
    PENDING = "pending"           # Awaiting the decision owner

    # Terminal states
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"       # Withdrawn by the submitter


class DocumentAction(str, Enum):
    """Actions that trigger status transitions."""

    # Submitter actions
    EDIT = "edit"                 # DRAFT → DRAFT
    SUBMIT = "submit"             # DRAFT → SUBMITTED
    CANCEL = "cancel"             # DRAFT/SUBMITTED → CANCELLED

    # Decision owner actions
    APPROVE = "approve"           # SUBMITTED/PENDING → APPROVED
    REJECT = "reject"             # SUBMITTED/PENDING → REJECTED
    RETURN = "return"             # SUBMITTED/PENDING → DRAFT


class ActorRole(str, Enum):
    """The relationship an acting party has to a document."""

    SUBMITTER = "submitter"
    DECISION_OWNER = "decision_owner"


class Priority(str, Enum):
    """Informational ordering only; never affects routing."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class TransitionRule(NamedTuple):
    """Defines a valid state transition."""
    from_state: DocumentStatus
    to_state: DocumentStatus
    action: DocumentAction
    actor: ActorRole


TRANSITION_RULES: list[TransitionRule] = [
    # Drafting
    TransitionRule(DocumentStatus.DRAFT, DocumentStatus.DRAFT, DocumentAction.EDIT, ActorRole.SUBMITTER),
    TransitionRule(DocumentStatus.DRAFT, DocumentStatus.SUBMITTED, DocumentAction.SUBMIT, ActorRole.SUBMITTER),

    # Withdrawal
    TransitionRule(DocumentStatus.DRAFT, DocumentStatus.CANCELLED, DocumentAction.CANCEL, ActorRole.SUBMITTER),
    TransitionRule(DocumentStatus.SUBMITTED, DocumentStatus.CANCELLED, DocumentAction.CANCEL, ActorRole.SUBMITTER),

    # Decisions
    TransitionRule(DocumentStatus.SUBMITTED, DocumentStatus.APPROVED, DocumentAction.APPROVE, ActorRole.DECISION_OWNER),
    TransitionRule(DocumentStatus.SUBMITTED, DocumentStatus.REJECTED, DocumentAction.REJECT, ActorRole.DECISION_OWNER),
    TransitionRule(DocumentStatus.SUBMITTED, DocumentStatus.DRAFT, DocumentAction.RETURN, ActorRole.DECISION_OWNER),
    TransitionRule(DocumentStatus.PENDING, DocumentStatus.APPROVED, DocumentAction.APPROVE, ActorRole.DECISION_OWNER),
    TransitionRule(DocumentStatus.PENDING, DocumentStatus.REJECTED, DocumentAction.REJECT, ActorRole.DECISION_OWNER),
    TransitionRule(DocumentStatus.PENDING, DocumentStatus.DRAFT, DocumentAction.RETURN, ActorRole.DECISION_OWNER),
]

# Build lookup tables for efficient access
VALID_TRANSITIONS: Dict[DocumentStatus, Set[DocumentAction]] = {}
TRANSITION_TARGETS: Dict[tuple[DocumentStatus, DocumentAction], TransitionRule] = {}

for rule in TRANSITION_RULES:
    if rule.from_state not in VALID_TRANSITIONS:
        VALID_TRANSITIONS[rule.from_state] = set()
    VALID_TRANSITIONS[rule.from_state].add(rule.action)

    TRANSITION_TARGETS[(rule.from_state, rule.action)] = rule


# No outgoing transitions
TERMINAL_STATES: Set[DocumentStatus] = {
    DocumentStatus.APPROVED,
    DocumentStatus.REJECTED,
    DocumentStatus.CANCELLED,
}

# Exactly one party (the decision owner) may act in these
AWAITING_DECISION_STATES: Set[DocumentStatus] = {
    DocumentStatus.SUBMITTED,
    DocumentStatus.PENDING,
}

# Actions recorded in the history ledger
DECISION_ACTIONS: Set[DocumentAction] = {
    DocumentAction.APPROVE,
    DocumentAction.REJECT,
    DocumentAction.RETURN,
}


def can_transition(from_state: DocumentStatus, action: DocumentAction) -> bool:
    """Check if an action is valid from the given state."""
    valid = VALID_TRANSITIONS.get(from_state, set())
    return action in valid


def get_transition_rule(from_state: DocumentStatus, action: DocumentAction) -> Optional[TransitionRule]:
    """Get the transition rule for a state/action combination."""
    return TRANSITION_TARGETS.get((from_state, action))


def get_target_state(from_state: DocumentStatus, action: DocumentAction) -> Optional[DocumentStatus]:
    """Get the target state for a transition."""
    rule = get_transition_rule(from_state, action)
    return rule.to_state if rule else None
