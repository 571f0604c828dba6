"""Permission gate for approval documents.

The single choke point for "may this party do this": every mutating
operation in the document service asks the gate before touching state.
Decision rights are held by parties matching an authority rule (a named
role within a specific unit); the defaults give them to the management
support office.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Set

from docflow.core.approval.states import (
    ActorRole,
    DocumentStatus,
    AWAITING_DECISION_STATES,
)


@dataclass(frozen=True)
class AuthorityRule:
    """A party named ``name`` in ``unit`` holds blanket decision rights."""

    unit: str
    name: str

    def matches(self, party) -> bool:
        return party.name == self.name and party.unit == self.unit


DEFAULT_AUTHORITIES: tuple[AuthorityRule, ...] = (
    AuthorityRule(unit="management-support", name="management"),
)


def _status(document) -> Optional[DocumentStatus]:
    try:
        return DocumentStatus(document.status)
    except ValueError:
        return None


class PermissionGate:
    """Answers permission questions for a party against templates and documents."""

    def __init__(self, authorities: Optional[Iterable[AuthorityRule]] = None):
        self.authorities = tuple(DEFAULT_AUTHORITIES if authorities is None else authorities)

    def has_decision_authority(self, party) -> bool:
        if party is None or not party.is_active:
            return False
        return any(rule.matches(party) for rule in self.authorities)

    def can_submit(self, party, template) -> bool:
        """Active parties may use active templates open to their unit."""
        if party is None or not party.is_active:
            return False
        if template is None or not template.is_active:
            return False

        allowed_units = template.allowed_units or []
        if allowed_units and party.unit not in allowed_units:
            return False
        return True

    def can_view(self, party, document) -> bool:
        """General read access is the submitter's alone."""
        if party is None or document is None:
            return False
        return document.submitter_id == party.id

    def can_decide(self, party, document) -> bool:
        """Decision authority, and the document is waiting for a decision."""
        if document is None or not self.has_decision_authority(party):
            return False
        return _status(document) in AWAITING_DECISION_STATES

    def can_review(self, party, document) -> bool:
        """Wider read rule used when opening a document to decide on it."""
        if party is None or document is None:
            return False
        if document.current_decision_owner_id == party.id:
            return True
        return self.has_decision_authority(party)

    def actor_roles(self, party, document) -> Set[ActorRole]:
        """Roles ``party`` holds on ``document`` for the state machine."""
        roles: Set[ActorRole] = set()
        if party is None or document is None:
            return roles
        if document.submitter_id == party.id:
            roles.add(ActorRole.SUBMITTER)
        if document.current_decision_owner_id == party.id:
            roles.add(ActorRole.DECISION_OWNER)
        return roles
