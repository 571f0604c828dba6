"""Document state machine.

Validates a requested action against the transition table and against the
acting party's relationship to the document. It holds no persistence;
the document service applies the resulting status with a conditional
update.
"""

from typing import Iterable, Optional
from uuid import UUID

from docflow.core.errors import PermissionDeniedError, TransitionError
from .states import (
    ActorRole,
    DocumentAction,
    DocumentStatus,
    TransitionRule,
    AWAITING_DECISION_STATES,
    DECISION_ACTIONS,
    TERMINAL_STATES,
    can_transition,
    get_transition_rule,
)


class DocumentStateMachine:
    """
    State machine for one approval document.

    Checks, in order:
    - for decisions, the actor is the decision owner (PermissionDeniedError)
    - the action is valid from the current status (TransitionError)
    - the actor holds the role the rule requires (PermissionDeniedError)

    A party that does not own the decision is denied whatever the
    document's status is.
    """

    def __init__(
        self,
        document_id: UUID,
        current_state: DocumentStatus,
        *,
        actor_roles: Optional[Iterable[ActorRole]] = None,
    ):
        """
        Initialize the state machine.

        Args:
            document_id: ID of the document
            current_state: Status as last read from the store
            actor_roles: Roles the acting party holds on this document
        """
        self.document_id = document_id
        self._state = current_state
        self.actor_roles = set(actor_roles or [])

    @property
    def state(self) -> DocumentStatus:
        return self._state

    @property
    def is_terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    @property
    def is_awaiting_decision(self) -> bool:
        return self._state in AWAITING_DECISION_STATES

    def can_perform(self, action: DocumentAction) -> bool:
        """Check if the actor can perform ``action`` from the current state."""
        rule = get_transition_rule(self._state, action)
        return rule is not None and rule.actor in self.actor_roles

    def get_available_actions(self) -> list[DocumentAction]:
        """Actions available to the actor from the current state."""
        return [action for action in DocumentAction if self.can_perform(action)]

    def check(self, action: DocumentAction) -> TransitionRule:
        """
        Validate an action without changing state.

        Returns:
            The matching transition rule

        Raises:
            TransitionError: If the action is not valid from the current state
            PermissionDeniedError: If the actor lacks the required role
        """
        if action in DECISION_ACTIONS and ActorRole.DECISION_OWNER not in self.actor_roles:
            raise PermissionDeniedError(
                f"Only the document's decision owner may {action.value} it"
            )

        if not can_transition(self._state, action):
            raise TransitionError(
                f"Cannot {action.value} a document in status {self._state.value}",
                self._state,
                action,
            )

        rule = get_transition_rule(self._state, action)
        if rule.actor not in self.actor_roles:
            raise PermissionDeniedError(
                f"Only the document's {rule.actor.value.replace('_', ' ')} may {action.value} it"
            )

        return rule

    def transition(self, action: DocumentAction) -> DocumentStatus:
        """
        Perform a transition on the in-memory state.

        Returns:
            The new state

        Raises:
            TransitionError: If the action is invalid
            PermissionDeniedError: If the actor lacks the required role
        """
        rule = self.check(action)
        self._state = rule.to_state
        return self._state
