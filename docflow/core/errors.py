"""Error taxonomy for the approval workflow.

Every failure an operation can report belongs to exactly one category so
the presentation layer can pick a message: validation, permission, not
found, routing, or conflict. ``TransitionError`` is a conflict with the
document's current status (the action is not valid from where it is now).
"""

from typing import Dict, Optional


class WorkflowError(Exception):
    """Base class for all workflow errors."""

    code = "workflow_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(WorkflowError):
    """Malformed or missing input, detected before any mutation."""

    code = "validation_error"

    def __init__(self, message: str, errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.errors = errors or {}


class PermissionDeniedError(WorkflowError):
    """The acting party may not perform the operation."""

    code = "permission_denied"


class NotFoundError(WorkflowError):
    """Unknown template or document id."""

    code = "not_found"

    def __init__(self, resource: str, resource_id):
        super().__init__(f"{resource} {resource_id} not found")
        self.resource = resource
        self.resource_id = resource_id


class RoutingError(WorkflowError):
    """No decision owner could be resolved for an approval flow."""

    code = "routing_error"

    def __init__(self, message: str, role: Optional[str] = None):
        super().__init__(message)
        self.role = role


class ConflictError(WorkflowError):
    """The document changed underneath the caller (e.g. someone already decided it)."""

    code = "conflict"


class TransitionError(ConflictError):
    """The requested action is not valid from the document's current status."""

    code = "invalid_transition"

    def __init__(self, message: str, from_state, action):
        super().__init__(message)
        self.from_state = from_state
        self.action = action
