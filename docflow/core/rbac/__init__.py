"""Permission gate for DocFlow.

Decides which party may submit, view, review and decide documents.
"""

from .gate import AuthorityRule, DEFAULT_AUTHORITIES, PermissionGate

__all__ = [
    "AuthorityRule",
    "DEFAULT_AUTHORITIES",
    "PermissionGate",
]
