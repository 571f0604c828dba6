"""Approver resolution.

Maps an abstract approver role plus the submitter's organizational context
to a concrete party. Resolution is deterministic and walks a fixed chain:

    1. exact match on the rule's party name and target unit
    2. party name only, any unit
    3. the designated default administrative party
    4. nothing (store misconfiguration, reported to the caller)

The resolver never writes; it only reads through a ``PartyDirectory``.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, NamedTuple, Optional, Protocol, Tuple
from uuid import UUID

from docflow.core.errors import RoutingError
from .roles import (
    ApproverRole,
    RoutingRule,
    DEFAULT_ROUTING_TABLE,
    DEFAULT_PARTY_NAME,
    DEFAULT_PARTY_UNIT,
    parse_role,
)

logger = logging.getLogger(__name__)


class OrgContext(NamedTuple):
    """Organizational position of a party."""
    unit: Optional[str]
    team: Optional[str]


class PartyDirectory(Protocol):
    """Read-only view of the organizational directory."""

    def lookup_party(self, name: str, unit: Optional[str] = None) -> Optional[UUID]:
        ...

    def get_party_context(self, party_id: UUID) -> Optional[OrgContext]:
        ...


class MatchKind(str, Enum):
    """How closely the resolved party matched the routing rule."""

    EXACT = "exact"
    NAME_ONLY = "name_only"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class Resolution:
    party_id: UUID
    role: Optional[ApproverRole]
    title: Optional[str]
    match: MatchKind


class ApproverResolver:
    """Resolves approver roles against the party directory."""

    def __init__(
        self,
        directory: PartyDirectory,
        routing_table: Optional[Mapping[ApproverRole, RoutingRule]] = None,
        *,
        default_party_name: str = DEFAULT_PARTY_NAME,
        default_party_unit: Optional[str] = DEFAULT_PARTY_UNIT,
    ):
        self.directory = directory
        self.routing_table = dict(DEFAULT_ROUTING_TABLE if routing_table is None else routing_table)
        self.default_party_name = default_party_name
        self.default_party_unit = default_party_unit

    def resolve(self, role: ApproverRole, context: OrgContext) -> Optional[Resolution]:
        """
        Resolve ``role`` for a submitter in ``context``.

        Returns:
            The resolution, or None when even the default party is missing
        """
        rule = self.routing_table.get(role)

        if rule is not None:
            target_unit = rule.unit or context.unit
            if target_unit:
                party_id = self.directory.lookup_party(rule.name, target_unit)
                if party_id:
                    return Resolution(party_id, role, rule.title, MatchKind.EXACT)

            party_id = self.directory.lookup_party(rule.name)
            if party_id:
                logger.warning(
                    f"Role {role.value} resolved by name only: {rule.name!r} not found in unit {target_unit!r}"
                )
                return Resolution(party_id, role, rule.title, MatchKind.NAME_ONLY)
        else:
            logger.warning(f"No routing rule for role {role.value}")

        party_id = self.directory.lookup_party(self.default_party_name, self.default_party_unit)
        if party_id:
            logger.warning(
                f"Role {role.value} fell back to default party {self.default_party_name!r}"
            )
            return Resolution(party_id, role, rule.title if rule else None, MatchKind.FALLBACK)

        logger.error(
            f"Cannot resolve role {role.value}: default party {self.default_party_name!r} "
            f"is missing from the directory"
        )
        return None

    def resolve_first_step(
        self,
        approval_flow: Optional[Dict[str, Any]],
        context: OrgContext,
    ) -> Tuple[Dict[str, Any], Resolution]:
        """
        Resolve the decision owner for the first step of an approval flow.

        Only the first step is ever bound; later steps are descriptive.

        Raises:
            RoutingError: If the flow has no steps, names an unknown role,
                or nobody can be resolved
        """
        step = first_step(approval_flow)
        if step is None:
            raise RoutingError("Approval flow declares no steps")

        raw_role = step.get("approver_role")
        role = parse_role(raw_role) if isinstance(raw_role, str) else None
        if role is None:
            raise RoutingError(f"Unknown approver role: {raw_role!r}", role=raw_role)

        resolution = self.resolve(role, context)
        if resolution is None:
            raise RoutingError(
                f"No party could be resolved for role {role.value}", role=role.value
            )
        return step, resolution


def flow_steps(approval_flow: Optional[Dict[str, Any]]) -> list[Dict[str, Any]]:
    """Steps of an approval flow ordered by their ``order`` key."""
    if not approval_flow:
        return []
    steps = [s for s in approval_flow.get("steps") or [] if isinstance(s, dict)]
    return sorted(steps, key=lambda s: s.get("order", 0))


def first_step(approval_flow: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    steps = flow_steps(approval_flow)
    return steps[0] if steps else None
