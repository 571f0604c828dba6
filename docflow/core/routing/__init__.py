"""Approver routing for DocFlow.

Turns the abstract approver roles named in template flows into concrete
parties using an injected routing table and a fixed fallback chain.
"""

from .roles import ApproverRole, RoutingRule, RoutingTable, DEFAULT_ROUTING_TABLE
from .resolver import (
    ApproverResolver,
    MatchKind,
    OrgContext,
    PartyDirectory,
    Resolution,
    first_step,
    flow_steps,
)

__all__ = [
    "ApproverRole",
    "RoutingRule",
    "RoutingTable",
    "DEFAULT_ROUTING_TABLE",
    "ApproverResolver",
    "MatchKind",
    "OrgContext",
    "PartyDirectory",
    "Resolution",
    "first_step",
    "flow_steps",
]
