"""Abstract approver roles and the role routing table.

Templates describe their approval flow in terms of abstract roles
("department head approves") rather than concrete people. The routing
table maps each role to the display title, organizational unit and party
name that currently hold it. The table is injected into the resolver, so
deployments override it through the workflow YAML file.
"""

from enum import Enum
from typing import Dict, NamedTuple, Optional


class ApproverRole(str, Enum):
    """Roles a template flow step may name as its approver."""

    DIRECT_MANAGER = "direct_manager"
    DEPARTMENT_HEAD = "department_head"
    HR_MANAGER = "hr_manager"
    GENERAL_MANAGER = "general_manager"
    ACCOUNTING_MANAGER = "accounting_manager"
    PURCHASE_MANAGER = "purchase_manager"
    SALES_MANAGER = "sales_manager"
    DIRECTOR = "director"
    CHIEF_EXECUTIVE = "chief_executive"


class RoutingRule(NamedTuple):
    """Canonical holder of a role.

    ``unit`` of ``None`` means "the submitter's own unit", which is how the
    submitter's organizational context biases resolution.
    """
    title: str
    unit: Optional[str]
    name: str


RoutingTable = Dict[ApproverRole, RoutingRule]


DEFAULT_ROUTING_TABLE: RoutingTable = {
    ApproverRole.DIRECT_MANAGER: RoutingRule("Team Manager", None, "manager"),
    ApproverRole.DEPARTMENT_HEAD: RoutingRule("Department Head", None, "head"),
    ApproverRole.HR_MANAGER: RoutingRule("HR Manager", "hr", "hr-manager"),
    ApproverRole.GENERAL_MANAGER: RoutingRule("Head of Management Support", "management-support", "management"),
    ApproverRole.ACCOUNTING_MANAGER: RoutingRule("Accounting Lead", "management-support", "accounting"),
    ApproverRole.PURCHASE_MANAGER: RoutingRule("Purchasing Lead", "management-support", "purchasing"),
    ApproverRole.SALES_MANAGER: RoutingRule("Sales Lead", "brand-marketing", "sales"),
    ApproverRole.DIRECTOR: RoutingRule("Director", "executive", "director"),
    ApproverRole.CHIEF_EXECUTIVE: RoutingRule("Chief Executive", "executive", "ceo"),
}

# Party that receives any role the table cannot place
DEFAULT_PARTY_NAME = "management"
DEFAULT_PARTY_UNIT = "management-support"


def parse_role(value: str) -> Optional[ApproverRole]:
    """Return the role named by ``value`` or None if it is not a known role."""
    try:
        return ApproverRole(value)
    except ValueError:
        return None
