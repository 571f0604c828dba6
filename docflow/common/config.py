"""Workflow policy configuration for DocFlow.

Handles loading and validation of the YAML file that carries the
deployment's routing table, default administrative party, decision
authorities and unit template filters. Anything the file leaves out keeps
the built-in default.

Example::

    routing:
      department_head: {title: Department Head, unit: null, name: head}
      hr_manager: {title: HR Lead, unit: people, name: hr-lead}
    default_party:
      name: management
      unit: management-support
    authorities:
      - {unit: management-support, name: management}
    unit_filters:
      hr:
        categories: [hr]
        name_keywords: [leave, business trip]
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from docflow.core.rbac import AuthorityRule, DEFAULT_AUTHORITIES
from docflow.core.routing.roles import (
    ApproverRole,
    RoutingRule,
    RoutingTable,
    DEFAULT_ROUTING_TABLE,
    DEFAULT_PARTY_NAME,
    DEFAULT_PARTY_UNIT,
)
from docflow.core.templates.filters import DEFAULT_UNIT_FILTERS, UnitFilterRule


@dataclass
class WorkflowConfig:
    """Top-level workflow policy."""

    routing_table: RoutingTable = field(default_factory=lambda: dict(DEFAULT_ROUTING_TABLE))
    default_party_name: str = DEFAULT_PARTY_NAME
    default_party_unit: Optional[str] = DEFAULT_PARTY_UNIT
    authorities: List[AuthorityRule] = field(default_factory=lambda: list(DEFAULT_AUTHORITIES))
    unit_filters: Dict[str, UnitFilterRule] = field(default_factory=lambda: dict(DEFAULT_UNIT_FILTERS))


def parse_routing_table(routing_dict: Dict[str, Any]) -> RoutingTable:
    """Parse the ``routing`` section over the default table.

    Args:
        routing_dict: Role name to rule mapping

    Returns:
        Routing table with overrides applied

    Raises:
        ValueError: If a role name is unknown or a rule has no party name
    """
    table = dict(DEFAULT_ROUTING_TABLE)
    for role_name, rule_dict in routing_dict.items():
        try:
            role = ApproverRole(role_name)
        except ValueError:
            raise ValueError(f"Unknown approver role in routing config: {role_name!r}")

        rule_dict = rule_dict or {}
        if not rule_dict.get("name"):
            raise ValueError(f"Routing rule for {role_name!r} must name a party")

        table[role] = RoutingRule(
            title=rule_dict.get("title", role_name),
            unit=rule_dict.get("unit"),
            name=rule_dict["name"],
        )
    return table


def parse_authorities(authority_list: List[Dict[str, Any]]) -> List[AuthorityRule]:
    """Parse the ``authorities`` section; it replaces the defaults entirely."""
    authorities = []
    for entry in authority_list:
        if not entry.get("unit") or not entry.get("name"):
            raise ValueError(f"Authority rule needs both unit and name: {entry!r}")
        authorities.append(AuthorityRule(unit=entry["unit"], name=entry["name"]))
    return authorities


def parse_unit_filters(filters_dict: Dict[str, Any]) -> Dict[str, UnitFilterRule]:
    """Parse the ``unit_filters`` section over the default rules."""
    filters = dict(DEFAULT_UNIT_FILTERS)
    for unit, rule_dict in filters_dict.items():
        rule_dict = rule_dict or {}
        filters[unit] = UnitFilterRule(
            categories=tuple(rule_dict.get("categories", [])),
            name_keywords=tuple(rule_dict.get("name_keywords", [])),
        )
    return filters


def parse_config(config_dict: Dict[str, Any]) -> WorkflowConfig:
    """Parse the full configuration dictionary.

    Args:
        config_dict: Full configuration dictionary

    Returns:
        WorkflowConfig instance
    """
    config = WorkflowConfig()

    if "routing" in config_dict:
        config.routing_table = parse_routing_table(config_dict["routing"] or {})

    default_party = config_dict.get("default_party") or {}
    config.default_party_name = default_party.get("name", DEFAULT_PARTY_NAME)
    config.default_party_unit = default_party.get("unit", DEFAULT_PARTY_UNIT)

    if "authorities" in config_dict:
        config.authorities = parse_authorities(config_dict["authorities"] or [])

    if "unit_filters" in config_dict:
        config.unit_filters = parse_unit_filters(config_dict["unit_filters"] or {})

    return config


def load_config(config_path: str) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with config_file.open("r") as f:
        config = yaml.safe_load(f)

    if config is None:
        config = {}

    if not isinstance(config, dict):
        raise TypeError(
            f"Configuration root must be a mapping, got {type(config).__name__}"
        )

    return _expand_env_vars(config)


def _expand_env_vars(obj: Any) -> Any:
    """Recursively expand environment variables in configuration."""
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    elif isinstance(obj, str):
        return os.path.expandvars(obj)
    else:
        return obj


def load_workflow_config(config_path: Optional[str] = None) -> WorkflowConfig:
    """Load the workflow policy, or the built-in defaults when no path is given."""
    if not config_path:
        return WorkflowConfig()
    return parse_config(load_config(config_path))
