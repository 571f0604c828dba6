"""Unit-based template visibility.

Each organizational unit may have a whitelist rule over template category
and name. Units without a rule see every template. This shapes what a
party is shown; the permission gate decides what they may submit.
"""

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Sequence


@dataclass(frozen=True)
class UnitFilterRule:
    """A template passes if its category is listed or its name contains a keyword."""

    categories: tuple[str, ...] = ()
    name_keywords: tuple[str, ...] = ()

    def matches(self, template) -> bool:
        category = (template.category or "").lower()
        if category in {c.lower() for c in self.categories}:
            return True
        name = (template.name or "").lower()
        return any(keyword.lower() in name for keyword in self.name_keywords)


DEFAULT_UNIT_FILTERS: dict[str, UnitFilterRule] = {
    "brand-marketing": UnitFilterRule(
        categories=("customer", "marketing"),
        name_keywords=("discount", "marketing"),
    ),
    "hr": UnitFilterRule(
        categories=("hr",),
        name_keywords=("leave", "business trip", "personnel"),
    ),
    "management-support": UnitFilterRule(
        categories=("expense",),
        name_keywords=("purchase", "expense", "settlement"),
    ),
    "education-development": UnitFilterRule(
        categories=("work",),
        name_keywords=("education", "course", "instructor"),
    ),
}


def filter_templates_by_unit(
    templates: Iterable,
    unit: Optional[str],
    rules: Mapping[str, UnitFilterRule],
) -> Sequence:
    """Apply the unit's whitelist rule, or return everything if it has none."""
    templates = list(templates)
    if not unit:
        return templates

    rule = rules.get(unit)
    if rule is None:
        return templates

    return [t for t in templates if rule.matches(t)]
