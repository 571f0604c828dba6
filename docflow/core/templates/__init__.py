"""Form templates: lookup, unit visibility and field validation."""

from .filters import UnitFilterRule, DEFAULT_UNIT_FILTERS, filter_templates_by_unit
from .store import TemplateStore
from .validation import FieldKind, validate_form_data

__all__ = [
    "UnitFilterRule",
    "DEFAULT_UNIT_FILTERS",
    "filter_templates_by_unit",
    "TemplateStore",
    "FieldKind",
    "validate_form_data",
]
