"""Form data validation against a template's field schema.

Drafts are checked for shape only (no unknown fields, values of the right
kind and within bounds). Submission additionally requires every required
field to be filled in.
"""

import math
import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from docflow.core.errors import ValidationError


class FieldKind(str, Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    DATE = "date"
    NUMBER = "number"
    SELECT = "select"
    FILE = "file"


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def _label(field: Dict[str, Any]) -> str:
    return field.get("label") or field["name"]


def _parse_date(value: Any) -> bool:
    if isinstance(value, (date, datetime)):
        return True
    if not isinstance(value, str):
        return False
    try:
        date.fromisoformat(value)
        return True
    except ValueError:
        pass
    try:
        datetime.fromisoformat(value)
        return True
    except ValueError:
        return False


def _check_number(field: Dict[str, Any], value: Any) -> Optional[str]:
    rules = field.get("validation") or {}
    if isinstance(value, bool):
        return rules.get("message") or f"{_label(field)} must be a number"
    try:
        number = float(value)
    except (TypeError, ValueError):
        return rules.get("message") or f"{_label(field)} must be a number"
    if math.isnan(number) or math.isinf(number) or number < 0:
        return rules.get("message") or f"{_label(field)} must be a non-negative number"

    minimum = rules.get("min")
    maximum = rules.get("max")
    if minimum is not None and number < minimum:
        return rules.get("message") or f"{_label(field)} must be at least {minimum}"
    if maximum is not None and number > maximum:
        return rules.get("message") or f"{_label(field)} must be at most {maximum}"
    return None


def _check_text(field: Dict[str, Any], value: Any) -> Optional[str]:
    rules = field.get("validation") or {}
    if not isinstance(value, str):
        return f"{_label(field)} must be text"

    # min/max bound the length of text fields
    minimum = rules.get("min")
    maximum = rules.get("max")
    if minimum is not None and len(value) < minimum:
        return rules.get("message") or f"{_label(field)} must be at least {minimum} characters"
    if maximum is not None and len(value) > maximum:
        return rules.get("message") or f"{_label(field)} must be at most {maximum} characters"

    pattern = rules.get("pattern")
    if pattern and re.fullmatch(pattern, value) is None:
        return rules.get("message") or f"{_label(field)} has an invalid format"
    return None


def _check_value(field: Dict[str, Any], value: Any) -> Optional[str]:
    kind = field.get("type", FieldKind.TEXT.value)

    if kind == FieldKind.NUMBER:
        return _check_number(field, value)
    if kind == FieldKind.DATE:
        if not _parse_date(value):
            return f"{_label(field)} must be a valid date"
        return None
    if kind == FieldKind.SELECT:
        options = field.get("options") or []
        if options and value not in options:
            return f"{_label(field)} must be one of: {', '.join(map(str, options))}"
        return None
    if kind in (FieldKind.TEXT, FieldKind.TEXTAREA):
        return _check_text(field, value)
    if kind == FieldKind.FILE:
        # Attachment references; storage is handled elsewhere
        if isinstance(value, str) or (
            isinstance(value, list) and all(isinstance(v, str) for v in value)
        ):
            return None
        return f"{_label(field)} must reference uploaded files"

    return f"{_label(field)} has unsupported field type {kind!r}"


def validate_form_data(
    fields: Optional[List[Dict[str, Any]]],
    values: Any,
    *,
    require_complete: bool = False,
) -> None:
    """
    Validate ``values`` against a template's field schema.

    Args:
        fields: The template's field definitions
        values: Field name to value mapping
        require_complete: Also enforce required fields (used at submission)

    Raises:
        ValidationError: With a per-field ``errors`` mapping
    """
    if not isinstance(values, dict):
        raise ValidationError("Form data must be a mapping of field names to values")

    schema = {
        f["name"]: f
        for f in (fields if isinstance(fields, list) else [])
        if isinstance(f, dict) and f.get("name")
    }
    errors: Dict[str, str] = {}

    for name in values:
        if name not in schema:
            errors[name] = f"Unknown field {name!r}"

    for name, field in schema.items():
        value = values.get(name)
        if _is_blank(value):
            if require_complete and field.get("required"):
                errors[name] = f"{_label(field)} is required"
            continue

        message = _check_value(field, value)
        if message:
            errors[name] = message

    if errors:
        raise ValidationError("Form data failed validation", errors=errors)
