"""Tests for form data validation."""

import pytest

from docflow.core.errors import ValidationError
from docflow.core.templates import validate_form_data


FIELDS = [
    {"name": "title", "type": "text", "label": "Title", "required": True,
     "validation": {"min": 2, "max": 10}},
    {"name": "code", "type": "text", "label": "Code", "required": False,
     "validation": {"pattern": r"[A-Z]{3}-\d+", "message": "Use the form ABC-123"}},
    {"name": "amount", "type": "number", "label": "Amount", "required": True,
     "validation": {"min": 1, "max": 100}},
    {"name": "day", "type": "date", "label": "Day", "required": False},
    {"name": "kind", "type": "select", "label": "Kind", "required": False,
     "options": ["annual", "sick"]},
    {"name": "notes", "type": "textarea", "label": "Notes", "required": False},
    {"name": "receipts", "type": "file", "label": "Receipts", "required": False},
]


def errors_for(values, **kwargs):
    with pytest.raises(ValidationError) as exc_info:
        validate_form_data(FIELDS, values, **kwargs)
    return exc_info.value.errors


class TestShape:

    def test_valid_values(self):
        validate_form_data(FIELDS, {
            "title": "Trip",
            "code": "ABC-12",
            "amount": "42.5",
            "day": "2026-10-19",
            "kind": "sick",
            "notes": "",
            "receipts": ["r1.pdf", "r2.pdf"],
        })

    def test_partial_draft_is_fine(self):
        validate_form_data(FIELDS, {"title": "Trip"})

    def test_unknown_field(self):
        assert "bogus" in errors_for({"bogus": 1})

    def test_non_mapping(self):
        with pytest.raises(ValidationError):
            validate_form_data(FIELDS, ["title"])

    @pytest.mark.parametrize("value", ["abc", True, -5, float("nan"), float("inf")])
    def test_number_rejects(self, value):
        assert "amount" in errors_for({"amount": value})

    def test_number_bounds(self):
        assert "at least 1" in errors_for({"amount": 0})["amount"]
        assert "at most 100" in errors_for({"amount": 101})["amount"]

    def test_date(self):
        validate_form_data(FIELDS, {"day": "2026-10-19T09:30:00"})
        assert "day" in errors_for({"day": "19/10/2026"})

    def test_select_option(self):
        assert "annual, sick" in errors_for({"kind": "maternity"})["kind"]

    def test_text_length(self):
        assert "title" in errors_for({"title": "x"})
        assert "title" in errors_for({"title": "x" * 11})

    def test_pattern_uses_custom_message(self):
        assert errors_for({"code": "abc-1"})["code"] == "Use the form ABC-123"

    def test_text_must_be_string(self):
        assert errors_for({"title": 12})["title"] == "Title must be text"

    def test_file_references(self):
        assert "receipts" in errors_for({"receipts": [1, 2]})

    def test_unsupported_type(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_form_data([{"name": "x", "type": "colour"}], {"x": "red"})
        assert "unsupported" in exc_info.value.errors["x"]


class TestRequired:

    def test_required_enforced_only_when_complete(self):
        validate_form_data(FIELDS, {})
        errors = errors_for({}, require_complete=True)
        assert set(errors) == {"title", "amount"}
        assert errors["title"] == "Title is required"

    def test_whitespace_counts_as_blank(self):
        errors = errors_for({"title": "   ", "amount": 5}, require_complete=True)
        assert set(errors) == {"title"}

    def test_all_errors_reported_together(self):
        errors = errors_for({"amount": "x", "kind": "other", "bogus": 1}, require_complete=True)
        assert set(errors) == {"title", "amount", "kind", "bogus"}
