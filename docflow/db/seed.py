"""Database seeding for DocFlow.

Creates the default administrative party that approver resolution falls
back to, plus a starter set of form templates.
"""

import uuid
from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy import and_

from docflow.core.routing.roles import ApproverRole, DEFAULT_PARTY_NAME, DEFAULT_PARTY_UNIT
from docflow.db.models import Party, FormTemplate


SAMPLE_TEMPLATES = [
    {
        "name": "Leave Request",
        "category": "hr",
        "description": "Annual, sick or special leave",
        "fields": [
            {"name": "leave_type", "type": "select", "label": "Leave type", "required": True,
             "options": ["annual", "sick", "special"]},
            {"name": "start_date", "type": "date", "label": "Start date", "required": True},
            {"name": "end_date", "type": "date", "label": "End date", "required": True},
            {"name": "reason", "type": "textarea", "label": "Reason", "required": False,
             "validation": {"max": 1000}},
        ],
        "approval_flow": {
            "steps": [
                {"order": 1, "approver_role": ApproverRole.GENERAL_MANAGER.value, "required": True},
            ],
        },
        "required_attachments": [],
        "sort_order": 10,
    },
    {
        "name": "Business Trip Request",
        "category": "hr",
        "description": "Travel for client visits, events or training",
        "fields": [
            {"name": "destination", "type": "text", "label": "Destination", "required": True},
            {"name": "start_date", "type": "date", "label": "Departure", "required": True},
            {"name": "end_date", "type": "date", "label": "Return", "required": True},
            {"name": "budget", "type": "number", "label": "Estimated budget", "required": True,
             "validation": {"min": 0, "max": 10000000}},
        ],
        "approval_flow": {
            "steps": [
                {"order": 1, "approver_role": ApproverRole.GENERAL_MANAGER.value, "required": True},
                {"order": 2, "approver_role": ApproverRole.DIRECTOR.value, "required": False},
            ],
        },
        "required_attachments": ["Itinerary"],
        "sort_order": 20,
    },
    {
        "name": "Expense Settlement",
        "category": "expense",
        "description": "Reimbursement of business expenses",
        "fields": [
            {"name": "amount", "type": "number", "label": "Amount", "required": True,
             "validation": {"min": 1, "message": "Amount must be a positive number"}},
            {"name": "spent_on", "type": "date", "label": "Date of expense", "required": True},
            {"name": "purpose", "type": "text", "label": "Purpose", "required": True,
             "validation": {"max": 200}},
            {"name": "receipts", "type": "file", "label": "Receipts", "required": True},
        ],
        "approval_flow": {
            "steps": [
                {"order": 1, "approver_role": ApproverRole.GENERAL_MANAGER.value, "required": True},
            ],
        },
        "required_attachments": ["Receipt"],
        "sort_order": 30,
    },
    {
        "name": "Customer Discount Request",
        "category": "customer",
        "description": "Special pricing for a customer",
        "fields": [
            {"name": "customer", "type": "text", "label": "Customer", "required": True},
            {"name": "discount_rate", "type": "number", "label": "Discount rate (%)", "required": True,
             "validation": {"min": 0, "max": 100}},
            {"name": "reason", "type": "textarea", "label": "Reason", "required": True},
        ],
        "approval_flow": {
            "steps": [
                {"order": 1, "approver_role": ApproverRole.GENERAL_MANAGER.value, "required": True},
            ],
        },
        "required_attachments": [],
        "allowed_units": ["brand-marketing"],
        "sort_order": 40,
    },
]


def seed_directory(
    db: Session,
    *,
    name: str = DEFAULT_PARTY_NAME,
    unit: Optional[str] = DEFAULT_PARTY_UNIT,
    email: Optional[str] = None,
) -> Party:
    """
    Create the default administrative party.

    Idempotent: an existing active party with the same name and unit is
    returned unchanged.

    Returns:
        The default party
    """
    existing = db.query(Party).filter(
        and_(
            Party.name == name,
            Party.unit == unit,
            Party.is_active == True,
        )
    ).first()

    if existing:
        return existing

    party = Party(
        id=uuid.uuid4(),
        name=name,
        unit=unit,
        email=email,
        title="Head of Management Support",
    )
    db.add(party)
    db.flush()
    return party


def seed_templates(db: Session, templates: Optional[list] = None) -> list[FormTemplate]:
    """
    Create the starter form templates.

    Templates are matched by name; existing ones are left alone.

    Returns:
        All seeded templates, existing and new
    """
    seeded = []

    for spec in templates if templates is not None else SAMPLE_TEMPLATES:
        existing = db.query(FormTemplate).filter(FormTemplate.name == spec["name"]).first()
        if existing:
            seeded.append(existing)
            continue

        template = FormTemplate(
            id=uuid.uuid4(),
            name=spec["name"],
            category=spec["category"],
            description=spec.get("description"),
            fields=spec.get("fields", []),
            approval_flow=spec.get("approval_flow", {}),
            required_attachments=spec.get("required_attachments", []),
            allowed_units=spec.get("allowed_units", []),
            sort_order=spec.get("sort_order", 0),
        )
        db.add(template)
        seeded.append(template)

    db.flush()
    return seeded


# CLI script for seeding
if __name__ == "__main__":
    import sys
    from docflow.db.session import SessionLocal

    db = SessionLocal()
    try:
        party = seed_directory(db)
        print(f"Default party: {party.name} [{party.unit}] (ID: {party.id})")

        templates = seed_templates(db)
        print(f"\nSeeded {len(templates)} templates:")
        for template in templates:
            steps = len((template.approval_flow or {}).get("steps", []))
            print(f"  - {template.name} [{template.category}]: {steps} step(s)")

        db.commit()
        print("\nSeeding complete!")

    except Exception as e:
        db.rollback()
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        db.close()
