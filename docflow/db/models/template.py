"""Form template model.

A template is a reusable form definition: field schema, declared approval
flow, required attachment labels and unit visibility. Documents copy the
approval flow at creation, so editing a template never changes documents
that already exist.
"""

import uuid
from sqlalchemy import Column, String, DateTime, Boolean, Integer, JSON, Text, Uuid

from docflow.db.base import Base, utcnow


class FormTemplate(Base):
    __tablename__ = "form_templates"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=True)

    # [{name, type, label, required, options, placeholder, validation}]
    fields = Column(JSON, nullable=False, default=list)

    # {steps: [{order, approver_role, required}], parallel_approval, escalation_days}
    approval_flow = Column(JSON, nullable=False, default=dict)

    required_attachments = Column(JSON, nullable=False, default=list)

    # Units allowed to submit this template; empty means everyone
    allowed_units = Column(JSON, nullable=False, default=list)

    is_active = Column(Boolean, nullable=False, default=True, index=True)
    sort_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<FormTemplate {self.name} [{self.category}]>"
