"""Approval document and decision history models."""

import uuid
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, Integer, Text, Uuid, event
from sqlalchemy.orm import relationship

from docflow.db.base import Base, utcnow


class ApprovalDocument(Base):
    """
    One approval request created from a template.

    ``status`` only changes through conditional updates issued by the
    document service. Documents are never deleted; terminal ones stay for
    audit.
    """
    __tablename__ = "approval_documents"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    template_id = Column(Uuid(as_uuid=True), ForeignKey("form_templates.id"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=True)
    form_data = Column(JSON, nullable=False, default=dict)

    submitter_id = Column(Uuid(as_uuid=True), ForeignKey("parties.id"), nullable=False, index=True)
    current_decision_owner_id = Column(Uuid(as_uuid=True), ForeignKey("parties.id"), nullable=True, index=True)

    status = Column(String(20), nullable=False, default="draft", index=True)
    priority = Column(String(20), nullable=False, default="normal")

    # Copy of the template's flow taken at creation time
    approval_flow = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    submitted_at = Column(DateTime, nullable=True)
    decided_at = Column(DateTime, nullable=True)

    # Relationships
    template = relationship("FormTemplate")
    submitter = relationship("Party", foreign_keys=[submitter_id])
    decision_owner = relationship("Party", foreign_keys=[current_decision_owner_id])
    history = relationship(
        "ApprovalHistory",
        back_populates="document",
        order_by="ApprovalHistory.created_at",
    )

    def __repr__(self) -> str:
        return f"<ApprovalDocument {self.title} [{self.status}]>"


class ImmutableRecordError(Exception):
    """Raised when code tries to modify or delete a history entry."""


class ApprovalHistory(Base):
    """
    One decision made against a document.

    Append-only. The ORM refuses updates and deletes; on PostgreSQL the
    initial migration also installs triggers that reject them.
    """
    __tablename__ = "approval_history"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    document_id = Column(Uuid(as_uuid=True), ForeignKey("approval_documents.id"), nullable=False, index=True)
    actor_id = Column(Uuid(as_uuid=True), ForeignKey("parties.id"), nullable=False)

    action = Column(String(20), nullable=False)
    comment = Column(Text, nullable=True)
    step_order = Column(Integer, nullable=False, default=1)

    from_status = Column(String(20), nullable=False)
    to_status = Column(String(20), nullable=False)

    created_at = Column(DateTime, default=utcnow, index=True)

    # Relationships
    document = relationship("ApprovalDocument", back_populates="history")
    actor = relationship("Party")

    def __repr__(self) -> str:
        return f"<ApprovalHistory {self.action} {self.from_status} -> {self.to_status}>"


@event.listens_for(ApprovalHistory, "before_update")
def _reject_history_update(mapper, connection, target):
    raise ImmutableRecordError(f"Approval history is immutable. Record ID: {target.id}")


@event.listens_for(ApprovalHistory, "before_delete")
def _reject_history_delete(mapper, connection, target):
    raise ImmutableRecordError(f"Approval history cannot be deleted. Record ID: {target.id}")
