import uuid
from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from docflow.db.base import Base, utcnow


class FavoriteForm(Base):
    """A party's bookmark on a template. At most one per (party, template)."""
    __tablename__ = "favorite_forms"
    __table_args__ = (
        UniqueConstraint("party_id", "template_id", name="uq_favorite_forms_party_template"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    party_id = Column(Uuid(as_uuid=True), ForeignKey("parties.id", ondelete="CASCADE"), nullable=False, index=True)
    template_id = Column(Uuid(as_uuid=True), ForeignKey("form_templates.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=utcnow)

    template = relationship("FormTemplate")
