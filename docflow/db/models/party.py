import uuid
from sqlalchemy import Column, String, DateTime, Boolean, Uuid

from docflow.db.base import Base, utcnow


class Party(Base):
    """
    A person known to the organizational directory.

    The engine only reads parties: they submit documents, hold approver
    roles and own favorites. Name plus unit is what routing matches on.
    """
    __tablename__ = "parties"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=True)

    # Organizational position
    unit = Column(String(100), nullable=True, index=True)
    team = Column(String(100), nullable=True)
    title = Column(String(100), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow)

    def __repr__(self) -> str:
        return f"<Party {self.name} [{self.unit}]>"
