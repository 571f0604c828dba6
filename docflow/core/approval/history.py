"""Decision history ledger.

Append-only record of every decision made against a document. There is no
update or delete here, and the model itself refuses both.
"""

from datetime import timedelta
from typing import List, Optional
from uuid import UUID
import uuid

from sqlalchemy import func
from sqlalchemy.orm import Session

from docflow.db.base import utcnow
from docflow.db.models import ApprovalHistory
from .states import DocumentAction, DocumentStatus


class HistoryLedger:
    """Appends and lists decision records."""

    def __init__(self, db: Session):
        self.db = db

    def append(
        self,
        document_id: UUID,
        actor_id: UUID,
        action: DocumentAction,
        *,
        step_order: int,
        from_status: DocumentStatus,
        to_status: DocumentStatus,
        comment: Optional[str] = None,
    ) -> ApprovalHistory:
        created_at = utcnow()
        latest = self.db.query(func.max(ApprovalHistory.created_at)).filter(
            ApprovalHistory.document_id == document_id
        ).scalar()
        if latest is not None and created_at <= latest:
            # Entries for one document must be strictly ordered
            created_at = latest + timedelta(microseconds=1)

        entry = ApprovalHistory(
            id=uuid.uuid4(),
            document_id=document_id,
            actor_id=actor_id,
            action=action.value,
            comment=comment,
            step_order=step_order,
            from_status=from_status.value,
            to_status=to_status.value,
            created_at=created_at,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def list_by_document(self, document_id: UUID) -> List[ApprovalHistory]:
        """Entries for a document in the order the decisions were made."""
        return self.db.query(ApprovalHistory).filter(
            ApprovalHistory.document_id == document_id
        ).order_by(ApprovalHistory.created_at.asc()).all()
