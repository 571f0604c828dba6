"""Favorite templates.

Per-party bookmarks on templates. They have no effect on routing or the
document lifecycle; the template list UI uses them for ordering.
"""

import logging
from typing import List
from uuid import UUID
import uuid

from sqlalchemy import and_
from sqlalchemy.orm import Session

from docflow.core.templates import TemplateStore
from docflow.db.base import utcnow
from docflow.db.models import FavoriteForm, FormTemplate

logger = logging.getLogger(__name__)


class FavoriteService:
    """Toggles and lists a party's favorite templates."""

    def __init__(self, db: Session, templates: TemplateStore):
        self.db = db
        self.templates = templates

    def toggle_favorite(self, party_id: UUID, template_id: UUID) -> bool:
        """
        Add the mark if absent, remove it if present.

        Returns:
            True when the template is now a favorite

        Raises:
            NotFoundError: If the template does not exist
        """
        self.templates.get_template(template_id, include_inactive=True)

        existing = self.db.query(FavoriteForm).filter(
            and_(
                FavoriteForm.party_id == party_id,
                FavoriteForm.template_id == template_id,
            )
        ).first()

        if existing:
            self.db.delete(existing)
            self.db.flush()
            logger.debug(f"Party {party_id} unmarked template {template_id}")
            return False

        self.db.add(FavoriteForm(
            id=uuid.uuid4(),
            party_id=party_id,
            template_id=template_id,
            created_at=utcnow(),
        ))
        self.db.flush()
        logger.debug(f"Party {party_id} marked template {template_id}")
        return True

    def list_favorites(self, party_id: UUID) -> List[FormTemplate]:
        """Active favorite templates, most recently marked first."""
        return self.db.query(FormTemplate).join(
            FavoriteForm, FavoriteForm.template_id == FormTemplate.id
        ).filter(
            and_(
                FavoriteForm.party_id == party_id,
                FormTemplate.is_active.is_(True),
            )
        ).order_by(FavoriteForm.created_at.desc()).all()

    def favorite_ids(self, party_id: UUID) -> set:
        rows = self.db.query(FavoriteForm.template_id).filter(
            FavoriteForm.party_id == party_id
        ).all()
        return {row[0] for row in rows}
