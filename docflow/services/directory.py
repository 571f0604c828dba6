"""Organizational directory adapter.

Implements the ``PartyDirectory`` protocol the approver resolver reads
from, backed by the ``parties`` table. Only active parties are visible.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import and_
from sqlalchemy.orm import Session

from docflow.core.routing import OrgContext
from docflow.db.models import Party


class SqlPartyDirectory:
    """Read-only party lookups over the database."""

    def __init__(self, db: Session):
        self.db = db

    def lookup_party(self, name: str, unit: Optional[str] = None) -> Optional[UUID]:
        """
        Find an active party by name, optionally restricted to a unit.

        When several parties share the name, the earliest created wins so
        repeated lookups are deterministic.
        """
        conditions = [Party.name == name, Party.is_active.is_(True)]
        if unit is not None:
            conditions.append(Party.unit == unit)

        party = self.db.query(Party).filter(and_(*conditions)).order_by(
            Party.created_at.asc(), Party.id.asc()
        ).first()

        return party.id if party else None

    def get_party_context(self, party_id: UUID) -> Optional[OrgContext]:
        party = self.db.get(Party, party_id)
        if party is None:
            return None
        return OrgContext(unit=party.unit, team=party.team)
