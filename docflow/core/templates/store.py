"""Template lookup.

Read-only access to form templates for the engine and the API. Templates
are created and edited by administrative tooling, never here.
"""

from typing import List, Mapping, Optional
from uuid import UUID

from sqlalchemy import and_
from sqlalchemy.orm import Session

from docflow.core.errors import NotFoundError
from docflow.db.models import FormTemplate
from .filters import DEFAULT_UNIT_FILTERS, UnitFilterRule, filter_templates_by_unit


class TemplateStore:
    """Lists and fetches form templates, applying unit visibility rules."""

    def __init__(self, db: Session, unit_filters: Optional[Mapping[str, UnitFilterRule]] = None):
        self.db = db
        self.unit_filters = dict(DEFAULT_UNIT_FILTERS if unit_filters is None else unit_filters)

    def list_templates(
        self,
        unit: Optional[str] = None,
        *,
        category: Optional[str] = None,
    ) -> List[FormTemplate]:
        """Active templates in display order, narrowed to what ``unit`` is shown."""
        query = self.db.query(FormTemplate).filter(FormTemplate.is_active.is_(True))

        if category:
            query = query.filter(FormTemplate.category == category)

        query = query.order_by(FormTemplate.sort_order.asc(), FormTemplate.name.asc())

        return list(filter_templates_by_unit(query.all(), unit, self.unit_filters))

    def get_template(self, template_id: UUID, *, include_inactive: bool = False) -> FormTemplate:
        """
        Fetch a template by id.

        Raises:
            NotFoundError: If the template does not exist (or is inactive and
                ``include_inactive`` is False)
        """
        conditions = [FormTemplate.id == template_id]
        if not include_inactive:
            conditions.append(FormTemplate.is_active.is_(True))

        template = self.db.query(FormTemplate).filter(and_(*conditions)).first()
        if template is None:
            raise NotFoundError("Template", template_id)
        return template
