"""Database models for DocFlow."""

from docflow.db.models.party import Party
from docflow.db.models.template import FormTemplate
from docflow.db.models.document import ApprovalDocument, ApprovalHistory, ImmutableRecordError
from docflow.db.models.favorite import FavoriteForm

__all__ = [
    "Party",
    "FormTemplate",
    "ApprovalDocument",
    "ApprovalHistory",
    "ImmutableRecordError",
    "FavoriteForm",
]
