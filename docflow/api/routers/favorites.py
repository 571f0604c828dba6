"""Favorite template API endpoints."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from docflow.api.deps import get_current_party, get_db, get_favorite_service
from docflow.api.schemas.documents import FavoriteToggleResponse, TemplateResponse
from docflow.core.errors import WorkflowError
from docflow.core.favorites import FavoriteService
from docflow.db.models import Party

router = APIRouter(prefix="/favorites", tags=["favorites"])


@router.get("", response_model=List[TemplateResponse])
async def list_favorites(
    current_party: Party = Depends(get_current_party),
    favorites: FavoriteService = Depends(get_favorite_service),
):
    items = []
    for template in favorites.list_favorites(current_party.id):
        item = TemplateResponse.model_validate(template)
        item.is_favorite = True
        items.append(item)
    return items


@router.post("/{template_id}/toggle", response_model=FavoriteToggleResponse)
async def toggle_favorite(
    template_id: UUID,
    db: Session = Depends(get_db),
    current_party: Party = Depends(get_current_party),
    favorites: FavoriteService = Depends(get_favorite_service),
):
    """Mark or unmark a template as a favorite."""
    try:
        is_favorite = favorites.toggle_favorite(current_party.id, template_id)
        db.commit()
    except WorkflowError:
        db.rollback()
        raise

    return FavoriteToggleResponse(template_id=template_id, is_favorite=is_favorite)
