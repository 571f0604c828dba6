"""Form template API endpoints."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends

from docflow.api.deps import get_current_party, get_favorite_service, get_template_store
from docflow.api.schemas.documents import TemplateResponse
from docflow.core.favorites import FavoriteService
from docflow.core.templates import TemplateStore
from docflow.db.models import Party

router = APIRouter(prefix="/templates", tags=["templates"])


@router.get("", response_model=List[TemplateResponse])
async def list_templates(
    category: Optional[str] = None,
    current_party: Party = Depends(get_current_party),
    store: TemplateStore = Depends(get_template_store),
    favorites: FavoriteService = Depends(get_favorite_service),
):
    """Active templates shown to the caller's unit."""
    favorite_ids = favorites.favorite_ids(current_party.id)
    items = []
    for template in store.list_templates(current_party.unit, category=category):
        item = TemplateResponse.model_validate(template)
        item.is_favorite = template.id in favorite_ids
        items.append(item)
    return items


@router.get("/{template_id}", response_model=TemplateResponse)
async def get_template(
    template_id: UUID,
    current_party: Party = Depends(get_current_party),
    store: TemplateStore = Depends(get_template_store),
    favorites: FavoriteService = Depends(get_favorite_service),
):
    template = store.get_template(template_id)
    item = TemplateResponse.model_validate(template)
    item.is_favorite = template.id in favorites.favorite_ids(current_party.id)
    return item
