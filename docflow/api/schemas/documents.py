"""Request and response schemas for templates, documents and favorites."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from docflow.core.approval.states import DocumentAction, Priority


class TemplateResponse(BaseModel):
    id: UUID
    name: str
    category: str
    description: Optional[str]
    fields: List[Dict[str, Any]]
    approval_flow: Dict[str, Any]
    required_attachments: List[str]
    allowed_units: List[str]
    sort_order: int
    is_favorite: bool = False

    class Config:
        from_attributes = True


class DocumentCreate(BaseModel):
    template_id: UUID
    title: str = Field(..., min_length=1, max_length=255)
    content: Optional[str] = None
    form_data: Dict[str, Any] = Field(default_factory=dict)
    priority: Priority = Priority.NORMAL


class DocumentUpdate(BaseModel):
    form_data: Dict[str, Any]
    title: Optional[str] = Field(None, min_length=1, max_length=255)


class DecisionRequest(BaseModel):
    action: DocumentAction
    comment: Optional[str] = Field(None, max_length=2000)


class DocumentResponse(BaseModel):
    id: UUID
    template_id: UUID
    title: str
    content: Optional[str]
    form_data: Dict[str, Any]
    submitter_id: UUID
    current_decision_owner_id: Optional[UUID]
    status: str
    priority: str
    approval_flow: Dict[str, Any]
    created_at: datetime
    updated_at: Optional[datetime]
    submitted_at: Optional[datetime]
    decided_at: Optional[datetime]
    available_actions: List[str] = []

    class Config:
        from_attributes = True


class HistoryEntryResponse(BaseModel):
    id: UUID
    document_id: UUID
    actor_id: UUID
    action: str
    comment: Optional[str]
    step_order: int
    from_status: str
    to_status: str
    created_at: datetime

    class Config:
        from_attributes = True


class DocumentStatsResponse(BaseModel):
    total: int
    draft: int
    pending_for_me: int
    approved_this_month: int
    rejected_this_month: int
    avg_decision_hours: Optional[float]


class FavoriteToggleResponse(BaseModel):
    template_id: UUID
    is_favorite: bool
