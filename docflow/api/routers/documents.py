"""Approval document API endpoints."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from docflow.api.deps import get_current_party, get_db, get_document_service
from docflow.api.schemas.documents import (
    DecisionRequest,
    DocumentCreate,
    DocumentResponse,
    DocumentStatsResponse,
    DocumentUpdate,
    HistoryEntryResponse,
)
from docflow.core.approval import DocumentService
from docflow.core.errors import WorkflowError
from docflow.db.models import ApprovalDocument, Party

router = APIRouter(prefix="/documents", tags=["documents"])


def _to_response(
    service: DocumentService, party: Party, document: ApprovalDocument
) -> DocumentResponse:
    response = DocumentResponse.model_validate(document)
    response.available_actions = [a.value for a in service.available_actions(party, document)]
    return response


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def create_document(
    body: DocumentCreate,
    db: Session = Depends(get_db),
    current_party: Party = Depends(get_current_party),
    service: DocumentService = Depends(get_document_service),
):
    """Create a draft from a template."""
    try:
        document = service.create_document(
            current_party,
            body.template_id,
            body.title,
            body.form_data,
            priority=body.priority.value,
            content=body.content,
        )
        db.commit()
    except WorkflowError:
        db.rollback()
        raise

    return _to_response(service, current_party, document)


@router.get("", response_model=List[DocumentResponse])
async def list_my_documents(
    current_party: Party = Depends(get_current_party),
    service: DocumentService = Depends(get_document_service),
    status_filter: Optional[List[str]] = Query(None, alias="status"),
    priority: Optional[List[str]] = Query(None),
    search: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
):
    """List documents the caller submitted, newest first."""
    documents = service.list_mine(
        current_party,
        statuses=status_filter,
        priorities=priority,
        search=search,
        date_from=date_from,
        date_to=date_to,
    )
    return [_to_response(service, current_party, d) for d in documents]


@router.get("/pending", response_model=List[DocumentResponse])
async def list_pending_for_me(
    current_party: Party = Depends(get_current_party),
    service: DocumentService = Depends(get_document_service),
):
    """List documents awaiting the caller's decision."""
    documents = service.list_pending_for_me(current_party)
    return [_to_response(service, current_party, d) for d in documents]


@router.get("/stats", response_model=DocumentStatsResponse)
async def get_stats(
    current_party: Party = Depends(get_current_party),
    service: DocumentService = Depends(get_document_service),
):
    return DocumentStatsResponse(**service.get_stats(current_party))


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: UUID,
    current_party: Party = Depends(get_current_party),
    service: DocumentService = Depends(get_document_service),
):
    """Get one of the caller's own documents."""
    document = service.get_document(document_id, current_party)
    return _to_response(service, current_party, document)


@router.get("/{document_id}/review", response_model=DocumentResponse)
async def get_document_for_review(
    document_id: UUID,
    current_party: Party = Depends(get_current_party),
    service: DocumentService = Depends(get_document_service),
):
    """Open a document to decide on it."""
    document = service.get_document_for_review(document_id, current_party)
    return _to_response(service, current_party, document)


@router.patch("/{document_id}", response_model=DocumentResponse)
async def edit_draft(
    document_id: UUID,
    body: DocumentUpdate,
    db: Session = Depends(get_db),
    current_party: Party = Depends(get_current_party),
    service: DocumentService = Depends(get_document_service),
):
    """Replace a draft's field values."""
    try:
        document = service.edit_draft(current_party, document_id, body.form_data, title=body.title)
        db.commit()
    except WorkflowError:
        db.rollback()
        raise

    return _to_response(service, current_party, document)


@router.post("/{document_id}/submit", response_model=DocumentResponse)
async def submit_document(
    document_id: UUID,
    db: Session = Depends(get_db),
    current_party: Party = Depends(get_current_party),
    service: DocumentService = Depends(get_document_service),
):
    try:
        document = service.submit(current_party, document_id)
        db.commit()
    except WorkflowError:
        db.rollback()
        raise

    return _to_response(service, current_party, document)


@router.post("/{document_id}/cancel", response_model=DocumentResponse)
async def cancel_document(
    document_id: UUID,
    db: Session = Depends(get_db),
    current_party: Party = Depends(get_current_party),
    service: DocumentService = Depends(get_document_service),
):
    try:
        document = service.cancel(current_party, document_id)
        db.commit()
    except WorkflowError:
        db.rollback()
        raise

    return _to_response(service, current_party, document)


@router.post("/{document_id}/decide", response_model=DocumentResponse)
async def decide_document(
    document_id: UUID,
    body: DecisionRequest,
    db: Session = Depends(get_db),
    current_party: Party = Depends(get_current_party),
    service: DocumentService = Depends(get_document_service),
):
    """Approve, reject or return a document awaiting the caller's decision."""
    try:
        document = service.decide(current_party, document_id, body.action, comment=body.comment)
        db.commit()
    except WorkflowError:
        db.rollback()
        raise

    return _to_response(service, current_party, document)


@router.get("/{document_id}/history", response_model=List[HistoryEntryResponse])
async def get_history(
    document_id: UUID,
    current_party: Party = Depends(get_current_party),
    service: DocumentService = Depends(get_document_service),
):
    """Decision history in the order decisions were made."""
    entries = service.get_history(document_id, current_party)
    return [HistoryEntryResponse.model_validate(e) for e in entries]
