from functools import lru_cache
from typing import Generator, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from docflow.common.config import WorkflowConfig, load_workflow_config
from docflow.core.approval import DocumentService
from docflow.core.config import get_settings
from docflow.core.favorites import FavoriteService
from docflow.core.rbac import PermissionGate
from docflow.core.routing import ApproverResolver
from docflow.core.security import decode_token
from docflow.core.templates import TemplateStore
from docflow.db.models import Party
from docflow.db.session import SessionLocal
from docflow.services.directory import SqlPartyDirectory

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator:
    """Database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@lru_cache
def get_workflow_config() -> WorkflowConfig:
    """Workflow policy, loaded once per process."""
    return load_workflow_config(get_settings().workflow_config_path)


def get_current_party(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Party:
    """The authenticated party; the bearer token is the only identity source."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    party_id = decode_token(credentials.credentials)
    if party_id is None:
        raise credentials_exception

    party = db.get(Party, party_id)
    if party is None or not party.is_active:
        raise credentials_exception

    return party


def get_template_store(
    db: Session = Depends(get_db),
    config: WorkflowConfig = Depends(get_workflow_config),
) -> TemplateStore:
    return TemplateStore(db, config.unit_filters)


def get_document_service(
    db: Session = Depends(get_db),
    config: WorkflowConfig = Depends(get_workflow_config),
) -> DocumentService:
    directory = SqlPartyDirectory(db)
    resolver = ApproverResolver(
        directory,
        config.routing_table,
        default_party_name=config.default_party_name,
        default_party_unit=config.default_party_unit,
    )
    return DocumentService(
        db,
        directory=directory,
        resolver=resolver,
        gate=PermissionGate(config.authorities),
        templates=TemplateStore(db, config.unit_filters),
    )


def get_favorite_service(
    db: Session = Depends(get_db),
    templates: TemplateStore = Depends(get_template_store),
) -> FavoriteService:
    return FavoriteService(db, templates)
