"""Document service for the approval workflow.

Provides the high-level API the presentation layer calls: creating,
editing, submitting, cancelling and deciding documents, plus the queries
that list them. Every guard runs before anything is written, and every
status change is a conditional update on the status that was read, so two
racing decisions can never both succeed.
"""

import copy
import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional
from uuid import UUID
import uuid

from sqlalchemy import and_, or_, update
from sqlalchemy.orm import Session

from docflow.core.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from docflow.core.routing import ApproverResolver, OrgContext, PartyDirectory, first_step
from docflow.core.templates import TemplateStore, validate_form_data
from docflow.db.base import as_naive_utc, utcnow
from docflow.db.models import ApprovalDocument, FormTemplate, Party
from .history import HistoryLedger
from .machine import DocumentStateMachine
from .states import (
    DocumentAction,
    DocumentStatus,
    Priority,
    AWAITING_DECISION_STATES,
    DECISION_ACTIONS,
)

if TYPE_CHECKING:
    from docflow.core.rbac import PermissionGate

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 255


def _parse_priority(value: Any) -> Priority:
    try:
        return Priority(value)
    except ValueError:
        allowed = ", ".join(p.value for p in Priority)
        raise ValidationError(
            f"Invalid priority {value!r}",
            errors={"priority": f"Must be one of: {allowed}"},
        )


def _clean_title(title: Any) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Title is required", errors={"title": "Title is required"})
    title = title.strip()
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(
            "Title is too long",
            errors={"title": f"Must be at most {MAX_TITLE_LENGTH} characters"},
        )
    return title


def _step_order(approval_flow: Optional[Dict[str, Any]]) -> int:
    step = first_step(approval_flow)
    if step is None:
        return 1
    return int(step.get("order", 1))


class DocumentService:
    """
    High-level service for approval documents.

    Handles:
    - Creating drafts and resolving their decision owner
    - Editing, submitting and cancelling on behalf of the submitter
    - Decisions with race-free status updates and history
    - Listing and statistics

    The service flushes but never commits; the caller owns the transaction.
    """

    def __init__(
        self,
        db: Session,
        *,
        directory: PartyDirectory,
        resolver: ApproverResolver,
        gate: "PermissionGate",
        templates: TemplateStore,
    ):
        """
        Initialize the document service.

        Args:
            db: Database session
            directory: Organizational directory used for submitter context
            resolver: Approver resolver bound to the routing table
            gate: Permission gate
            templates: Template store
        """
        self.db = db
        self.directory = directory
        self.resolver = resolver
        self.gate = gate
        self.templates = templates
        self.ledger = HistoryLedger(db)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_document(
        self,
        party,
        template_id: UUID,
        title: str,
        form_data: Dict[str, Any],
        priority: str = Priority.NORMAL.value,
        content: Optional[str] = None,
    ) -> ApprovalDocument:
        """
        Create a draft document from a template.

        The template's approval flow is copied onto the document and the
        first step is resolved to the decision owner.

        Raises:
            NotFoundError: If the template does not exist
            PermissionDeniedError: If the party may not use the template
            ValidationError: If the title, priority or form data is malformed
            RoutingError: If no decision owner can be resolved
        """
        template = self.templates.get_template(template_id)

        if not self.gate.can_submit(party, template):
            raise PermissionDeniedError(f"Party may not submit template {template.name!r}")

        title = _clean_title(title)
        priority = _parse_priority(priority)
        form_data = form_data or {}
        validate_form_data(template.fields, form_data)

        approval_flow = copy.deepcopy(template.approval_flow or {})
        _, resolution = self.resolver.resolve_first_step(
            approval_flow, self._submitter_context(party)
        )

        now = utcnow()
        document = ApprovalDocument(
            id=uuid.uuid4(),
            template_id=template.id,
            title=title,
            content=content,
            form_data=dict(form_data),
            submitter_id=party.id,
            current_decision_owner_id=resolution.party_id,
            status=DocumentStatus.DRAFT.value,
            priority=priority.value,
            approval_flow=approval_flow,
            created_at=now,
            updated_at=now,
        )
        self.db.add(document)
        self.db.flush()

        logger.info(
            f"Document {document.id} created from template {template.id} by {party.id}; "
            f"decision owner {resolution.party_id} ({resolution.role.value}, {resolution.match.value})"
        )
        return document

    def edit_draft(
        self,
        party,
        document_id: UUID,
        form_data: Dict[str, Any],
        title: Optional[str] = None,
    ) -> ApprovalDocument:
        """
        Replace a draft's field values (and optionally its title).

        The decision owner is left as it is.

        Raises:
            NotFoundError, PermissionDeniedError, TransitionError, ValidationError
        """
        document = self._load(document_id)
        self._machine(party, document).check(DocumentAction.EDIT)

        values: Dict[str, Any] = {}
        if title is not None:
            values["title"] = _clean_title(title)

        form_data = form_data or {}
        validate_form_data(self._template_fields(document), form_data)
        values["form_data"] = dict(form_data)

        self._compare_and_set(document, DocumentStatus.DRAFT, DocumentStatus.DRAFT, **values)

        logger.info(f"Document {document.id} edited by {party.id}")
        return document

    def submit(self, party, document_id: UUID) -> ApprovalDocument:
        """
        Submit a draft for decision.

        Required fields must be filled in. The decision owner is resolved
        again from the snapshot's first step using the submitter's current
        organizational context.

        Raises:
            NotFoundError, PermissionDeniedError, TransitionError,
            ValidationError, RoutingError, ConflictError
        """
        document = self._load(document_id)
        machine = self._machine(party, document)
        rule = machine.check(DocumentAction.SUBMIT)

        validate_form_data(
            self._template_fields(document),
            document.form_data or {},
            require_complete=True,
        )

        _, resolution = self.resolver.resolve_first_step(
            document.approval_flow, self._submitter_context(party)
        )

        self._compare_and_set(
            document,
            rule.from_state,
            rule.to_state,
            current_decision_owner_id=resolution.party_id,
            submitted_at=utcnow(),
        )

        logger.info(
            f"Document {document.id} submitted by {party.id}; "
            f"decision owner {resolution.party_id}"
        )
        self._warn_if_undecidable(document, resolution.party_id)
        return document

    def cancel(self, party, document_id: UUID) -> ApprovalDocument:
        """
        Withdraw a draft or submitted document.

        Raises:
            NotFoundError, PermissionDeniedError, TransitionError, ConflictError
        """
        document = self._load(document_id)
        rule = self._machine(party, document).check(DocumentAction.CANCEL)

        self._compare_and_set(document, rule.from_state, rule.to_state)

        logger.info(f"Document {document.id} cancelled by {party.id}")
        return document

    def decide(
        self,
        party,
        document_id: UUID,
        action: DocumentAction,
        comment: Optional[str] = None,
    ) -> ApprovalDocument:
        """
        Approve, reject or return a document awaiting decision.

        Exactly one history entry is appended, and only after the status
        update has won.

        Raises:
            NotFoundError: If the document does not exist
            ValidationError: If ``action`` is not a decision
            TransitionError: If the document is not awaiting a decision
            PermissionDeniedError: If the party is not the decision owner or
                lacks decision authority
            ConflictError: If another decision landed first
        """
        action = self._parse_decision(action)
        document = self._load(document_id)
        rule = self._machine(party, document).check(action)

        if not self.gate.can_decide(party, document):
            raise PermissionDeniedError("Party does not hold decision authority")

        values: Dict[str, Any] = {}
        if rule.to_state == DocumentStatus.DRAFT:
            # Returned documents must be submitted again
            values["submitted_at"] = None
        else:
            values["decided_at"] = utcnow()

        self._compare_and_set(document, rule.from_state, rule.to_state, **values)

        self.ledger.append(
            document.id,
            party.id,
            action,
            step_order=_step_order(document.approval_flow),
            from_status=rule.from_state,
            to_status=rule.to_state,
            comment=comment,
        )

        logger.info(
            f"Document {document.id} {action.value} by {party.id}: "
            f"{rule.from_state.value} -> {rule.to_state.value}"
        )
        return document

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_document(self, document_id: UUID, party) -> ApprovalDocument:
        """Fetch a document the party submitted."""
        document = self._load(document_id)
        if not self.gate.can_view(party, document):
            raise PermissionDeniedError("Only the submitter may view this document")
        return document

    def get_document_for_review(self, document_id: UUID, party) -> ApprovalDocument:
        """Fetch a document for the party deciding on it."""
        document = self._load(document_id)
        if not self.gate.can_review(party, document):
            raise PermissionDeniedError("Party may not review this document")
        return document

    def get_history(self, document_id: UUID, party=None) -> list:
        """
        Decision history in the order decisions were made.

        When ``party`` is given it must be allowed to view or review the
        document.
        """
        document = self._load(document_id)
        if party is not None and not (
            self.gate.can_view(party, document) or self.gate.can_review(party, document)
        ):
            raise PermissionDeniedError("Party may not see this document's history")
        return self.ledger.list_by_document(document.id)

    def list_mine(
        self,
        party,
        *,
        statuses: Optional[Iterable[str]] = None,
        priorities: Optional[Iterable[str]] = None,
        search: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> List[ApprovalDocument]:
        """Documents the party submitted, newest first."""
        query = self.db.query(ApprovalDocument).filter(
            ApprovalDocument.submitter_id == party.id
        )

        if statuses:
            statuses = [self._parse_status(s).value for s in statuses]
            query = query.filter(ApprovalDocument.status.in_(statuses))

        if priorities:
            priorities = [_parse_priority(p).value for p in priorities]
            query = query.filter(ApprovalDocument.priority.in_(priorities))

        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    ApprovalDocument.title.ilike(pattern),
                    ApprovalDocument.content.ilike(pattern),
                )
            )

        if date_from:
            query = query.filter(ApprovalDocument.created_at >= as_naive_utc(date_from))
        if date_to:
            query = query.filter(ApprovalDocument.created_at <= as_naive_utc(date_to))

        return query.order_by(
            ApprovalDocument.created_at.desc(), ApprovalDocument.id.desc()
        ).all()

    def list_pending_for_me(self, party) -> List[ApprovalDocument]:
        """Documents awaiting the party's decision, oldest submission first."""
        return self.db.query(ApprovalDocument).filter(
            and_(
                ApprovalDocument.current_decision_owner_id == party.id,
                ApprovalDocument.status.in_([s.value for s in AWAITING_DECISION_STATES]),
            )
        ).order_by(
            ApprovalDocument.submitted_at.asc(), ApprovalDocument.created_at.asc()
        ).all()

    def get_stats(self, party, *, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Dashboard counts for a party.

        Returns:
            total: documents the party submitted
            draft: of those, still in draft
            pending_for_me: documents awaiting the party's decision
            approved_this_month / rejected_this_month: of the party's
                documents, decided since the first of the month
            avg_decision_hours: mean submission-to-decision time of the
                party's decided documents, or None
        """
        now = now or utcnow()
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

        mine = self.db.query(ApprovalDocument).filter(ApprovalDocument.submitter_id == party.id)

        def count_decided(status: DocumentStatus) -> int:
            return mine.filter(
                and_(
                    ApprovalDocument.status == status.value,
                    ApprovalDocument.decided_at >= month_start,
                )
            ).count()

        decided = mine.filter(
            and_(
                ApprovalDocument.decided_at.isnot(None),
                ApprovalDocument.submitted_at.isnot(None),
            )
        ).with_entities(ApprovalDocument.submitted_at, ApprovalDocument.decided_at).all()

        avg_hours = None
        if decided:
            total = sum(
                ((decided_at - submitted_at) for submitted_at, decided_at in decided),
                timedelta(),
            )
            avg_hours = round(total.total_seconds() / 3600 / len(decided), 1)

        return {
            "total": mine.count(),
            "draft": mine.filter(ApprovalDocument.status == DocumentStatus.DRAFT.value).count(),
            "pending_for_me": len(self.list_pending_for_me(party)),
            "approved_this_month": count_decided(DocumentStatus.APPROVED),
            "rejected_this_month": count_decided(DocumentStatus.REJECTED),
            "avg_decision_hours": avg_hours,
        }

    def available_actions(self, party, document) -> List[DocumentAction]:
        """Actions the party could take on the document right now."""
        actions = self._machine(party, document).get_available_actions()
        if any(a in DECISION_ACTIONS for a in actions) and not self.gate.can_decide(party, document):
            actions = [a for a in actions if a not in DECISION_ACTIONS]
        return actions

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _load(self, document_id: UUID) -> ApprovalDocument:
        document = self.db.get(ApprovalDocument, document_id)
        if document is None:
            raise NotFoundError("Document", document_id)
        return document

    def _machine(self, party, document: ApprovalDocument) -> DocumentStateMachine:
        return DocumentStateMachine(
            document.id,
            self._parse_status(document.status),
            actor_roles=self.gate.actor_roles(party, document),
        )

    def _warn_if_undecidable(self, document: ApprovalDocument, owner_id: UUID) -> None:
        owner = self.db.get(Party, owner_id)
        if not self.gate.has_decision_authority(owner):
            logger.warning(
                f"Document {document.id} is awaiting decision owner {owner_id}, "
                f"who holds no decision authority; nobody can decide it"
            )

    def _submitter_context(self, party) -> OrgContext:
        context = self.directory.get_party_context(party.id)
        if context is None:
            return OrgContext(unit=party.unit, team=party.team)
        return context

    def _template_fields(self, document: ApprovalDocument) -> list:
        template = self.db.get(FormTemplate, document.template_id)
        if template is None:
            raise NotFoundError("Template", document.template_id)
        return template.fields or []

    @staticmethod
    def _parse_status(value: str) -> DocumentStatus:
        try:
            return DocumentStatus(value)
        except ValueError:
            raise ValidationError(f"Unknown status {value!r}", errors={"status": str(value)})

    @staticmethod
    def _parse_decision(action: Any) -> DocumentAction:
        try:
            action = DocumentAction(action)
        except ValueError:
            action = None
        if action not in DECISION_ACTIONS:
            allowed = ", ".join(sorted(a.value for a in DECISION_ACTIONS))
            raise ValidationError(
                "Invalid decision",
                errors={"action": f"Must be one of: {allowed}"},
            )
        return action

    def _compare_and_set(
        self,
        document: ApprovalDocument,
        expected: DocumentStatus,
        new_status: DocumentStatus,
        **values: Any,
    ) -> None:
        """
        Move ``document`` from ``expected`` to ``new_status`` in one statement.

        The UPDATE only matches while the stored status is still
        ``expected``; if another transaction got there first nothing
        matches and ConflictError is raised.
        """
        values["status"] = new_status.value
        values["updated_at"] = utcnow()

        result = self.db.execute(
            update(ApprovalDocument)
            .where(
                and_(
                    ApprovalDocument.id == document.id,
                    ApprovalDocument.status == expected.value,
                )
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount != 1:
            logger.warning(
                f"Conflict on document {document.id}: expected status {expected.value}, "
                f"wanted {new_status.value}"
            )
            raise ConflictError(
                f"Document {document.id} is no longer {expected.value}; it was changed by someone else"
            )

        self.db.refresh(document)
