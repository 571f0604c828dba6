"""End-to-end tests of the document lifecycle through DocumentService."""

import pytest

from docflow.core.approval import DocumentAction, DocumentService, DocumentStatus
from docflow.core.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    RoutingError,
    TransitionError,
    ValidationError,
)
from docflow.core.rbac import PermissionGate
from docflow.core.routing import ApproverResolver, OrgContext
from docflow.core.templates import TemplateStore
from docflow.db.models import ApprovalDocument, ApprovalHistory
from docflow.services.directory import SqlPartyDirectory
from tests.factories import create_document, create_party, create_template


pytestmark = pytest.mark.integration


def history_actions(service, document):
    return [entry.action for entry in service.get_history(document.id)]


@pytest.fixture
def draft(service, submitter, admin, template, trip_data):
    return service.create_document(submitter, template.id, "Busan trip", trip_data)


@pytest.fixture
def submitted(service, submitter, draft):
    return service.submit(submitter, draft.id)


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


class TestCreate:

    def test_creates_draft_owned_by_resolved_party(self, draft, submitter, admin, template):
        assert draft.status == DocumentStatus.DRAFT.value
        assert draft.submitter_id == submitter.id
        assert draft.current_decision_owner_id == admin.id
        assert draft.priority == "normal"
        assert draft.approval_flow == template.approval_flow
        assert draft.submitted_at is None

    def test_flow_is_a_snapshot(self, db_session, draft, template):
        template.approval_flow = {"steps": [{"order": 1, "approver_role": "director"}]}
        db_session.flush()
        db_session.refresh(draft)
        assert draft.approval_flow["steps"][0]["approver_role"] == "general_manager"

    def test_unknown_template(self, service, submitter, admin):
        import uuid
        with pytest.raises(NotFoundError):
            service.create_document(submitter, uuid.uuid4(), "Trip", {})

    def test_inactive_template_is_not_found(self, service, submitter, admin, template_factory):
        retired = template_factory(is_active=False)
        with pytest.raises(NotFoundError):
            service.create_document(submitter, retired.id, "Trip", {})

    def test_template_restricted_to_other_unit(self, service, submitter, admin, template_factory):
        restricted = template_factory(allowed_units=["brand-marketing"])
        with pytest.raises(PermissionDeniedError):
            service.create_document(submitter, restricted.id, "Trip", {})

    @pytest.mark.parametrize("title", ["", "   ", None])
    def test_title_required(self, service, submitter, admin, template, title):
        with pytest.raises(ValidationError) as exc_info:
            service.create_document(submitter, template.id, title, {})
        assert "title" in exc_info.value.errors

    def test_bad_priority(self, service, submitter, admin, template):
        with pytest.raises(ValidationError) as exc_info:
            service.create_document(submitter, template.id, "Trip", {}, priority="asap")
        assert "priority" in exc_info.value.errors

    def test_draft_may_be_incomplete_but_not_malformed(self, service, submitter, admin, template):
        document = service.create_document(submitter, template.id, "Trip", {"destination": "Jeju"})
        assert document.form_data == {"destination": "Jeju"}

        with pytest.raises(ValidationError):
            service.create_document(submitter, template.id, "Trip", {"budget": -1})

    def test_no_default_party_means_no_document(self, db_session, service, submitter):
        template = create_template(
            db_session,
            approval_flow={"steps": [{"order": 1, "approver_role": "director"}]},
        )
        with pytest.raises(RoutingError):
            service.create_document(submitter, template.id, "Trip", {})
        assert db_session.query(ApprovalDocument).count() == 0


# ---------------------------------------------------------------------------
# Editing
# ---------------------------------------------------------------------------


class TestEditDraft:

    def test_submitter_replaces_values(self, service, submitter, draft):
        edited = service.edit_draft(submitter, draft.id, {"destination": "Daegu"}, title="Daegu trip")
        assert edited.form_data == {"destination": "Daegu"}
        assert edited.title == "Daegu trip"
        assert edited.status == DocumentStatus.DRAFT.value

    def test_non_submitter_cannot_edit(self, service, outsider, draft, trip_data):
        with pytest.raises(PermissionDeniedError):
            service.edit_draft(outsider, draft.id, {"destination": "Nowhere"})
        assert draft.form_data == trip_data

    def test_values_frozen_after_submit(self, service, submitter, submitted, trip_data):
        with pytest.raises(TransitionError):
            service.edit_draft(submitter, submitted.id, {"destination": "Daegu"})
        assert submitted.form_data == trip_data

    def test_edit_validates_shape(self, service, submitter, draft):
        with pytest.raises(ValidationError):
            service.edit_draft(submitter, draft.id, {"start_date": "tomorrow"})

    def test_edit_keeps_decision_owner(self, db_session, service, submitter, admin, template_factory):
        template = template_factory(
            approval_flow={"steps": [{"order": 1, "approver_role": "department_head"}]},
        )
        document = service.create_document(submitter, template.id, "Trip", {})
        assert document.current_decision_owner_id == admin.id

        # The proper holder joins the directory after creation
        create_party(db_session, name="head", unit="hr")
        service.edit_draft(submitter, document.id, {"destination": "Ulsan"})
        assert document.current_decision_owner_id == admin.id


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


class TestSubmit:

    def test_submit(self, submitted, admin):
        assert submitted.status == DocumentStatus.SUBMITTED.value
        assert submitted.submitted_at is not None
        assert submitted.current_decision_owner_id == admin.id

    def test_missing_required_field(self, db_session, service, submitter, admin, template):
        document = service.create_document(submitter, template.id, "Trip", {"destination": "Jeju"})
        with pytest.raises(ValidationError) as exc_info:
            service.submit(submitter, document.id)

        assert "start_date" in exc_info.value.errors
        db_session.refresh(document)
        assert document.status == DocumentStatus.DRAFT.value
        assert db_session.query(ApprovalHistory).count() == 0

    def test_only_submitter_submits(self, service, outsider, draft):
        with pytest.raises(PermissionDeniedError):
            service.submit(outsider, draft.id)

    def test_submit_resolves_owner_again(self, db_session, service, submitter, admin, template_factory):
        template = template_factory(
            approval_flow={"steps": [{"order": 1, "approver_role": "department_head"}]},
        )
        document = service.create_document(
            submitter, template.id, "Trip", {"destination": "Jeju", "start_date": "2026-11-02"}
        )
        head = create_party(db_session, name="head", unit="hr")

        service.submit(submitter, document.id)
        assert document.current_decision_owner_id == head.id

    def test_routing_failure_aborts_submit(self, db_session, service, submitter, admin, template_factory):
        template = template_factory(
            approval_flow={"steps": [{"order": 1, "approver_role": "director"}]},
        )
        document = service.create_document(
            submitter, template.id, "Trip", {"destination": "Jeju", "start_date": "2026-11-02"}
        )
        admin.is_active = False
        db_session.flush()

        with pytest.raises(RoutingError):
            service.submit(submitter, document.id)
        db_session.refresh(document)
        assert document.status == DocumentStatus.DRAFT.value
        assert document.submitted_at is None


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------


class TestCancel:

    def test_cancel_draft(self, service, submitter, draft):
        assert service.cancel(submitter, draft.id).status == DocumentStatus.CANCELLED.value

    def test_cancel_submitted(self, service, submitter, submitted):
        assert service.cancel(submitter, submitted.id).status == DocumentStatus.CANCELLED.value

    def test_cancel_by_other_party(self, service, admin, submitted):
        with pytest.raises(PermissionDeniedError):
            service.cancel(admin, submitted.id)

    def test_cannot_cancel_decided(self, service, submitter, admin, submitted):
        service.decide(admin, submitted.id, DocumentAction.APPROVE)
        with pytest.raises(TransitionError):
            service.cancel(submitter, submitted.id)

    def test_cancelled_is_terminal(self, service, submitter, draft):
        service.cancel(submitter, draft.id)
        with pytest.raises(TransitionError):
            service.submit(submitter, draft.id)


# ---------------------------------------------------------------------------
# Decisions
# ---------------------------------------------------------------------------


class TestDecide:

    def test_approve_round_trip(self, service, admin, submitted):
        document = service.decide(admin, submitted.id, DocumentAction.APPROVE, comment="Have a good trip")

        assert document.status == DocumentStatus.APPROVED.value
        assert document.decided_at is not None

        history = service.get_history(document.id)
        assert len(history) == 1
        entry = history[0]
        assert entry.action == "approve"
        assert entry.actor_id == admin.id
        assert entry.comment == "Have a good trip"
        assert entry.step_order == 1
        assert (entry.from_status, entry.to_status) == ("submitted", "approved")

    def test_reject(self, service, admin, submitted):
        document = service.decide(admin, submitted.id, "reject", comment="Over budget")
        assert document.status == DocumentStatus.REJECTED.value
        assert history_actions(service, document) == ["reject"]

    def test_return_then_approve(self, service, submitter, admin, submitted):
        returned = service.decide(admin, submitted.id, DocumentAction.RETURN, comment="Add the budget")
        assert returned.status == DocumentStatus.DRAFT.value
        assert returned.submitted_at is None
        assert returned.current_decision_owner_id == admin.id

        service.edit_draft(
            submitter,
            returned.id,
            {"destination": "Busan", "start_date": "2026-11-02", "budget": 900},
        )
        service.submit(submitter, returned.id)
        approved = service.decide(admin, returned.id, DocumentAction.APPROVE)

        assert approved.status == DocumentStatus.APPROVED.value
        history = service.get_history(approved.id)
        assert [e.action for e in history] == ["return", "approve"]
        assert history[0].created_at <= history[1].created_at

    def test_non_owner_cannot_decide(self, db_session, service, outsider, submitted):
        with pytest.raises(PermissionDeniedError):
            service.decide(outsider, submitted.id, DocumentAction.APPROVE)

        db_session.refresh(submitted)
        assert submitted.status == DocumentStatus.SUBMITTED.value
        assert service.get_history(submitted.id) == []

    def test_non_owner_denied_on_draft(self, service, outsider, draft):
        with pytest.raises(PermissionDeniedError):
            service.decide(outsider, draft.id, DocumentAction.APPROVE)

    def test_non_owner_denied_on_decided_document(self, service, admin, outsider, submitted):
        service.decide(admin, submitted.id, DocumentAction.APPROVE)
        with pytest.raises(PermissionDeniedError):
            service.decide(outsider, submitted.id, DocumentAction.REJECT)
        assert history_actions(service, submitted) == ["approve"]

    def test_submitter_cannot_decide_own_document(self, service, submitter, submitted):
        with pytest.raises(PermissionDeniedError):
            service.decide(submitter, submitted.id, DocumentAction.APPROVE)

    def test_owner_without_decision_authority(self, db_session, service, submitter, admin, template_factory):
        hr_manager = create_party(db_session, name="hr-manager", unit="hr")
        template = template_factory(
            approval_flow={"steps": [{"order": 1, "approver_role": "hr_manager"}]},
        )
        document = service.create_document(
            submitter, template.id, "Trip", {"destination": "Jeju", "start_date": "2026-11-02"}
        )
        service.submit(submitter, document.id)
        assert document.current_decision_owner_id == hr_manager.id

        assert service.available_actions(hr_manager, document) == []
        with pytest.raises(PermissionDeniedError):
            service.decide(hr_manager, document.id, DocumentAction.APPROVE)
        assert document.status == DocumentStatus.SUBMITTED.value

    def test_submit_to_owner_without_authority_is_logged(
        self, db_session, service, submitter, admin, template_factory, caplog
    ):
        manager = create_party(db_session, name="manager", unit="hr")
        template = template_factory(
            approval_flow={"steps": [{"order": 1, "approver_role": "direct_manager"}]},
        )
        document = service.create_document(
            submitter, template.id, "Trip", {"destination": "Jeju", "start_date": "2026-11-02"}
        )

        with caplog.at_level("WARNING", logger="docflow.core.approval.service"):
            service.submit(submitter, document.id)

        assert document.current_decision_owner_id == manager.id
        assert f"decision owner {manager.id}, who holds no decision authority" in caplog.text

    def test_submit_to_authorized_owner_is_not_flagged(self, service, submitter, draft, caplog):
        with caplog.at_level("WARNING", logger="docflow.core.approval.service"):
            service.submit(submitter, draft.id)
        assert "no decision authority" not in caplog.text

    def test_draft_cannot_be_decided(self, service, admin, draft):
        with pytest.raises(TransitionError):
            service.decide(admin, draft.id, DocumentAction.APPROVE)

    def test_second_decision_is_a_conflict(self, service, admin, submitted):
        service.decide(admin, submitted.id, DocumentAction.APPROVE)
        with pytest.raises(ConflictError):
            service.decide(admin, submitted.id, DocumentAction.REJECT)
        assert history_actions(service, submitted) == ["approve"]

    @pytest.mark.parametrize("action", ["submit", "edit", "cancel", "escalate"])
    def test_only_decision_actions(self, service, admin, submitted, action):
        with pytest.raises(ValidationError):
            service.decide(admin, submitted.id, action)

    def test_pending_is_decidable(self, db_session, service, submitter, admin, template):
        document = create_document(
            db_session, template=template, submitter=submitter, owner=admin, status="pending"
        )
        decided = service.decide(admin, document.id, DocumentAction.APPROVE)
        assert decided.status == DocumentStatus.APPROVED.value
        assert service.get_history(document.id)[0].from_status == "pending"

    def test_unknown_document(self, service, admin):
        import uuid
        with pytest.raises(NotFoundError):
            service.decide(admin, uuid.uuid4(), DocumentAction.APPROVE)


class TestSingleDecisionOwner:
    """
    Templates may declare several flow steps, but only the first step is
    ever bound to a decision owner. One decision finishes the document;
    later steps are descriptive. These tests pin that behavior down.
    """

    @pytest.fixture
    def two_step_template(self, db_session):
        create_party(db_session, name="director", unit="executive")
        return create_template(
            db_session,
            approval_flow={"steps": [
                {"order": 1, "approver_role": "general_manager", "required": True},
                {"order": 2, "approver_role": "director", "required": True},
            ]},
        )

    def test_first_step_decides_alone(self, service, submitter, admin, two_step_template, trip_data):
        document = service.create_document(submitter, two_step_template.id, "Trip", trip_data)
        service.submit(submitter, document.id)
        assert document.current_decision_owner_id == admin.id

        approved = service.decide(admin, document.id, DocumentAction.APPROVE)

        assert approved.status == DocumentStatus.APPROVED.value
        history = service.get_history(approved.id)
        assert len(history) == 1
        assert history[0].step_order == 1
        assert len(approved.approval_flow["steps"]) == 2


class TransferredDirectory:
    """Directory that places some parties in a different unit than their row says."""

    def __init__(self, inner, transfers):
        self.inner = inner
        self.transfers = transfers

    def lookup_party(self, name, unit=None):
        return self.inner.lookup_party(name, unit)

    def get_party_context(self, party_id):
        if party_id in self.transfers:
            return OrgContext(unit=self.transfers[party_id], team=None)
        return self.inner.get_party_context(party_id)


class TestDirectoryContext:

    def test_submitter_context_comes_from_directory(self, db_session, submitter, template_factory):
        create_party(db_session, name="head", unit="hr")
        finance_head = create_party(db_session, name="head", unit="finance")
        template = template_factory(
            approval_flow={"steps": [{"order": 1, "approver_role": "department_head"}]},
        )
        directory = TransferredDirectory(SqlPartyDirectory(db_session), {submitter.id: "finance"})
        service = DocumentService(
            db_session,
            directory=directory,
            resolver=ApproverResolver(directory),
            gate=PermissionGate(),
            templates=TemplateStore(db_session),
        )

        document = service.create_document(submitter, template.id, "Trip", {})

        assert document.current_decision_owner_id == finance_head.id


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------


class TestVisibility:

    def test_only_submitter_views(self, service, submitter, admin, outsider, submitted):
        assert service.get_document(submitted.id, submitter).id == submitted.id
        with pytest.raises(PermissionDeniedError):
            service.get_document(submitted.id, outsider)
        with pytest.raises(PermissionDeniedError):
            service.get_document(submitted.id, admin)

    def test_owner_reviews(self, service, admin, outsider, submitted):
        assert service.get_document_for_review(submitted.id, admin).id == submitted.id
        with pytest.raises(PermissionDeniedError):
            service.get_document_for_review(submitted.id, outsider)

    def test_history_access(self, service, submitter, admin, outsider, submitted):
        service.decide(admin, submitted.id, DocumentAction.APPROVE)
        assert len(service.get_history(submitted.id, submitter)) == 1
        assert len(service.get_history(submitted.id, admin)) == 1
        with pytest.raises(PermissionDeniedError):
            service.get_history(submitted.id, outsider)

    def test_available_actions(self, service, submitter, admin, draft):
        assert set(service.available_actions(submitter, draft)) == {
            DocumentAction.EDIT, DocumentAction.SUBMIT, DocumentAction.CANCEL,
        }
        assert service.available_actions(admin, draft) == []

        service.submit(submitter, draft.id)
        assert service.available_actions(submitter, draft) == [DocumentAction.CANCEL]
        assert set(service.available_actions(admin, draft)) == {
            DocumentAction.APPROVE, DocumentAction.REJECT, DocumentAction.RETURN,
        }
