"""Tests for the append-only decision history."""

import pytest

from docflow.core.approval import DocumentAction, DocumentStatus, HistoryLedger
from docflow.db.models import ApprovalHistory, ImmutableRecordError
from tests.factories import create_document


pytestmark = pytest.mark.integration


@pytest.fixture
def document(db_session, template, submitter, admin):
    return create_document(db_session, template=template, submitter=submitter, owner=admin, status="submitted")


def append(ledger, document, actor, action=DocumentAction.RETURN, **kwargs):
    return ledger.append(
        document.id,
        actor.id,
        action,
        step_order=kwargs.pop("step_order", 1),
        from_status=kwargs.pop("from_status", DocumentStatus.SUBMITTED),
        to_status=kwargs.pop("to_status", DocumentStatus.DRAFT),
        **kwargs,
    )


def test_append_and_list_in_order(db_session, document, admin):
    ledger = HistoryLedger(db_session)
    first = append(ledger, document, admin, comment="Needs a receipt")
    second = append(
        ledger, document, admin, DocumentAction.APPROVE,
        to_status=DocumentStatus.APPROVED,
    )

    entries = ledger.list_by_document(document.id)
    assert [e.id for e in entries] == [first.id, second.id]
    assert entries[0].comment == "Needs a receipt"
    assert entries[1].action == "approve"


def test_entries_scoped_to_document(db_session, document, template, submitter, admin):
    other = create_document(db_session, template=template, submitter=submitter, owner=admin, status="submitted")
    ledger = HistoryLedger(db_session)
    append(ledger, document, admin)

    assert ledger.list_by_document(other.id) == []


def test_update_is_refused(db_session, document, admin):
    entry = append(HistoryLedger(db_session), document, admin)

    entry.comment = "rewritten"
    with pytest.raises(ImmutableRecordError):
        db_session.flush()


def test_delete_is_refused(db_session, document, admin):
    entry = append(HistoryLedger(db_session), document, admin)

    db_session.delete(entry)
    with pytest.raises(ImmutableRecordError):
        db_session.flush()


def test_ledger_has_no_mutators():
    assert not hasattr(HistoryLedger, "update")
    assert not hasattr(HistoryLedger, "delete")
    assert ApprovalHistory.__tablename__ == "approval_history"
