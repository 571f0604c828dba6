"""Initial schema: parties, templates, documents, history, favorites

Revision ID: 0001
Revises:
Create Date: 2026-10-19

On PostgreSQL this also installs triggers that reject UPDATE and DELETE
on approval_history.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables."""

    # Parties (read-only copy of the organizational directory)
    op.create_table(
        "parties",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True, unique=True),
        sa.Column("unit", sa.String(100), nullable=True),
        sa.Column("team", sa.String(100), nullable=True),
        sa.Column("title", sa.String(100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_parties_name", "parties", ["name"])
    op.create_index("ix_parties_unit", "parties", ["unit"])

    # Form templates
    op.create_table(
        "form_templates",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("fields", sa.JSON(), nullable=False),
        sa.Column("approval_flow", sa.JSON(), nullable=False),
        sa.Column("required_attachments", sa.JSON(), nullable=False),
        sa.Column("allowed_units", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_form_templates_category", "form_templates", ["category"])
    op.create_index("ix_form_templates_is_active", "form_templates", ["is_active"])

    # Approval documents
    op.create_table(
        "approval_documents",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("template_id", sa.Uuid(as_uuid=True), sa.ForeignKey("form_templates.id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("form_data", sa.JSON(), nullable=False),
        sa.Column("submitter_id", sa.Uuid(as_uuid=True), sa.ForeignKey("parties.id"), nullable=False),
        sa.Column("current_decision_owner_id", sa.Uuid(as_uuid=True), sa.ForeignKey("parties.id"), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("priority", sa.String(20), nullable=False, server_default="normal"),
        sa.Column("approval_flow", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("submitted_at", sa.DateTime(), nullable=True),
        sa.Column("decided_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_approval_documents_template_id", "approval_documents", ["template_id"])
    op.create_index("ix_approval_documents_submitter_id", "approval_documents", ["submitter_id"])
    op.create_index("ix_approval_documents_current_decision_owner_id", "approval_documents", ["current_decision_owner_id"])
    op.create_index("ix_approval_documents_status", "approval_documents", ["status"])
    op.create_index("ix_approval_documents_created_at", "approval_documents", ["created_at"])

    # Decision history (append-only)
    op.create_table(
        "approval_history",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("document_id", sa.Uuid(as_uuid=True), sa.ForeignKey("approval_documents.id"), nullable=False),
        sa.Column("actor_id", sa.Uuid(as_uuid=True), sa.ForeignKey("parties.id"), nullable=False),
        sa.Column("action", sa.String(20), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("step_order", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("from_status", sa.String(20), nullable=False),
        sa.Column("to_status", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_approval_history_document_id", "approval_history", ["document_id"])
    op.create_index("ix_approval_history_created_at", "approval_history", ["created_at"])

    # Favorite templates
    op.create_table(
        "favorite_forms",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("party_id", sa.Uuid(as_uuid=True), sa.ForeignKey("parties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("template_id", sa.Uuid(as_uuid=True), sa.ForeignKey("form_templates.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("party_id", "template_id", name="uq_favorite_forms_party_template"),
    )
    op.create_index("ix_favorite_forms_party_id", "favorite_forms", ["party_id"])

    if op.get_bind().dialect.name != "postgresql":
        return

    op.execute("""
        CREATE OR REPLACE FUNCTION prevent_approval_history_change()
        RETURNS TRIGGER AS $trigger$
        BEGIN
            RAISE EXCEPTION 'Approval history is immutable. Record ID: %', OLD.id;
        END;
        $trigger$ LANGUAGE plpgsql;
    """)

    op.execute("""
        CREATE TRIGGER approval_history_prevent_update
        BEFORE UPDATE ON approval_history
        FOR EACH ROW
        EXECUTE FUNCTION prevent_approval_history_change();
    """)

    op.execute("""
        CREATE TRIGGER approval_history_prevent_delete
        BEFORE DELETE ON approval_history
        FOR EACH ROW
        EXECUTE FUNCTION prevent_approval_history_change();
    """)


def downgrade() -> None:
    """Drop all tables."""
    if op.get_bind().dialect.name == "postgresql":
        op.execute("DROP TRIGGER IF EXISTS approval_history_prevent_update ON approval_history;")
        op.execute("DROP TRIGGER IF EXISTS approval_history_prevent_delete ON approval_history;")
        op.execute("DROP FUNCTION IF EXISTS prevent_approval_history_change();")

    op.drop_table("favorite_forms")
    op.drop_table("approval_history")
    op.drop_table("approval_documents")
    op.drop_table("form_templates")
    op.drop_table("parties")
