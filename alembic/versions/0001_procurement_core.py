"""procurement core: branches, users, boq, bids, selections, budgets, audit, idempotency

Revision ID: 0001_procurement_core
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0001_procurement_core"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "branches",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("location", sa.String(length=256), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("username", sa.String(length=64), nullable=False),
        sa.Column("email", sa.String(length=256), nullable=False),
        sa.Column("display_name", sa.String(length=256), nullable=False),
        sa.Column("role", sa.String(length=32), nullable=False),
        sa.Column("branch_id", sa.Uuid(), sa.ForeignKey("branches.id", ondelete="SET NULL"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("username"),
    )
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "supplier_profiles",
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("contact_details", sa.Text(), nullable=False),
        sa.Column("certification", sa.Text(), nullable=False),
        sa.Column("performance_history", sa.Text(), nullable=False),
        sa.Column("price_per_liter", sa.Numeric(18, 2), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "boq_entries",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("fuel_type", sa.String(length=32), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("quantity", sa.Numeric(18, 3), nullable=False),
        sa.Column("unit", sa.String(length=32), nullable=False),
        sa.Column("estimated_price_per_unit", sa.Numeric(18, 2), nullable=False),
        sa.Column("deadline", sa.Date(), nullable=False),
        sa.Column("branch_id", sa.Uuid(), sa.ForeignKey("branches.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_by", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("quantity > 0", name="ck_boq_quantity_positive"),
        sa.CheckConstraint("estimated_price_per_unit > 0", name="ck_boq_price_positive"),
    )
    op.create_index("ix_boq_fuel_type", "boq_entries", ["fuel_type"])
    op.create_index("ix_boq_branch", "boq_entries", ["branch_id"])

    op.create_table(
        "bids",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("boq_id", sa.Uuid(), sa.ForeignKey("boq_entries.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("supplier_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("bid_price_per_unit", sa.Numeric(18, 2), nullable=False),
        sa.Column("total_price", sa.Numeric(28, 5), nullable=False),
        sa.Column("qualifications", sa.JSON(), nullable=False),
        sa.Column("quality_certificates", sa.JSON(), nullable=False),
        sa.Column("state", sa.String(length=16), nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("boq_id", "supplier_id", name="uq_bid_boq_supplier"),
        sa.CheckConstraint("bid_price_per_unit > 0", name="ck_bid_price_positive"),
    )
    op.create_index("ix_bids_boq_submitted", "bids", ["boq_id", "submitted_at"])
    op.create_index("ix_bids_supplier", "bids", ["supplier_id"])

    op.create_table(
        "supplier_selections",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("boq_id", sa.Uuid(), sa.ForeignKey("boq_entries.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("bid_id", sa.Uuid(), sa.ForeignKey("bids.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("supplier_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("selected_by", sa.Uuid(), nullable=False),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("signature_hash", sa.String(length=128), nullable=False),
        sa.Column("notification_status", sa.String(length=16), nullable=False),
        sa.Column("notification_detail", sa.Text(), nullable=True),
        sa.Column("notified_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("boq_id", name="uq_selection_boq"),
    )

    op.create_table(
        "fuel_budgets",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("fuel_type", sa.String(length=32), nullable=False),
        sa.Column("budget", sa.Numeric(28, 2), nullable=False),
        sa.Column("updated_by", sa.Uuid(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("fuel_type", name="uq_fuel_budget_type"),
        sa.CheckConstraint("budget > 0", name="ck_fuel_budget_positive"),
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("request_id", sa.String(length=128), nullable=True),
        sa.Column("actor_user_id", sa.Uuid(), nullable=True),
        sa.Column("actor_role", sa.String(length=32), nullable=True),
        sa.Column("action", sa.String(length=64), nullable=False),
        sa.Column("entity", sa.String(length=32), nullable=False),
        sa.Column("entity_id", sa.String(length=64), nullable=True),
        sa.Column("payload_hash", sa.String(length=128), nullable=False),
        sa.Column("details_json", sa.JSON(), nullable=False),
    )
    op.create_index("ix_audit_entity", "audit_logs", ["entity", "entity_id"])
    op.create_index("ix_audit_action", "audit_logs", ["action"])
    op.create_index("ix_audit_created", "audit_logs", ["created_at"])

    op.create_table(
        "idempotency_key_records",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("endpoint_key", sa.String(length=256), nullable=False),
        sa.Column("idem_key", sa.String(length=128), nullable=False),
        sa.Column("request_hash", sa.String(length=128), nullable=False),
        sa.Column("response_status", sa.Integer(), nullable=False),
        sa.Column("response_json", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "endpoint_key", "idem_key", name="uq_idem_scope"),
    )


def downgrade():
    op.drop_table("idempotency_key_records")
    op.drop_index("ix_audit_created", table_name="audit_logs")
    op.drop_index("ix_audit_action", table_name="audit_logs")
    op.drop_index("ix_audit_entity", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_table("fuel_budgets")
    op.drop_table("supplier_selections")
    op.drop_index("ix_bids_supplier", table_name="bids")
    op.drop_index("ix_bids_boq_submitted", table_name="bids")
    op.drop_table("bids")
    op.drop_index("ix_boq_branch", table_name="boq_entries")
    op.drop_index("ix_boq_fuel_type", table_name="boq_entries")
    op.drop_table("boq_entries")
    op.drop_table("supplier_profiles")
    op.drop_index("ix_users_role", table_name="users")
    op.drop_table("users")
    op.drop_table("branches")
