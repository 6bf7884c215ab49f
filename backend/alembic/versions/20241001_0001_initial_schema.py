"""initial schema

Revision ID: 0001
Revises:
Create Date: 2024-10-01 09:00:00
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "leave_type",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("label", sa.String(length=100), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_leave_type_code", "leave_type", ["code"], unique=True)

    op.create_table(
        "leave_request",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("leave_type", sa.String(length=50), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("requested_days", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=30), server_default="pending_tl", nullable=False),
        sa.Column("tl_approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("wfm_approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.String(length=1000), nullable=True),
        sa.CheckConstraint("start_date <= end_date", name="ck_leave_request_range"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_leave_request_user_id", "leave_request", ["user_id"])
    op.create_index("ix_leave_request_status", "leave_request", ["status"])
    op.create_index("ix_leave_request_user_dates", "leave_request", ["user_id", "start_date", "end_date"])

    op.create_table(
        "leave_balance",
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("leave_type", sa.String(length=50), nullable=False),
        sa.Column("balance", sa.Float(), server_default="0", nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("user_id", "leave_type"),
    )

    op.create_table(
        "leave_balance_history",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("leave_type", sa.String(length=50), nullable=False),
        sa.Column("previous_balance", sa.Float(), nullable=False),
        sa.Column("new_balance", sa.Float(), nullable=False),
        sa.Column("change_reason", sa.String(length=500), nullable=False),
        sa.Column("leave_request_id", sa.Uuid(), nullable=True),
        sa.Column("actor_id", sa.Uuid(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_leave_balance_history_user_id", "leave_balance_history", ["user_id"])

    op.create_table(
        "shift",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("shift_type", sa.String(length=10), nullable=False),
        sa.Column("swapped_with_user_id", sa.Uuid(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "date", name="uq_shift_user_date"),
    )
    op.create_index("ix_shift_user_id", "shift", ["user_id"])
    op.create_index("ix_shift_date", "shift", ["date"])

    op.create_table(
        "swap_request",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("requester_id", sa.Uuid(), nullable=False),
        sa.Column("target_user_id", sa.Uuid(), nullable=False),
        sa.Column("requester_shift_id", sa.Uuid(), nullable=False),
        sa.Column("target_shift_id", sa.Uuid(), nullable=False),
        sa.Column("status", sa.String(length=30), server_default="pending_acceptance", nullable=False),
        sa.Column("requester_original_date", sa.Date(), nullable=False),
        sa.Column("requester_original_shift_type", sa.String(length=10), nullable=False),
        sa.Column("target_original_date", sa.Date(), nullable=False),
        sa.Column("target_original_shift_type", sa.String(length=10), nullable=False),
        sa.Column("requester_original_shift_type_on_target_date", sa.String(length=10), nullable=True),
        sa.Column("target_original_shift_type_on_requester_date", sa.String(length=10), nullable=True),
        sa.Column("tl_approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("wfm_approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("executed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("requester_shift_id <> target_shift_id", name="ck_swap_distinct_shifts"),
        sa.ForeignKeyConstraint(["requester_shift_id"], ["shift.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["target_shift_id"], ["shift.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_swap_request_requester_id", "swap_request", ["requester_id"])
    op.create_index("ix_swap_request_target_user_id", "swap_request", ["target_user_id"])
    op.create_index("ix_swap_request_status", "swap_request", ["status"])
    op.create_index("ix_swap_request_parties", "swap_request", ["requester_id", "target_user_id"])

    op.create_table(
        "request_comment",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("request_id", sa.Uuid(), nullable=False),
        sa.Column("request_type", sa.String(length=10), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("content", sa.String(length=2000), nullable=False),
        sa.Column("is_system", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_comment_request", "request_comment", ["request_type", "request_id"])

    op.create_table(
        "app_setting",
        sa.Column("key", sa.String(length=100), nullable=False),
        sa.Column("value", sa.String(length=500), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("key"),
    )
    op.bulk_insert(
        sa.table("app_setting", sa.column("key", sa.String), sa.column("value", sa.String)),
        [
            {"key": "wfm_auto_approve", "value": "false"},
            {"key": "allow_leave_exceptions", "value": "false"},
        ],
    )


def downgrade() -> None:
    op.drop_table("app_setting")
    op.drop_index("ix_comment_request", table_name="request_comment")
    op.drop_table("request_comment")
    op.drop_index("ix_swap_request_parties", table_name="swap_request")
    op.drop_index("ix_swap_request_status", table_name="swap_request")
    op.drop_index("ix_swap_request_target_user_id", table_name="swap_request")
    op.drop_index("ix_swap_request_requester_id", table_name="swap_request")
    op.drop_table("swap_request")
    op.drop_index("ix_shift_date", table_name="shift")
    op.drop_index("ix_shift_user_id", table_name="shift")
    op.drop_table("shift")
    op.drop_index("ix_leave_balance_history_user_id", table_name="leave_balance_history")
    op.drop_table("leave_balance_history")
    op.drop_table("leave_balance")
    op.drop_index("ix_leave_request_user_dates", table_name="leave_request")
    op.drop_index("ix_leave_request_status", table_name="leave_request")
    op.drop_index("ix_leave_request_user_id", table_name="leave_request")
    op.drop_table("leave_request")
    op.drop_index("ix_leave_type_code", table_name="leave_type")
    op.drop_table("leave_type")
