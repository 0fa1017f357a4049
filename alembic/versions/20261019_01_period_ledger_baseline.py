"""Period ledger schema baseline

Revision ID: 20261019_01
Revises: None
Create Date: 2026-10-19
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "20261019_01"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")

    op.create_table(
        "project",
        sa.Column("project_id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("length(btrim(name)) > 0", name="ck_project_name_not_blank"),
    )
    op.create_index("ix_project_created_at_utc", "project", ["created_at_utc"])

    op.create_table(
        "period",
        sa.Column("period_id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column(
            "project_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("project.project_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("status", sa.Text(), nullable=False),
        sa.Column("p1_balance_start", sa.Numeric(14, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("p2_balance_start", sa.Numeric(14, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("p1_balance_end", sa.Numeric(14, 2), nullable=True),
        sa.Column("p2_balance_end", sa.Numeric(14, 2), nullable=True),
        sa.Column("opened_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("closed_at_utc", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("status in ('ACTIVE', 'CLOSED', 'PENDING_NAME')", name="ck_period_status"),
        sa.CheckConstraint(
            "status <> 'ACTIVE' OR length(btrim(name)) > 0",
            name="ck_period_active_name_not_blank",
        ),
        sa.CheckConstraint(
            "(p1_balance_end IS NULL) = (p2_balance_end IS NULL)",
            name="ck_period_ending_balances_paired",
        ),
        sa.CheckConstraint(
            "status = 'CLOSED' OR (p1_balance_end IS NULL AND closed_at_utc IS NULL)",
            name="ck_period_open_has_no_close_fields",
        ),
    )
    op.create_index("ix_period_project_created", "period", ["project_id", "created_at_utc"])
    op.create_index(
        "uq_period_project_single_open",
        "period",
        ["project_id"],
        unique=True,
        postgresql_where=sa.text("status IN ('ACTIVE', 'PENDING_NAME')"),
    )

    op.create_table(
        "ledger_transaction",
        sa.Column(
            "transaction_id",
            postgresql.UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column(
            "project_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("project.project_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "period_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("period.period_id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("transaction_type", sa.Text(), nullable=False),
        sa.Column("transaction_date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("paid_by", sa.Text(), nullable=True),
        sa.Column("from_partner", sa.Text(), nullable=True),
        sa.Column("to_partner", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Text(), nullable=True),
        sa.Column("created_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint(
            "transaction_type in ('EXPENSE', 'REVENUE', 'SETTLEMENT')",
            name="ck_ledger_transaction_type",
        ),
        sa.CheckConstraint("amount > 0", name="ck_ledger_transaction_amount_positive"),
        sa.CheckConstraint(
            "paid_by IS NULL OR paid_by in ('P1', 'P2')",
            name="ck_ledger_transaction_paid_by",
        ),
        sa.CheckConstraint(
            "from_partner IS NULL OR from_partner in ('P1', 'P2')",
            name="ck_ledger_transaction_from_partner",
        ),
        sa.CheckConstraint(
            "to_partner IS NULL OR to_partner in ('P1', 'P2')",
            name="ck_ledger_transaction_to_partner",
        ),
    )
    op.create_index("ix_ledger_transaction_period", "ledger_transaction", ["period_id", "transaction_date"])
    op.create_index("ix_ledger_transaction_project", "ledger_transaction", ["project_id"])

    op.create_table(
        "event_log",
        sa.Column("event_log_id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("category", sa.Text(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("period_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("transaction_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("actor_id", sa.Text(), nullable=True),
        sa.Column(
            "metadata",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("occurred_at_utc", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint(
            "category in ("
            "'PERIOD_OPENED', 'PERIOD_CLOSED', 'TX_CREATED', 'TX_UPDATED', 'TX_DELETED', "
            "'ACCESS_DENIED', 'NOTIF_SENT', 'NOTIF_FAILED', 'USER_LOGIN', 'USER_LOGOUT'"
            ")",
            name="ck_event_log_category",
        ),
    )
    op.create_index("ix_event_log_occurred_at_utc", "event_log", ["occurred_at_utc"])
    op.create_index("ix_event_log_project_occurred", "event_log", ["project_id", "occurred_at_utc"])
    op.create_index("ix_event_log_period_occurred", "event_log", ["period_id", "occurred_at_utc"])

    op.create_table(
        "notification",
        sa.Column(
            "notification_id",
            postgresql.UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column(
            "transaction_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("ledger_transaction.transaction_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'PENDING'")),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column("sent_at_utc", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("status in ('PENDING', 'SENT', 'FAILED')", name="ck_notification_status"),
    )
    op.create_index("ix_notification_status_created", "notification", ["status", "created_at_utc"])


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_index("ix_notification_status_created", table_name="notification")
    op.drop_table("notification")

    op.drop_index("ix_event_log_period_occurred", table_name="event_log")
    op.drop_index("ix_event_log_project_occurred", table_name="event_log")
    op.drop_index("ix_event_log_occurred_at_utc", table_name="event_log")
    op.drop_table("event_log")

    op.drop_index("ix_ledger_transaction_project", table_name="ledger_transaction")
    op.drop_index("ix_ledger_transaction_period", table_name="ledger_transaction")
    op.drop_table("ledger_transaction")

    op.drop_index("uq_period_project_single_open", table_name="period")
    op.drop_index("ix_period_project_created", table_name="period")
    op.drop_table("period")

    op.drop_index("ix_project_created_at_utc", table_name="project")
    op.drop_table("project")
