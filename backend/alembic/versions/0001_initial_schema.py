"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17

Creates the RSVP lifecycle tables:
users, events, event_participants, participation_status_changes.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PARTICIPATION_STATUSES = ("pending_approval", "attending", "interested", "rejected", "not_participating")


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("username", sa.String(100), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("full_name", sa.String(200), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- events ---
    op.create_table(
        "events",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("host_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("capacity", sa.Integer, nullable=True),
        sa.Column("attending_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("interested_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_private", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("require_approval", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("ticket_type", sa.Enum("free", "paid", name="tickettype"), nullable=False, server_default="free"),
        sa.Column("price", sa.Numeric(10, 2), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("attending_count >= 0", name="ck_events_attending_count_non_negative"),
        sa.CheckConstraint("interested_count >= 0", name="ck_events_interested_count_non_negative"),
    )
    op.create_index("ix_events_host_id", "events", ["host_id"])

    # --- event_participants ---
    op.create_table(
        "event_participants",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("event_id", sa.Integer, sa.ForeignKey("events.id"), nullable=False),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("status", sa.Enum(*PARTICIPATION_STATUSES, name="participationstatus"), nullable=False),
        sa.Column("ticket_quantity", sa.Integer, nullable=True),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=True),
        sa.Column("payment_status", sa.Enum("pending", "completed", name="paymentstatus"), nullable=True),
        sa.Column("payment_intent_id", sa.String(255), nullable=True, unique=True),
        sa.Column("stripe_checkout_session_id", sa.String(255), nullable=True),
        sa.Column("ticket_identifier", sa.String(36), nullable=True, unique=True),
        sa.Column("purchase_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("event_id", "user_id", name="uq_event_participants_event_user"),
        sa.CheckConstraint("ticket_quantity IS NULL OR ticket_quantity >= 1",
                           name="ck_event_participants_ticket_quantity"),
    )
    op.create_index("ix_event_participants_event_id", "event_participants", ["event_id"])
    op.create_index("ix_event_participants_user_id", "event_participants", ["user_id"])

    # --- participation_status_changes ---
    op.create_table(
        "participation_status_changes",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("participation_id", sa.Integer, sa.ForeignKey("event_participants.id"), nullable=False),
        sa.Column("actor_user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=True),
        sa.Column("source", sa.Enum("host_decision", "payment_webhook", "self_rsvp", name="changesource"),
                  nullable=False),
        sa.Column("from_status", postgresql.ENUM(*PARTICIPATION_STATUSES, name="participationstatus", create_type=False),
                  nullable=True),
        sa.Column("to_status", postgresql.ENUM(*PARTICIPATION_STATUSES, name="participationstatus", create_type=False),
                  nullable=False),
        sa.Column("idempotency_key", sa.String(255), nullable=True, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_participation_status_changes_participation_id",
                    "participation_status_changes", ["participation_id"])


def downgrade() -> None:
    op.drop_table("participation_status_changes")
    op.drop_table("event_participants")
    op.drop_table("events")
    op.drop_table("users")
    for enum_name in ("changesource", "paymentstatus", "participationstatus", "tickettype"):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
