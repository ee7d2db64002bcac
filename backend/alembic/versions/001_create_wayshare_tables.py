"""Create WayShare entity tables

Revision ID: 001
Revises: None
Create Date: 2024-06-01 00:00:00.000000+00:00

What:  Creates the seven entity tables: profiles, members, rides,
       ride_requests, notifications, messages, ratings.
How:   BIGINT surrogate keys, nullable BIGINT foreign keys,
       TIMESTAMP WITH TIME ZONE for every timestamp. No cascade rules.

Rollback: downgrade() drops every table in reverse dependency order.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False)


def _fk(name: str, target: str, constraint: str, unique: bool = False) -> list:
    return [
        sa.Column(name, sa.BigInteger(), nullable=True, unique=unique),
        sa.ForeignKeyConstraint([name], [f"{target}.id"], name=constraint),
    ]


def upgrade() -> None:
    op.create_table(
        "profiles",
        _id(),
        sa.Column("first_name", sa.String(255), nullable=True),
        sa.Column("last_name", sa.String(255), nullable=True),
        sa.Column("photo", sa.String(1024), nullable=True, comment="Avatar URL or storage key"),
        sa.Column("contact_details", sa.String(1024), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    # profile_id UNIQUE makes member ↔ profile one-to-one
    op.create_table(
        "members",
        _id(),
        sa.Column("login", sa.String(50), nullable=False),
        sa.Column("password_hash", sa.String(60), nullable=False),
        sa.Column("email", sa.String(254), nullable=True),
        sa.Column("activated", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_fk("profile_id", "profiles", "fk_member__profile_id", unique=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("login", name="ux_member__login"),
        sa.UniqueConstraint("email", name="ux_member__email"),
    )

    op.create_table(
        "rides",
        _id(),
        sa.Column("start_location", sa.String(255), nullable=False),
        sa.Column("end_location", sa.String(255), nullable=False),
        sa.Column("start_time", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("end_time", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("is_recurring", sa.Boolean(), nullable=True),
        *_fk("member_id", "members", "fk_ride__member_id"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_rides_member_id", "rides", ["member_id"])

    op.create_table(
        "ride_requests",
        _id(),
        sa.Column("status", sa.String(255), nullable=False, comment="Free text, e.g. PENDING"),
        sa.Column("request_time", sa.TIMESTAMP(timezone=True), nullable=False),
        *_fk("ride_id", "rides", "fk_ride_request__ride_id"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_ride_requests_ride_id", "ride_requests", ["ride_id"])

    op.create_table(
        "notifications",
        _id(),
        sa.Column("message", sa.String(1024), nullable=False),
        sa.Column("timestamp", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=True, server_default=sa.text("false")),
        *_fk("member_id", "members", "fk_notification__member_id"),
        sa.PrimaryKeyConstraint("id"),
    )
    # Member inbox: WHERE member_id = ? ORDER BY timestamp DESC
    op.create_index(
        "idx_notifications_member_timestamp",
        "notifications",
        ["member_id", sa.text("timestamp DESC")],
    )

    op.create_table(
        "messages",
        _id(),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("timestamp", sa.TIMESTAMP(timezone=True), nullable=False),
        *_fk("ride_id", "rides", "fk_message__ride_id"),
        sa.PrimaryKeyConstraint("id"),
    )

    # score 1..5 is checked by the API, not by the column
    op.create_table(
        "ratings",
        _id(),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("feedback", sa.Text(), nullable=True),
        *_fk("giver_id", "members", "fk_rating__giver_id"),
        *_fk("receiver_id", "members", "fk_rating__receiver_id"),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    """Drop every WayShare table. Destructive: all data is lost."""
    op.drop_table("ratings")
    op.drop_table("messages")
    op.drop_index("idx_notifications_member_timestamp", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("idx_ride_requests_ride_id", table_name="ride_requests")
    op.drop_table("ride_requests")
    op.drop_index("idx_rides_member_id", table_name="rides")
    op.drop_table("rides")
    op.drop_table("members")
    op.drop_table("profiles")
