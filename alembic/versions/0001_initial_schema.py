"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates all tables for WaterNearMe:
users, sessions, bubblers, bubbler_audit_logs, reviews, favorites, xp_events.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=True),
        sa.Column("username", sa.String(50), nullable=True, unique=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("email_verified", sa.DateTime(timezone=True), nullable=True),
        sa.Column("image", sa.String(500), nullable=True),
        sa.Column("bio", sa.Text, nullable=True),
        sa.Column("xp", sa.Integer, nullable=False, server_default="0"),
        sa.Column("level", sa.Integer, nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    # --- sessions ---
    op.create_table(
        "sessions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("session_token", sa.String(255), nullable=False, unique=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("expires", sa.DateTime(timezone=True), nullable=False),
    )

    # --- bubblers ---
    op.create_table(
        "bubblers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("latitude", sa.Float, nullable=False),
        sa.Column("longitude", sa.Float, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("addedby", sa.String(100), nullable=True),
        sa.Column("addedbyuserid", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("verified", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("isaccessible", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("dogfriendly", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("hasbottlefiller", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column("maintainer", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_bubblers_addedbyuserid", "bubblers", ["addedbyuserid"])

    # --- bubbler_audit_logs (no FK: history outlives the bubbler) ---
    op.create_table(
        "bubbler_audit_logs",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("bubbler_id", sa.Integer, nullable=False),
        sa.Column("user_id", sa.String(36), nullable=True),
        sa.Column("action", sa.String(10), nullable=False),
        sa.Column("changes", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_bubbler_audit_logs_bubbler_id", "bubbler_audit_logs", ["bubbler_id"])

    # --- reviews ---
    op.create_table(
        "reviews",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("bubbler_id", sa.Integer, sa.ForeignKey("bubblers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("rating", sa.Float, nullable=False),
        sa.Column("comment", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "bubbler_id", name="uq_reviews_user_bubbler"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_reviews_bubbler_id", "reviews", ["bubbler_id"])

    # --- favorites ---
    op.create_table(
        "favorites",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("bubbler_id", sa.Integer, sa.ForeignKey("bubblers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "bubbler_id", name="uq_favorites_user_bubbler"),
    )
    op.create_index("ix_favorites_user_id", "favorites", ["user_id"])

    # --- xp_events ---
    op.create_table(
        "xp_events",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("idempotency_key", sa.String(255), nullable=False, unique=True),
        sa.Column("delta", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_xp_events_user_id", "xp_events", ["user_id"])


def downgrade() -> None:
    op.drop_table("xp_events")
    op.drop_table("favorites")
    op.drop_table("reviews")
    op.drop_table("bubbler_audit_logs")
    op.drop_table("bubblers")
    op.drop_table("sessions")
    op.drop_table("users")
