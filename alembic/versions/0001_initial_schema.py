"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("subscription_tier", sa.String(length=20), nullable=False, server_default="free"),
        sa.Column("subscription_end_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "user_sessions",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_sessions_user_id", "user_sessions", ["user_id"], unique=False)
    op.create_index("ix_user_sessions_expires_at", "user_sessions", ["expires_at"], unique=False)

    op.create_table(
        "bloodwork_reports",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("report_date", sa.Date(), nullable=False),
        sa.Column("raw_json", sa.JSON(), nullable=True),
        sa.Column("lab_source", sa.String(length=255), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("other_metadata", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_bloodwork_reports_user_id", "bloodwork_reports", ["user_id"], unique=False)
    op.create_index("ix_bloodwork_reports_report_date", "bloodwork_reports", ["report_date"], unique=False)

    op.create_table(
        "bloodwork_history_analyses",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("trend_summary", sa.Text(), nullable=True),
        sa.Column("pattern_notes", sa.JSON(), nullable=True),
        sa.Column("marker_insights", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_bloodwork_history_analyses_user_id", "bloodwork_history_analyses", ["user_id"], unique=False
    )
    op.create_index(
        "ix_bloodwork_history_analyses_created_at", "bloodwork_history_analyses", ["created_at"], unique=False
    )

    op.create_table(
        "token_usage_log",
        sa.Column("id", sa.BigInteger().with_variant(sa.Integer(), "sqlite"), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("feature_name", sa.String(length=100), nullable=False),
        sa.Column("tokens_used", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_token_usage_log_user_id", "token_usage_log", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_token_usage_log_user_id", table_name="token_usage_log")
    op.drop_table("token_usage_log")
    op.drop_index("ix_bloodwork_history_analyses_created_at", table_name="bloodwork_history_analyses")
    op.drop_index("ix_bloodwork_history_analyses_user_id", table_name="bloodwork_history_analyses")
    op.drop_table("bloodwork_history_analyses")
    op.drop_index("ix_bloodwork_reports_report_date", table_name="bloodwork_reports")
    op.drop_index("ix_bloodwork_reports_user_id", table_name="bloodwork_reports")
    op.drop_table("bloodwork_reports")
    op.drop_index("ix_user_sessions_expires_at", table_name="user_sessions")
    op.drop_index("ix_user_sessions_user_id", table_name="user_sessions")
    op.drop_table("user_sessions")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
