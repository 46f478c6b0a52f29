"""initial schema

Kullanıcılar, abonelikler, taramalar, günlük sayaç, paylaşım linkleri ve hata logları.

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("hashed_password", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "subscriptions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("stripe_customer_id", sa.String(), nullable=True),
        sa.Column("stripe_subscription_id", sa.String(), nullable=True),
        sa.Column("stripe_price_id", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="active"),
        sa.Column("tier", sa.String(), nullable=False, server_default="free"),
        sa.Column("current_period_start", sa.DateTime(timezone=True), nullable=True),
        sa.Column("current_period_end", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancel_at_period_end", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_subscriptions_user_id", "subscriptions", ["user_id"], unique=True)
    op.create_index("ix_subscriptions_stripe_customer_id", "subscriptions", ["stripe_customer_id"])
    op.create_index("ix_subscriptions_stripe_subscription_id", "subscriptions", ["stripe_subscription_id"])

    op.create_table(
        "tongue_scans",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("image_url", sa.String(), nullable=True),
        sa.Column("primary_pattern", sa.String(), nullable=False, server_default=""),
        sa.Column("coat", sa.String(), nullable=False, server_default=""),
        sa.Column("color", sa.String(), nullable=False, server_default=""),
        sa.Column("shape", sa.String(), nullable=False, server_default=""),
        sa.Column("moisture", sa.String(), nullable=False, server_default=""),
        sa.Column("recommendations", sa.String(), nullable=True),
        sa.Column("recommended_formula", sa.String(), nullable=True),
        sa.Column("severity", sa.String(), nullable=True),
        sa.Column("result_format", sa.String(), nullable=False, server_default="legacy"),
        sa.Column("result_json", sa.JSON(), nullable=False),
    )
    op.create_index("ix_tongue_scans_user_id", "tongue_scans", ["user_id"])
    op.create_index("ix_tongue_scans_created_at", "tongue_scans", ["created_at"])

    op.create_table(
        "scan_usage",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("scan_date", sa.Date(), nullable=False),
        sa.Column("scans_count", sa.Integer(), nullable=False, server_default="0"),
        sa.UniqueConstraint("user_id", "scan_date", name="uq_scan_usage_user_day"),
    )
    op.create_index("ix_scan_usage_user_id", "scan_usage", ["user_id"])
    op.create_index("ix_scan_usage_scan_date", "scan_usage", ["scan_date"])

    op.create_table(
        "sharetoken",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("scan_id", sa.Integer(), sa.ForeignKey("tongue_scans.id"), nullable=False),
        sa.Column("token", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_sharetoken_scan_id", "sharetoken", ["scan_id"])
    op.create_index("ix_sharetoken_token", "sharetoken", ["token"], unique=True)

    op.create_table(
        "error_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("endpoint", sa.String(), nullable=True),
        sa.Column("method", sa.String(), nullable=True),
        sa.Column("error_message", sa.String(), nullable=True),
        sa.Column("stack_trace", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_error_logs_user_id", "error_logs", ["user_id"])


def downgrade() -> None:
    op.drop_table("error_logs")
    op.drop_table("sharetoken")
    op.drop_table("scan_usage")
    op.drop_table("tongue_scans")
    op.drop_table("subscriptions")
    op.drop_table("user")
