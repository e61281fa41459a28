"""create campaigns table

Revision ID: 002
Revises: 001
Create Date: 2025-03-01 00:05:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "campaigns",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("business_id", sa.Integer(), sa.ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("compensation_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("compensation_type", sa.String(20), server_default="hourly", nullable=False),
        sa.Column("location", sa.String(100), nullable=False),
        sa.Column("duration_hours", sa.Integer(), nullable=True),
        sa.Column("requirements", sa.Text(), nullable=True),
        sa.Column("merchandise_type", sa.String(100), nullable=True),
        sa.Column("target_demographics", sa.JSON(), nullable=True),
        sa.Column("status", sa.String(20), server_default="active", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("status IN ('active', 'paused', 'closed')", name="ck_campaigns_status"),
        sa.CheckConstraint(
            "compensation_type IN ('hourly', 'daily', 'per_event')", name="ck_campaigns_compensation_type"
        ),
    )
    op.create_index("ix_campaigns_business_status", "campaigns", ["business_id", "status"])


def downgrade() -> None:
    op.drop_index("ix_campaigns_business_status", table_name="campaigns")
    op.drop_table("campaigns")
