"""create user_profiles table

Revision ID: 001
Revises: 
Create Date: 2025-03-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "user_profiles",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("auth_subject", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), server_default="", nullable=False),
        sa.Column("full_name", sa.String(100), nullable=True),
        sa.Column("user_type", sa.String(20), nullable=False),
        sa.Column("company_name", sa.String(100), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("industry", sa.String(100), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("address", sa.String(200), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(2), nullable=True),
        sa.Column("profile_picture_url", sa.String(1024), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("user_type IN ('business', 'advertiser')", name="ck_user_profiles_user_type"),
    )
    op.create_index("ix_user_profiles_auth_subject", "user_profiles", ["auth_subject"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_user_profiles_auth_subject", table_name="user_profiles")
    op.drop_table("user_profiles")
