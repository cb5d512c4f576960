"""create user_settings and floor_plans tables

Revision ID: 5b2f0c7a91d4
Revises:
Create Date: 2026-10-19 10:04:11.218334

Idempotent: main.py runs Base.metadata.create_all() before migrating, so
either table may already exist.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '5b2f0c7a91d4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _table_exists(table_name):
    """Check if a table exists."""
    bind = op.get_bind()
    insp = inspect(bind)
    return table_name in insp.get_table_names()


def upgrade() -> None:
    if not _table_exists("user_settings"):
        op.create_table(
            "user_settings",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("user_key", sa.String(), nullable=False),
            sa.Column("project_settings", sa.JSON(), nullable=True),
            sa.Column("custom_rates", sa.JSON(), nullable=True),
            sa.Column("custom_quantities", sa.JSON(), nullable=True),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_user_settings_id", "user_settings", ["id"])
        op.create_index("ix_user_settings_user_key", "user_settings", ["user_key"], unique=True)

    if not _table_exists("floor_plans"):
        op.create_table(
            "floor_plans",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("user_key", sa.String(), nullable=False),
            sa.Column("file_name", sa.String(), nullable=False),
            sa.Column("analysis_json", sa.JSON(), nullable=False),
            sa.Column("cost_estimation_json", sa.JSON(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_floor_plans_id", "floor_plans", ["id"])
        op.create_index("ix_floor_plans_user_key", "floor_plans", ["user_key"])


def downgrade() -> None:
    if _table_exists("floor_plans"):
        op.drop_table("floor_plans")
    if _table_exists("user_settings"):
        op.drop_table("user_settings")
