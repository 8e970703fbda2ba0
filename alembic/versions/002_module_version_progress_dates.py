"""Add version to training_modules, started_at/completed_at to module_progress.

Revision ID: 002
Revises: 001
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column(
        "training_modules",
        sa.Column("version", sa.String(16), nullable=False, server_default="1.0"),
    )
    op.add_column("module_progress", sa.Column("started_at", sa.DateTime(timezone=True), nullable=True))
    op.add_column("module_progress", sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True))


def downgrade() -> None:
    with op.batch_alter_table("module_progress") as batch_op:
        batch_op.drop_column("completed_at")
        batch_op.drop_column("started_at")
    with op.batch_alter_table("training_modules") as batch_op:
        batch_op.drop_column("version")
