"""three-scenario life expectancies

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19

Adds an explicit schema_version to life_parameters. Rows that already exist
are marked version 1 (scalar life_expectancy) and are upconverted by the
application when read; new writes are version 2 with life_expectancies JSON.
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column(
        "life_parameters",
        sa.Column("schema_version", sa.Integer(), nullable=False, server_default="1"),
    )
    op.add_column(
        "life_parameters",
        sa.Column("life_expectancies", sa.Text(), nullable=True),
    )


def downgrade() -> None:
    with op.batch_alter_table("life_parameters") as batch:
        batch.drop_column("life_expectancies")
        batch.drop_column("schema_version")
