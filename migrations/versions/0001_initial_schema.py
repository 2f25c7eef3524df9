"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

choices          — append-only choice log, indexed by timestamp and category
life_parameters  — singleton row (id = "user") with a scalar life_expectancy
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- ENUM types ---
    category_enum = sa.Enum(
        "mindfulness", "intention", "action", "appreciation",
        "presence", "selfBelief", "agency", "validation",
        name="choice_category_enum",
    )
    category_enum.create(op.get_bind(), checkfirst=True)

    # --- choices ---
    op.create_table(
        "choices",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("category", category_enum, nullable=False),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("choice_text", sa.Text(), nullable=False),
        sa.Column("value", sa.String(64), nullable=False),
        sa.Column("weight", sa.Integer(), nullable=False),
    )
    op.create_index("ix_choices_timestamp", "choices", ["timestamp"])
    op.create_index("ix_choices_category", "choices", ["category"])

    # --- life_parameters ---
    op.create_table(
        "life_parameters",
        sa.Column("id", sa.String(16), primary_key=True),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("health_conditions", sa.Text(), nullable=False),
        sa.Column("life_expectancy", sa.Float(), nullable=True),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )


def downgrade() -> None:
    op.drop_table("life_parameters")
    op.drop_index("ix_choices_category", table_name="choices")
    op.drop_index("ix_choices_timestamp", table_name="choices")
    op.drop_table("choices")
    sa.Enum(name="choice_category_enum").drop(op.get_bind(), checkfirst=True)
