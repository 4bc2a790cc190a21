from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0002_second_factor_attempts"
down_revision = "0001_create_schema"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "second_factor_attempts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("failed_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("first_failed_at", sa.DateTime(), nullable=True),
        sa.Column("last_failed_at", sa.DateTime(), nullable=True),
        sa.Column("locked_until", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("user_id", name="uq_second_factor_attempts_user_id"),
    )
    op.create_index("ix_second_factor_attempts_user_id", "second_factor_attempts", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_second_factor_attempts_user_id", table_name="second_factor_attempts")
    op.drop_table("second_factor_attempts")
