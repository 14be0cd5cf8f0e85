"""Initial schema for the Bakeline database.

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create the production record table."""
    op.create_table(
        "production_record",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("panel", sa.String(length=50), nullable=False),
        sa.Column("unit", sa.String(length=100), nullable=False),
        sa.Column("lote", sa.String(length=100), nullable=True),
        sa.Column("lot_id", sa.String(length=100), nullable=True),
        sa.Column("shift_date", sa.Date(), nullable=True),
        sa.Column("fecha_texto", sa.String(length=50), nullable=True),
        sa.Column("duration_ms", sa.Integer(), nullable=True),
        sa.Column("dead_ms", sa.Integer(), nullable=True),
        sa.Column("overall_ms", sa.Integer(), nullable=True),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_production_record_created_at", "production_record", ["created_at"]
    )
    op.create_index("ix_production_record_panel", "production_record", ["panel"])
    op.create_index("ix_production_record_lot_id", "production_record", ["lot_id"])
    op.create_index(
        "ix_production_record_shift_date", "production_record", ["shift_date"]
    )


def downgrade() -> None:
    """Drop the production record table."""
    op.drop_index("ix_production_record_shift_date", table_name="production_record")
    op.drop_index("ix_production_record_lot_id", table_name="production_record")
    op.drop_index("ix_production_record_panel", table_name="production_record")
    op.drop_index("ix_production_record_created_at", table_name="production_record")
    op.drop_table("production_record")
