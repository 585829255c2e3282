"""Create certificates table.

Revision ID: 20260105_01
Revises:
Create Date: 2026-01-05 00:00:00
"""

# pylint: disable=invalid-name,missing-module-docstring

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "20260105_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if inspector.has_table("certificates"):
        return

    op.create_table(
        "certificates",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("qr_code_id", sa.String(length=255), nullable=False),
        sa.Column("qr_verification_token", sa.String(length=255), nullable=False),
        sa.Column("fullname", sa.String(length=255), nullable=False),
        sa.Column("training", sa.String(length=255), nullable=False),
        sa.Column("training_start_date", sa.Date(), nullable=True),
        sa.Column("training_end_date", sa.Date(), nullable=True),
        sa.Column("training_period", sa.String(length=255), nullable=True),
        sa.Column("award_date", sa.String(length=64), nullable=True),
        sa.Column("control_number", sa.String(length=128), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint(
            "qr_code_id",
            "qr_verification_token",
            name="uq_certificates_qr_code_id_token",
        ),
        sa.UniqueConstraint(
            "qr_verification_token", name="uq_certificates_qr_verification_token"
        ),
    )
    op.create_index(
        "ix_certificates_qr_code_id", "certificates", ["qr_code_id"], unique=True
    )


def downgrade():
    op.drop_index("ix_certificates_qr_code_id", table_name="certificates")
    op.drop_table("certificates")
