"""Per-article source hashes

Revision ID: 002
Revises: 001
Create Date: 2026-10-26 09:00:00.000000

Creates content_sources: one row per ingested article holding the hash it
was last ingested from, including articles that produced no chunks.
Existing chunk sets are backfilled.
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '002'
down_revision = '001'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'content_sources',
        sa.Column('source_path', sa.String(length=512), nullable=False),
        sa.Column('source_hash', sa.String(length=16), nullable=False),
        sa.Column('chunk_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('source_path'),
    )
    op.execute(
        "INSERT INTO content_sources (source_path, source_hash, chunk_count) "
        "SELECT source_path, MIN(source_hash), COUNT(*) FROM content_chunks GROUP BY source_path"
    )


def downgrade() -> None:
    op.drop_table('content_sources')
