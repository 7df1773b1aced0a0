"""Knowledge-base chunk table

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

Creates content_chunks: one row per retrieval chunk of a source article,
replaced as a set whenever the article's source_hash changes.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'content_chunks',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('source_path', sa.String(length=512), nullable=False),
        sa.Column('title', sa.String(length=512), nullable=False),
        sa.Column('section_title', sa.String(length=512), nullable=True),
        sa.Column('category', sa.String(length=32), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('chunk_index', sa.Integer(), nullable=False),
        sa.Column('source_hash', sa.String(length=16), nullable=False),
        sa.Column('difficulty', sa.String(length=16), nullable=False),
        sa.Column('metadata', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('embedding', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_content_chunks_source_path', 'content_chunks', ['source_path'])
    op.create_index('ix_content_chunks_category', 'content_chunks', ['category'])


def downgrade() -> None:
    op.drop_index('ix_content_chunks_category', table_name='content_chunks')
    op.drop_index('ix_content_chunks_source_path', table_name='content_chunks')
    op.drop_table('content_chunks')
