"""abstracts and reviews

Revision ID: 3c1e0f7a2b94
Revises:
Create Date: 2026-10-17 09:12:41.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1e0f7a2b94'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'abstracts',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('abstract', sa.Text(), nullable=False),
        sa.Column('keywords', sa.JSON(), nullable=False),
        sa.Column('authors', sa.JSON(), nullable=False),
        sa.Column('corresponding_author_email', sa.String(length=255), nullable=False),
        sa.Column('submission_type', sa.String(length=30), nullable=False),
        sa.Column('track', sa.String(length=100), nullable=False),
        sa.Column('subcategory', sa.String(length=500), nullable=False),
        sa.Column('cross_cutting_themes', sa.JSON(), nullable=False),
        sa.Column('format', sa.String(length=20), nullable=False),
        sa.Column('file_url', sa.String(length=1000), nullable=True),
        sa.Column('submitted_by', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=30), nullable=False),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('reviewer_comments', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_abstracts_track', 'abstracts', ['track'])
    op.create_index('ix_abstracts_status', 'abstracts', ['status'])

    op.create_table(
        'reviews',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('abstract_id', sa.Integer(), nullable=False),
        sa.Column('reviewer_name', sa.String(length=255), nullable=False),
        sa.Column('reviewer_email', sa.String(length=255), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('recommendation', sa.String(length=30), nullable=False),
        sa.Column('comments', sa.Text(), nullable=True),
        sa.Column('detailed_feedback', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['abstract_id'], ['abstracts.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('abstract_id', 'reviewer_email', name='reviews_abstract_reviewer_uc'),
    )
    op.create_index('ix_reviews_abstract_id', 'reviews', ['abstract_id'])
    op.create_index('ix_reviews_reviewer_email', 'reviews', ['reviewer_email'])

    op.create_table(
        'form_submissions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('form_type', sa.String(length=30), nullable=False),
        sa.Column('entity_id', sa.Integer(), nullable=False),
        sa.Column('submitted_by', sa.String(length=255), nullable=True),
        sa.Column('submission_data', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(length=30), nullable=False),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('review_comments', sa.Text(), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_form_submissions_form_type', 'form_submissions', ['form_type'])
    op.create_index('ix_form_submissions_entity_id', 'form_submissions', ['entity_id'])


def downgrade() -> None:
    op.drop_table('form_submissions')
    op.drop_table('reviews')
    op.drop_table('abstracts')
