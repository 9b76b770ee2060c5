"""Initial contract vault schema

Revision ID: initial_schema
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = 'initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=100), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='user'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'contracts',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('operator', sa.String(length=255), nullable=False),
        sa.Column('contractor_name', sa.String(length=255), nullable=False),
        sa.Column('contract_title', sa.String(length=500), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('contract_number', sa.String(length=100), nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('contract_value', sa.String(length=100), nullable=True),
        sa.Column('has_document', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_archived', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('archived_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('archived_by', sa.String(length=36), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['archived_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('contract_number')
    )
    op.create_index('ix_contracts_contractor_name', 'contracts', ['contractor_name'], unique=False)
    op.create_index('ix_contracts_year', 'contracts', ['year'], unique=False)
    op.create_index('ix_contracts_is_archived', 'contracts', ['is_archived'], unique=False)
    op.create_index('idx_contracts_contractor_year', 'contracts', ['contractor_name', 'year'], unique=False)
    op.create_index('idx_contracts_operator', 'contracts', ['operator'], unique=False)
    op.create_index('idx_contracts_has_document', 'contracts', ['has_document'], unique=False)
    op.create_index('idx_contracts_created_at', 'contracts', ['created_at'], unique=False)

    op.create_table(
        'media',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('url', sa.String(length=1024), nullable=False),
        sa.Column('filename', sa.String(length=255), nullable=False),
        sa.Column('original_name', sa.String(length=255), nullable=False),
        sa.Column('mimetype', sa.String(length=100), nullable=False),
        sa.Column('size', sa.Integer(), nullable=False),
        sa.Column('public_id', sa.String(length=512), nullable=False),
        sa.Column('uploaded_by', sa.String(length=36), nullable=True),
        sa.Column('contract_id', sa.String(length=36), nullable=True),
        sa.Column('tags', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['uploaded_by'], ['users.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['contract_id'], ['contracts.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_media_contract_id', 'media', ['contract_id'], unique=False)
    op.create_index('idx_media_is_deleted', 'media', ['is_deleted'], unique=False)
    op.create_index('idx_media_uploaded_by', 'media', ['uploaded_by'], unique=False)

    op.create_table(
        'search_history',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('query', sa.Text(), nullable=False),
        sa.Column('results_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('tab', sa.String(length=50), nullable=False, server_default='all'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_search_history_user_id', 'search_history', ['user_id'], unique=False)
    op.create_index('idx_search_history_user_created', 'search_history', ['user_id', 'created_at'], unique=False)

    for table, stamp, unique_name in (
        ('user_bookmarks', 'bookmarked_at', 'uq_user_bookmarks_user_contract'),
        ('user_archived_contracts', 'archived_at', 'uq_user_archived_user_contract'),
    ):
        op.create_table(
            table,
            sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
            sa.Column('user_id', sa.String(length=36), nullable=False),
            sa.Column('contract_id', sa.String(length=36), nullable=False),
            sa.Column(stamp, sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['contract_id'], ['contracts.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('user_id', 'contract_id', name=unique_name)
        )
        op.create_index(f'ix_{table}_user_id', table, ['user_id'], unique=False)
        op.create_index(f'ix_{table}_contract_id', table, ['contract_id'], unique=False)


def downgrade() -> None:
    for table in ('user_archived_contracts', 'user_bookmarks'):
        op.drop_index(f'ix_{table}_contract_id', table_name=table)
        op.drop_index(f'ix_{table}_user_id', table_name=table)
        op.drop_table(table)

    op.drop_index('idx_search_history_user_created', table_name='search_history')
    op.drop_index('ix_search_history_user_id', table_name='search_history')
    op.drop_table('search_history')

    op.drop_index('idx_media_uploaded_by', table_name='media')
    op.drop_index('idx_media_is_deleted', table_name='media')
    op.drop_index('idx_media_contract_id', table_name='media')
    op.drop_table('media')

    op.drop_index('idx_contracts_created_at', table_name='contracts')
    op.drop_index('idx_contracts_has_document', table_name='contracts')
    op.drop_index('idx_contracts_operator', table_name='contracts')
    op.drop_index('idx_contracts_contractor_year', table_name='contracts')
    op.drop_index('ix_contracts_is_archived', table_name='contracts')
    op.drop_index('ix_contracts_year', table_name='contracts')
    op.drop_index('ix_contracts_contractor_name', table_name='contracts')
    op.drop_table('contracts')

    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
