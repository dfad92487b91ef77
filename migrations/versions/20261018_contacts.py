"""Contacts table

Revision ID: 001_contacts
Revises:
Create Date: 2026-10-18 09:00:00.000000

The rest of the shared schema (users, sessions, workspaces, agents, calls,
outbound_jobs, phone_numbers) is migrated by the main platform.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001_contacts'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'contacts',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('workspace_id', sa.String(64), sa.ForeignKey('workspaces.id', ondelete='CASCADE'), nullable=False),
        sa.Column('phone_e164', sa.String(32), nullable=False),
        sa.Column('name', sa.String(255), nullable=True, server_default=''),
        sa.Column('email', sa.String(255), nullable=True, server_default=''),
        sa.Column('company', sa.String(255), nullable=True, server_default=''),
        sa.Column('tags', postgresql.ARRAY(sa.String), nullable=True, server_default='{}'),
        sa.Column('notes', sa.Text, nullable=True, server_default=''),
        sa.Column('source', sa.String(20), nullable=True, server_default='manual'),
        sa.Column('metadata', postgresql.JSONB, nullable=True, server_default=sa.text("'{}'::jsonb")),
        sa.Column('total_calls', sa.Integer, nullable=False, server_default='0'),
        sa.Column('last_call_at', sa.BigInteger, nullable=True),
        sa.Column('last_call_outcome', sa.String(100), nullable=True, server_default=''),
        sa.Column('created_at', sa.BigInteger, nullable=False),
        sa.Column('updated_at', sa.BigInteger, nullable=False),
    )
    op.create_unique_constraint('uq_contacts_workspace_phone', 'contacts', ['workspace_id', 'phone_e164'])
    op.create_index('ix_contacts_workspace_id', 'contacts', ['workspace_id'])
    op.create_index(
        'ix_contacts_workspace_last_call',
        'contacts',
        ['workspace_id', sa.text('last_call_at DESC NULLS LAST')],
    )
    op.create_index('ix_contacts_tags', 'contacts', ['tags'], postgresql_using='gin')


def downgrade() -> None:
    op.drop_index('ix_contacts_tags', table_name='contacts')
    op.drop_index('ix_contacts_workspace_last_call', table_name='contacts')
    op.drop_index('ix_contacts_workspace_id', table_name='contacts')
    op.drop_constraint('uq_contacts_workspace_phone', 'contacts', type_='unique')
    op.drop_table('contacts')
