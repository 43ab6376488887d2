"""Session records

Revision ID: 001
Revises: 
Create Date: 2026-10-17 00:00:00.000000

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
    op.create_table('session_records',
        sa.Column('conversation_key', sa.String(), nullable=False),
        sa.Column('schema_version', sa.Integer(), server_default='1', nullable=False),
        sa.Column('payload', postgresql.JSONB(), nullable=False),
        sa.Column('last_updated', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('conversation_key')
    )
    op.create_index('idx_session_records_last_updated', 'session_records', ['last_updated'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_session_records_last_updated', table_name='session_records')
    op.drop_table('session_records')
