"""Create notes table

Revision ID: 5f1c2a9d7b3e
Revises:
Create Date: 2026-10-18 09:12:05.118402

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5f1c2a9d7b3e'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema - encrypted fields are stored as hex text triples."""
    op.create_table(
        'notes',
        sa.Column('note_id', sa.String(length=64), primary_key=True),
        sa.Column('heading_encrypted', sa.Text(), nullable=False, server_default=''),
        sa.Column('heading_iv', sa.Text(), nullable=False, server_default=''),
        sa.Column('heading_auth_tag', sa.Text(), nullable=False, server_default=''),
        sa.Column('content_encrypted', sa.Text(), nullable=False, server_default=''),
        sa.Column('content_iv', sa.Text(), nullable=False, server_default=''),
        sa.Column('content_auth_tag', sa.Text(), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('idx_notes_updated_at', 'notes', ['updated_at'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('idx_notes_updated_at', table_name='notes')
    op.drop_table('notes')
