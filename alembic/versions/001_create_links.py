"""create links table

Revision ID: 001
Revises:
Create Date: 2026-02-01 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'links',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('slug', sa.String(16), nullable=False),
        sa.Column('recipient_name', sa.String(50), nullable=False),
        sa.Column('creator_name', sa.String(50), nullable=False),
        sa.Column('theme_id', sa.Integer(), nullable=False, server_default="1"),
        sa.Column('icon_url', sa.String(500), nullable=True),
        sa.Column('is_anonymous', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            'response',
            sa.Enum('unset', 'accept', 'decline', name='link_response', native_enum=False),
            nullable=False,
            server_default='unset',
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_links_id'), 'links', ['id'], unique=False)
    op.create_index(op.f('ix_links_slug'), 'links', ['slug'], unique=True)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_links_slug'), table_name='links')
    op.drop_index(op.f('ix_links_id'), table_name='links')
    op.drop_table('links')
