"""create_catalog_tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:12:40.118204

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
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not inspector.has_table('shows'):
        op.create_table('shows',
        sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('name', sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint('id')
        )

    if not inspector.has_table('people'):
        op.create_table('people',
        sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('name', sa.String(length=500), nullable=True),
        sa.Column('birthday', sa.Date(), nullable=True),
        sa.PrimaryKeyConstraint('id')
        )

    if not inspector.has_table('show_cast'):
        op.create_table('show_cast',
        sa.Column('show_id', sa.Integer(), nullable=False),
        sa.Column('person_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['show_id'], ['shows.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['person_id'], ['people.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('show_id', 'person_id')
        )
        op.create_index('ix_show_cast_person_id', 'show_cast', ['person_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if inspector.has_table('show_cast'):
        indexes = [idx['name'] for idx in inspector.get_indexes('show_cast')]
        if 'ix_show_cast_person_id' in indexes:
            op.drop_index('ix_show_cast_person_id', table_name='show_cast')
        op.drop_table('show_cast')
    if inspector.has_table('people'):
        op.drop_table('people')
    if inspector.has_table('shows'):
        op.drop_table('shows')
