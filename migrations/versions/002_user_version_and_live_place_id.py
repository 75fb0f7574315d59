"""User row versioning and one live restaurant per Google Place ID

Revision ID: 002_user_version_and_live_place_id
Revises: 001_initial_schema
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = '002_user_version_and_live_place_id'
down_revision: Union[str, None] = '001_initial_schema'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Optimistic-concurrency counter for users (claims, report counts)
    op.add_column('users', sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'))

    # Soft-deleted rows release their place id
    op.create_index(
        'uq_restaurants_live_google_place_id',
        'restaurants',
        ['google_place_id'],
        unique=True,
        postgresql_where=sa.text('deleted_at IS NULL'),
    )


def downgrade() -> None:
    op.drop_index('uq_restaurants_live_google_place_id', table_name='restaurants')
    op.drop_column('users', 'version_id')
