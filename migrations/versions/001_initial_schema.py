"""Initial schema for the value catalog, restaurants, users, reports and claims

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-02-14

Adds:
- values_catalog
- restaurants with optimistic-concurrency version_id and a C-collated geohash
- restaurant_values (per-value certification state)
- users, favorites
- reports, business_claims, certification_evidence
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Value catalog
    op.create_table(
        'values_catalog',
        sa.Column('slug', sa.String(64), primary_key=True),
        sa.Column('label', sa.String(100), nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('icon', sa.String(50), nullable=True),
        sa.Column('category', sa.String(50), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('restaurant_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('idx_values_catalog_active_sort', 'values_catalog', ['active', 'sort_order'])

    # Restaurants
    op.create_table(
        'restaurants',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('google_place_id', sa.String(), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('city', sa.String(100), nullable=False),
        sa.Column('lat', sa.Float(), nullable=False),
        sa.Column('lng', sa.Float(), nullable=False),
        # Byte ordering so "~" bounds every geohash prefix range
        sa.Column('geohash', sa.String(12, collation='C'), nullable=False),
        sa.Column('cert_tier_max', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_report_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('claimed_by_user_id', sa.String(128), nullable=True),
        sa.Column('claim_status', sa.String(20), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('version_id', sa.Integer(), nullable=False),
    )
    op.create_index('ix_restaurants_google_place_id', 'restaurants', ['google_place_id'])
    op.create_index('ix_restaurants_city', 'restaurants', ['city'])
    op.create_index('idx_restaurants_geohash', 'restaurants', ['geohash'])
    op.create_index('idx_restaurants_name_id', 'restaurants', ['name', 'id'])
    op.create_index('idx_restaurants_tier_id', 'restaurants', ['cert_tier_max', 'id'])

    op.create_table(
        'restaurant_values',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('restaurant_id', sa.String(36), sa.ForeignKey('restaurants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('slug', sa.String(64), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('cert_tier', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('self_attested', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('report_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('verified_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_restaurant_values_slug', 'restaurant_values', ['slug'])
    op.create_index(
        'idx_restaurant_values_restaurant_slug',
        'restaurant_values',
        ['restaurant_id', 'slug'],
        unique=True
    )

    # Users
    op.create_table(
        'users',
        sa.Column('uid', sa.String(128), primary_key=True),
        sa.Column('email', sa.String(), nullable=False, server_default=''),
        sa.Column('display_name', sa.String(200), nullable=True),
        sa.Column('photo_url', sa.String(), nullable=True),
        sa.Column('user_type', sa.String(20), nullable=False, server_default='user'),
        sa.Column('value_preferences', sa.JSON(), nullable=False),
        sa.Column('claimed_restaurant_id', sa.String(36), nullable=True),
        sa.Column('report_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_users_claimed_restaurant_id', 'users', ['claimed_restaurant_id'])

    op.create_table(
        'favorites',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(128), nullable=False),
        sa.Column('restaurant_id', sa.String(36), nullable=False),
        sa.Column('restaurant_name', sa.String(200), nullable=False),
        sa.Column('restaurant_city', sa.String(100), nullable=False),
        sa.Column('added_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('idx_favorites_user_restaurant', 'favorites', ['user_id', 'restaurant_id'], unique=True)
    op.create_index('idx_favorites_user_added', 'favorites', ['user_id', 'added_at'])

    # Community reports
    op.create_table(
        'reports',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('restaurant_id', sa.String(36), nullable=False),
        sa.Column('restaurant_name', sa.String(200), nullable=False),
        sa.Column('user_id', sa.String(128), nullable=False),
        sa.Column('values', sa.JSON(), nullable=False),
        sa.Column('comment', sa.String(500), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('idx_reports_user_restaurant_created', 'reports', ['user_id', 'restaurant_id', 'created_at'])
    op.create_index('idx_reports_restaurant_status', 'reports', ['restaurant_id', 'status'])
    op.create_index('idx_reports_user_created', 'reports', ['user_id', 'created_at'])

    # Business claims
    op.create_table(
        'business_claims',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('restaurant_id', sa.String(36), nullable=False),
        sa.Column('restaurant_name', sa.String(200), nullable=False),
        sa.Column('user_id', sa.String(128), nullable=False),
        sa.Column('user_email', sa.String(), nullable=False, server_default=''),
        sa.Column('owner_name', sa.String(200), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('phone', sa.String(20), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('evidence_description', sa.String(1000), nullable=True),
        sa.Column('evidence_file_urls', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('reviewed_at', sa.DateTime(), nullable=True),
    )
    op.create_index(
        'idx_business_claims_restaurant_user',
        'business_claims',
        ['restaurant_id', 'user_id', 'status']
    )

    # Certification evidence awaiting manual review
    op.create_table(
        'certification_evidence',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('restaurant_id', sa.String(36), sa.ForeignKey('restaurants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('value_slug', sa.String(64), nullable=False),
        sa.Column('file_urls', sa.JSON(), nullable=False),
        sa.Column('description', sa.String(1000), nullable=True),
        sa.Column('submitted_by_user_id', sa.String(128), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        'idx_certification_evidence_restaurant',
        'certification_evidence',
        ['restaurant_id', 'created_at']
    )


def downgrade() -> None:
    op.drop_index('idx_certification_evidence_restaurant', table_name='certification_evidence')
    op.drop_table('certification_evidence')
    op.drop_index('idx_business_claims_restaurant_user', table_name='business_claims')
    op.drop_table('business_claims')
    op.drop_index('idx_reports_user_created', table_name='reports')
    op.drop_index('idx_reports_restaurant_status', table_name='reports')
    op.drop_index('idx_reports_user_restaurant_created', table_name='reports')
    op.drop_table('reports')
    op.drop_index('idx_favorites_user_added', table_name='favorites')
    op.drop_index('idx_favorites_user_restaurant', table_name='favorites')
    op.drop_table('favorites')
    op.drop_index('ix_users_claimed_restaurant_id', table_name='users')
    op.drop_table('users')
    op.drop_index('idx_restaurant_values_restaurant_slug', table_name='restaurant_values')
    op.drop_index('ix_restaurant_values_slug', table_name='restaurant_values')
    op.drop_table('restaurant_values')
    op.drop_index('idx_restaurants_tier_id', table_name='restaurants')
    op.drop_index('idx_restaurants_name_id', table_name='restaurants')
    op.drop_index('idx_restaurants_geohash', table_name='restaurants')
    op.drop_index('ix_restaurants_city', table_name='restaurants')
    op.drop_index('ix_restaurants_google_place_id', table_name='restaurants')
    op.drop_table('restaurants')
    op.drop_index('idx_values_catalog_active_sort', table_name='values_catalog')
    op.drop_table('values_catalog')
