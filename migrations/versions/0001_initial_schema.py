"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00.000000+00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # 1. companies (no FKs)
    op.create_table('companies',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('name', sa.String(length=200), nullable=False),
    sa.Column('cnpj', sa.String(length=20), nullable=True),
    sa.Column('domain', sa.String(length=100), nullable=True),
    sa.Column('is_active', sa.Boolean(), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('cnpj')
    )
    op.create_index('idx_companies_active', 'companies', ['is_active'], unique=False)

    # 2. users
    op.create_table('users',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('company_id', sa.Integer(), nullable=True),
    sa.Column('username', sa.String(length=100), nullable=False),
    sa.Column('email', sa.String(length=255), nullable=True),
    sa.Column('full_name', sa.String(length=200), nullable=True),
    sa.Column('password_hash', sa.String(length=255), nullable=True),
    sa.Column('user_type', sa.String(length=20), nullable=False),
    sa.Column('is_active', sa.Boolean(), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('username')
    )
    op.create_index('idx_users_company', 'users', ['company_id'], unique=False)
    op.create_index('idx_users_type', 'users', ['user_type'], unique=False)

    # 3. drivers, vehicles, clients
    op.create_table('drivers',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('user_id', sa.Integer(), nullable=True),
    sa.Column('company_id', sa.Integer(), nullable=False),
    sa.Column('cnh', sa.String(length=20), nullable=True),
    sa.Column('phone_number', sa.String(length=30), nullable=True),
    sa.Column('status', sa.String(length=20), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
    sa.ForeignKeyConstraint(['user_id'], ['users.id']),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_drivers_company', 'drivers', ['company_id'], unique=False)
    op.create_index('idx_drivers_user', 'drivers', ['user_id'], unique=False)

    op.create_table('vehicles',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('company_id', sa.Integer(), nullable=False),
    sa.Column('plate', sa.String(length=10), nullable=False),
    sa.Column('model', sa.String(length=100), nullable=True),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_vehicles_company', 'vehicles', ['company_id'], unique=False)

    op.create_table('clients',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('company_id', sa.Integer(), nullable=False),
    sa.Column('name', sa.String(length=200), nullable=False),
    sa.Column('address', sa.Text(), nullable=True),
    sa.Column('phone', sa.String(length=30), nullable=True),
    sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
    sa.PrimaryKeyConstraint('id')
    )

    # 4. delivery_notes (driver_id holds drivers.id or users.id: no FK)
    op.create_table('delivery_notes',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('company_id', sa.Integer(), nullable=False),
    sa.Column('driver_id', sa.Integer(), nullable=True),
    sa.Column('created_by_user_id', sa.Integer(), nullable=True),
    sa.Column('client_id', sa.Integer(), nullable=True),
    sa.Column('nf_number', sa.String(length=50), nullable=True),
    sa.Column('client_name_extracted', sa.String(length=200), nullable=True),
    sa.Column('client_address', sa.Text(), nullable=True),
    sa.Column('merchandise_value', sa.Float(), nullable=True),
    sa.Column('status', sa.String(length=20), nullable=False),
    sa.Column('notes', sa.Text(), nullable=True),
    sa.Column('delivery_date_expected', sa.Date(), nullable=True),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.Column('updated_at', sa.DateTime(), nullable=True),
    sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
    sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_delivery_notes_company', 'delivery_notes', ['company_id'], unique=False)
    op.create_index('idx_delivery_notes_driver_id', 'delivery_notes', ['driver_id'], unique=False)
    op.create_index('idx_delivery_notes_status', 'delivery_notes', ['status'], unique=False)
    op.create_index('idx_delivery_notes_created', 'delivery_notes', ['created_at'], unique=False)

    # 5. rows hanging off a delivery
    op.create_table('delivery_receipts',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('delivery_note_id', sa.Integer(), nullable=False),
    sa.Column('company_id', sa.Integer(), nullable=False),
    sa.Column('captured_by_user_id', sa.Integer(), nullable=True),
    sa.Column('image_url', sa.Text(), nullable=True),
    sa.Column('status', sa.String(length=20), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
    sa.ForeignKeyConstraint(['delivery_note_id'], ['delivery_notes.id']),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_delivery_receipts_delivery', 'delivery_receipts', ['delivery_note_id'], unique=False)

    op.create_table('delivery_occurrences',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('delivery_id', sa.Integer(), nullable=False),
    sa.Column('company_id', sa.Integer(), nullable=False),
    sa.Column('driver_id', sa.Integer(), nullable=True),
    sa.Column('type', sa.String(length=20), nullable=False),
    sa.Column('description', sa.Text(), nullable=True),
    sa.Column('photo_url', sa.Text(), nullable=True),
    sa.Column('latitude', sa.Float(), nullable=True),
    sa.Column('longitude', sa.Float(), nullable=True),
    sa.Column('created_by', sa.Integer(), nullable=True),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
    sa.ForeignKeyConstraint(['delivery_id'], ['delivery_notes.id']),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_occurrences_delivery', 'delivery_occurrences', ['delivery_id'], unique=False)
    op.create_index('idx_occurrences_company', 'delivery_occurrences', ['company_id'], unique=False)

    # 6. routes and tracking
    op.create_table('routes',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('company_id', sa.Integer(), nullable=False),
    sa.Column('driver_id', sa.Integer(), nullable=True),
    sa.Column('vehicle_id', sa.Integer(), nullable=True),
    sa.Column('route_date', sa.Date(), nullable=True),
    sa.Column('status', sa.String(length=20), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
    sa.ForeignKeyConstraint(['driver_id'], ['drivers.id']),
    sa.ForeignKeyConstraint(['vehicle_id'], ['vehicles.id']),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_routes_company', 'routes', ['company_id'], unique=False)

    op.create_table('route_deliveries',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('route_id', sa.Integer(), nullable=False),
    sa.Column('delivery_note_id', sa.Integer(), nullable=False),
    sa.Column('sequence', sa.Integer(), nullable=True),
    sa.ForeignKeyConstraint(['delivery_note_id'], ['delivery_notes.id']),
    sa.ForeignKeyConstraint(['route_id'], ['routes.id']),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_route_deliveries_delivery', 'route_deliveries', ['delivery_note_id'], unique=False)

    op.create_table('tracking_points',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('driver_id', sa.Integer(), nullable=True),
    sa.Column('company_id', sa.Integer(), nullable=False),
    sa.Column('delivery_id', sa.Integer(), nullable=True),
    sa.Column('latitude', sa.Float(), nullable=False),
    sa.Column('longitude', sa.Float(), nullable=False),
    sa.Column('accuracy', sa.Float(), nullable=True),
    sa.Column('speed', sa.Float(), nullable=True),
    sa.Column('heading', sa.Float(), nullable=True),
    sa.Column('timestamp', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_tracking_points_driver', 'tracking_points', ['driver_id', 'timestamp'], unique=False)
    op.create_index('idx_tracking_points_delivery', 'tracking_points', ['delivery_id'], unique=False)

    # 7. operational_alerts (append-only, no FKs so alerts outlive their delivery)
    op.create_table('operational_alerts',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('identifier', sa.String(length=64), nullable=False),
    sa.Column('type', sa.String(length=50), nullable=False),
    sa.Column('severity', sa.String(length=20), nullable=False),
    sa.Column('title', sa.String(length=200), nullable=False),
    sa.Column('description', sa.Text(), nullable=True),
    sa.Column('company_id', sa.Integer(), nullable=True),
    sa.Column('delivery_id', sa.String(length=50), nullable=True),
    sa.Column('nf_number', sa.String(length=50), nullable=True),
    sa.Column('driver_id', sa.String(length=50), nullable=True),
    sa.Column('driver_name', sa.String(length=200), nullable=True),
    sa.Column('vehicle_label', sa.String(length=120), nullable=True),
    sa.Column('actor_id', sa.String(length=50), nullable=True),
    sa.Column('actor_name', sa.String(length=200), nullable=True),
    sa.Column('actor_role', sa.String(length=20), nullable=True),
    sa.Column('occurred_at', sa.DateTime(), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('identifier')
    )
    op.create_index('idx_alerts_company', 'operational_alerts', ['company_id'], unique=False)
    op.create_index('idx_alerts_occurred', 'operational_alerts', ['occurred_at'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_alerts_occurred', table_name='operational_alerts')
    op.drop_index('idx_alerts_company', table_name='operational_alerts')
    op.drop_table('operational_alerts')
    op.drop_index('idx_tracking_points_delivery', table_name='tracking_points')
    op.drop_index('idx_tracking_points_driver', table_name='tracking_points')
    op.drop_table('tracking_points')
    op.drop_index('idx_route_deliveries_delivery', table_name='route_deliveries')
    op.drop_table('route_deliveries')
    op.drop_index('idx_routes_company', table_name='routes')
    op.drop_table('routes')
    op.drop_index('idx_occurrences_company', table_name='delivery_occurrences')
    op.drop_index('idx_occurrences_delivery', table_name='delivery_occurrences')
    op.drop_table('delivery_occurrences')
    op.drop_index('idx_delivery_receipts_delivery', table_name='delivery_receipts')
    op.drop_table('delivery_receipts')
    op.drop_index('idx_delivery_notes_created', table_name='delivery_notes')
    op.drop_index('idx_delivery_notes_status', table_name='delivery_notes')
    op.drop_index('idx_delivery_notes_driver_id', table_name='delivery_notes')
    op.drop_index('idx_delivery_notes_company', table_name='delivery_notes')
    op.drop_table('delivery_notes')
    op.drop_table('clients')
    op.drop_index('idx_vehicles_company', table_name='vehicles')
    op.drop_table('vehicles')
    op.drop_index('idx_drivers_user', table_name='drivers')
    op.drop_index('idx_drivers_company', table_name='drivers')
    op.drop_table('drivers')
    op.drop_index('idx_users_type', table_name='users')
    op.drop_index('idx_users_company', table_name='users')
    op.drop_table('users')
    op.drop_index('idx_companies_active', table_name='companies')
    op.drop_table('companies')
