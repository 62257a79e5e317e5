"""Initial schema: diners, tables, payments, reservations and table links

Revision ID: 001_initial_reservation_schema
Revises: 
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001_initial_reservation_schema'
down_revision = None

reservation_status = sa.Enum('NEW', 'PENDING', 'CONFIRMED', name='reservationstatus')
payment_method = sa.Enum('CASH', 'CARD', 'TRANSFER', name='paymentmethod')


def upgrade():
    op.create_table(
        'diners',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('fname', sa.String(100), nullable=False),
        sa.Column('lname', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('reservation_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('date_registered', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_diners_email', 'diners', ['email'])

    op.create_table(
        'tables',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('reservation_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_tables_is_active', 'tables', ['is_active'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('guests_count', sa.Integer(), nullable=False),
        sa.Column('charge_per_head', sa.Numeric(10, 2), nullable=False),
        sa.Column('deposit_percentage', sa.Numeric(5, 4), nullable=False),
        sa.Column('total_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('deposit_fee', sa.Numeric(10, 2), nullable=False),
        sa.Column('method', payment_method, nullable=False),
        sa.Column('notes', sa.String(500), nullable=True),
        sa.Column('date_of_payment', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'reservations',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('diner_id', sa.Uuid(), sa.ForeignKey('diners.id'), nullable=False),
        sa.Column('payment_id', sa.Uuid(), sa.ForeignKey('payments.id'), nullable=True),
        sa.Column('guests_count', sa.Integer(), nullable=False),
        sa.Column('date_reserved', sa.DateTime(), nullable=False),
        sa.Column('notes', sa.String(1000), nullable=True),
        sa.Column('status', reservation_status, nullable=False),
        sa.Column('table_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_reservations_diner_id', 'reservations', ['diner_id'])
    op.create_index('ix_reservations_date_reserved', 'reservations', ['date_reserved'])
    op.create_index('ix_reservations_status', 'reservations', ['status'])

    op.create_table(
        'reservation_tables',
        sa.Column('reservation_id', sa.Uuid(), sa.ForeignKey('reservations.id'), primary_key=True),
        sa.Column('table_id', sa.Uuid(), sa.ForeignKey('tables.id'), primary_key=True),
    )
    op.create_index('ix_reservation_tables_table_id', 'reservation_tables', ['table_id'])


def downgrade():
    op.drop_index('ix_reservation_tables_table_id', 'reservation_tables')
    op.drop_table('reservation_tables')

    op.drop_index('ix_reservations_status', 'reservations')
    op.drop_index('ix_reservations_date_reserved', 'reservations')
    op.drop_index('ix_reservations_diner_id', 'reservations')
    op.drop_table('reservations')

    op.drop_table('payments')

    op.drop_index('ix_tables_is_active', 'tables')
    op.drop_table('tables')

    op.drop_index('ix_diners_email', 'diners')
    op.drop_table('diners')

    reservation_status.drop(op.get_bind(), checkfirst=True)
    payment_method.drop(op.get_bind(), checkfirst=True)
