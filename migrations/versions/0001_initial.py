"""initial tables

Revision ID: 0001
Revises: 
Create Date: 2025-09-01

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    availability_type = sa.Enum('REGULAR', 'ONE_TIME', 'BLACKOUT', name='availability_type')
    booking_status = sa.Enum('PENDING', 'CONFIRMED', 'COMPLETED', 'CANCELLED', name='booking_status')

    op.create_table('teachers',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('timezone', sa.String(length=64), nullable=False, server_default='UTC'),
        sa.Column('advance_notice_hours', sa.Integer(), nullable=True, server_default='24'),
        sa.Column('max_advance_booking_hours', sa.Integer(), nullable=True, server_default='720'),
    )

    op.create_table('availability_rules',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('teacher_id', sa.String(length=36),
                  sa.ForeignKey('teachers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.String(length=5), nullable=False),
        sa.Column('end_time', sa.String(length=5), nullable=False),
        sa.Column('type', availability_type, nullable=False, server_default='REGULAR'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('1')),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_availability_rules_teacher_day', 'availability_rules', ['teacher_id', 'day_of_week'])

    op.create_table('bookings',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('teacher_id', sa.String(length=36),
                  sa.ForeignKey('teachers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('scheduled_at', sa.DateTime(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False, server_default='30'),
        sa.Column('status', booking_status, nullable=False, server_default='PENDING'),
    )
    op.create_index('ix_bookings_teacher_scheduled', 'bookings', ['teacher_id', 'scheduled_at'])

def downgrade():
    op.drop_index('ix_bookings_teacher_scheduled', table_name='bookings')
    op.drop_table('bookings')
    op.drop_index('ix_availability_rules_teacher_day', table_name='availability_rules')
    op.drop_table('availability_rules')
    op.drop_table('teachers')

    bind = op.get_bind()
    if bind.dialect.name != 'sqlite':
        sa.Enum(name='booking_status').drop(bind, checkfirst=True)
        sa.Enum(name='availability_type').drop(bind, checkfirst=True)
