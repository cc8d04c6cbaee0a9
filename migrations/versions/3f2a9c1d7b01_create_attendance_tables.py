"""create employees, webauthn credentials and attendance records

Revision ID: 3f2a9c1d7b01
Revises:
Create Date: 2026-10-19 09:12:44.118230
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = '3f2a9c1d7b01'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

attendance_type = sa.Enum('sign-in', 'sign-out', name='attendance_type')
location_type = sa.Enum('office', 'site', 'remote', name='location_type')


def upgrade() -> None:
    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.String(length=20), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('department', sa.String(length=100), nullable=True),
        sa.Column('role', sa.String(length=100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_employees_id', 'employees', ['id'])
    op.create_index('ix_employees_employee_id', 'employees', ['employee_id'], unique=True)

    op.create_table(
        'webauthn_credentials',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.String(length=20), sa.ForeignKey('employees.employee_id'), nullable=False),
        sa.Column('credential_id', sa.String(length=1024), nullable=False),
        sa.Column('public_key', sa.Text(), nullable=False),
        sa.Column('sign_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('aaguid', sa.String(length=64), nullable=True),
        sa.Column('platform', sa.String(length=20), nullable=True),
        sa.Column('last_used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('credential_id'),
    )
    op.create_index('ix_webauthn_credentials_id', 'webauthn_credentials', ['id'])
    op.create_index('ix_webauthn_credentials_employee_id', 'webauthn_credentials', ['employee_id'])

    op.create_table(
        'attendance_records',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.String(length=20), sa.ForeignKey('employees.employee_id'), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=True),
        sa.Column('type', attendance_type, nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('attendance_date', sa.Date(), nullable=False),
        sa.Column('sequence', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('location_type', location_type, nullable=False),
        sa.Column('site_id', sa.String(length=100), nullable=True),
        sa.Column('latitude', sa.Numeric(10, 8), nullable=True),
        sa.Column('longitude', sa.Numeric(11, 8), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint(
            'employee_id', 'location_type', 'attendance_date', 'sequence',
            name='uq_attendance_employee_location_day_sequence',
        ),
    )
    op.create_index('ix_attendance_records_id', 'attendance_records', ['id'])
    op.create_index('ix_attendance_records_employee_id', 'attendance_records', ['employee_id'])
    op.create_index('ix_attendance_records_timestamp', 'attendance_records', ['timestamp'])
    print("✓ [3f2a9c1d7b01] Created employees, webauthn_credentials, attendance_records")


def downgrade() -> None:
    op.drop_table('attendance_records')
    op.drop_table('webauthn_credentials')
    op.drop_table('employees')
    location_type.drop(op.get_bind(), checkfirst=True)
    attendance_type.drop(op.get_bind(), checkfirst=True)
