"""create_employee_attendance

Revision ID: 001
Revises:
Create Date: 2026-10-18 10:12:41.503118

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

    if not inspector.has_table('employee_attendance'):
        op.create_table('employee_attendance',
            sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
            sa.Column('date', sa.Date(), nullable=False),
            sa.Column('employee_id', sa.Text(), nullable=False),
            sa.Column('employee_name', sa.Text(), nullable=False),
            sa.Column('email_id', sa.Text(), nullable=True),
            sa.Column('first_in', sa.Time(), nullable=True),
            sa.Column('last_out', sa.Time(), nullable=True),
            sa.Column('late_login', sa.Time(), nullable=True),
            sa.Column('shift_name', sa.Text(), nullable=True),
            sa.Column('sheet_source_id', sa.String(length=255), nullable=True),
            sa.Column('sheet_row_number', sa.Integer(), nullable=True),
            sa.Column('sheet_synced_at', sa.DateTime(timezone=True), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('sheet_source_id', 'sheet_row_number', name='uq_employee_attendance_sheet_row')
        )
        op.create_index(op.f('ix_employee_attendance_date'), 'employee_attendance', ['date'], unique=False)
        op.create_index(op.f('ix_employee_attendance_employee_id'), 'employee_attendance', ['employee_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if inspector.has_table('employee_attendance'):
        indexes = [idx['name'] for idx in inspector.get_indexes('employee_attendance')]
        if 'ix_employee_attendance_employee_id' in indexes:
            op.drop_index(op.f('ix_employee_attendance_employee_id'), table_name='employee_attendance')
        if 'ix_employee_attendance_date' in indexes:
            op.drop_index(op.f('ix_employee_attendance_date'), table_name='employee_attendance')
        op.drop_table('employee_attendance')
