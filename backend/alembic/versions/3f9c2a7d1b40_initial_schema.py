"""initial_schema

Revision ID: 3f9c2a7d1b40
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c2a7d1b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'companies',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('timezone', sa.String(length=64), nullable=False, server_default='Europe/Amsterdam'),
        sa.Column('locale', sa.String(length=10), nullable=False, server_default='ru'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'employees',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('company_id', sa.Uuid(), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('position', sa.String(length=255), nullable=True),
        sa.Column('telegram_user_id', sa.String(length=100), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=False, server_default='active'),
        sa.Column('tz', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('telegram_user_id'),
    )

    op.create_table(
        'shifts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('employee_id', sa.Uuid(), nullable=False),
        sa.Column('planned_start', sa.DateTime(timezone=True), nullable=False),
        sa.Column('planned_end', sa.DateTime(timezone=True), nullable=False),
        sa.Column('actual_start', sa.DateTime(timezone=True), nullable=True),
        sa.Column('actual_end', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=False, server_default='planned'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_shifts_employee_planned_start', 'shifts', ['employee_id', 'planned_start'])

    for table, extra in (
        ('work_intervals', []),
        ('break_intervals', [sa.Column('type', sa.String(length=50), nullable=False, server_default='lunch')]),
    ):
        op.create_table(
            table,
            sa.Column('id', sa.Uuid(), nullable=False),
            sa.Column('shift_id', sa.Uuid(), nullable=False),
            sa.Column('start_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('end_at', sa.DateTime(timezone=True), nullable=True),
            *extra,
            sa.Column('source', sa.String(length=50), nullable=False, server_default='bot'),
            sa.ForeignKeyConstraint(['shift_id'], ['shifts.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
        )
    # At most one open interval of each kind per shift
    op.create_index(
        'uq_work_interval_open', 'work_intervals', ['shift_id'], unique=True,
        sqlite_where=sa.text('end_at IS NULL'), postgresql_where=sa.text('end_at IS NULL'),
    )
    op.create_index(
        'uq_break_interval_open', 'break_intervals', ['shift_id'], unique=True,
        sqlite_where=sa.text('end_at IS NULL'), postgresql_where=sa.text('end_at IS NULL'),
    )

    op.create_table(
        'violation_rules',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('company_id', sa.Uuid(), nullable=False),
        sa.Column('code', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('penalty_percent', sa.Numeric(5, 2), nullable=False),
        sa.Column('auto_detectable', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'uq_violation_rule_company_code', 'violation_rules',
        ['company_id', sa.text('lower(code)')], unique=True,
    )

    op.create_table(
        'violations',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('employee_id', sa.Uuid(), nullable=False),
        sa.Column('company_id', sa.Uuid(), nullable=False),
        sa.Column('rule_id', sa.Uuid(), nullable=False),
        sa.Column('source', sa.String(length=20), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('penalty', sa.Numeric(5, 2), nullable=False),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['rule_id'], ['violation_rules.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_violations_employee_created', 'violations', ['employee_id', 'created_at'])

    op.create_table(
        'employee_ratings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('employee_id', sa.Uuid(), nullable=False),
        sa.Column('company_id', sa.Uuid(), nullable=False),
        sa.Column('period_start', sa.Date(), nullable=False),
        sa.Column('period_end', sa.Date(), nullable=False),
        sa.Column('rating', sa.Numeric(5, 2), nullable=False, server_default='100'),
        sa.Column('status', sa.String(length=50), nullable=False, server_default='active'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('employee_id', 'period_start', 'period_end', name='uq_employee_rating_period'),
    )

    op.create_table(
        'exceptions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('employee_id', sa.Uuid(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('kind', sa.String(length=50), nullable=False),
        sa.Column('severity', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('violation_id', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['violation_id'], ['violations.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    # Dedup key of the monitoring sweep: one open exception per employee, day and kind
    op.create_index(
        'uq_exception_open', 'exceptions', ['employee_id', 'date', 'kind'], unique=True,
        sqlite_where=sa.text('resolved_at IS NULL'), postgresql_where=sa.text('resolved_at IS NULL'),
    )
    op.create_index('ix_exception_violation_id', 'exceptions', ['violation_id'])

    op.create_table(
        'notification_log',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('company_id', sa.Uuid(), nullable=False),
        sa.Column('employee_id', sa.Uuid(), nullable=True),
        sa.Column('channel', sa.String(length=50), nullable=False),
        sa.Column('event_type', sa.String(length=100), nullable=False),
        sa.Column('body', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=False, server_default='skipped'),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_notification_log_employee_created', 'notification_log', ['employee_id', 'created_at'])


def downgrade() -> None:
    op.drop_index('ix_notification_log_employee_created', table_name='notification_log')
    op.drop_table('notification_log')
    op.drop_index('ix_exception_violation_id', table_name='exceptions')
    op.drop_index('uq_exception_open', table_name='exceptions')
    op.drop_table('exceptions')
    op.drop_table('employee_ratings')
    op.drop_index('ix_violations_employee_created', table_name='violations')
    op.drop_table('violations')
    op.drop_index('uq_violation_rule_company_code', table_name='violation_rules')
    op.drop_table('violation_rules')
    op.drop_index('uq_break_interval_open', table_name='break_intervals')
    op.drop_index('uq_work_interval_open', table_name='work_intervals')
    op.drop_table('break_intervals')
    op.drop_table('work_intervals')
    op.drop_index('ix_shifts_employee_planned_start', table_name='shifts')
    op.drop_table('shifts')
    op.drop_table('employees')
    op.drop_table('companies')
