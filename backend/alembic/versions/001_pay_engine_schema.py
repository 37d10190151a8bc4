"""pay engine schema

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'awards',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('code', sa.String(20), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('industry', sa.String(100), nullable=True),
        sa.Column('fair_work_reference', sa.String(100), nullable=True),
        sa.Column('effective_from', sa.Date(), nullable=True),
        sa.Column('effective_to', sa.Date(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_awards_code'), 'awards', ['code'], unique=True)

    op.create_table(
        'classifications',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('award_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('level', sa.String(100), nullable=False),
        sa.Column('aqf_level', sa.String(20), nullable=True),
        sa.Column('fair_work_level_code', sa.String(50), nullable=True),
        sa.ForeignKeyConstraint(['award_id'], ['awards.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('award_id', 'name', 'level', name='uq_classification_award_name_level')
    )
    op.create_index(op.f('ix_classifications_award_id'), 'classifications', ['award_id'], unique=False)

    op.create_table(
        'pay_rates',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('classification_id', sa.Integer(), nullable=False),
        sa.Column('hourly_rate', sa.Numeric(10, 2), nullable=False),
        sa.Column('effective_from', sa.Date(), nullable=False),
        sa.Column('effective_to', sa.Date(), nullable=True),
        sa.Column('is_apprentice_rate', sa.Boolean(), nullable=False),
        sa.Column('apprenticeship_year', sa.Integer(), nullable=True),
        sa.CheckConstraint(
            'apprenticeship_year IS NULL OR apprenticeship_year BETWEEN 1 AND 4',
            name='ck_pay_rate_apprenticeship_year',
        ),
        sa.ForeignKeyConstraint(['classification_id'], ['classifications.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_pay_rates_classification_id'), 'pay_rates', ['classification_id'], unique=False)

    op.create_table(
        'penalty_rules',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('award_id', sa.Integer(), nullable=False),
        sa.Column('classification_id', sa.Integer(), nullable=True),
        sa.Column('penalty_type', sa.String(50), nullable=False),
        sa.Column('multiplier', sa.Numeric(6, 4), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=True),
        sa.Column('start_time', sa.String(5), nullable=True),
        sa.Column('end_time', sa.String(5), nullable=True),
        sa.Column('effective_from', sa.Date(), nullable=False),
        sa.Column('effective_to', sa.Date(), nullable=True),
        sa.CheckConstraint('multiplier > 1', name='ck_penalty_rule_multiplier'),
        sa.ForeignKeyConstraint(['award_id'], ['awards.id']),
        sa.ForeignKeyConstraint(['classification_id'], ['classifications.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_penalty_rules_award_id'), 'penalty_rules', ['award_id'], unique=False)

    op.create_table(
        'allowance_rules',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('award_id', sa.Integer(), nullable=False),
        sa.Column('classification_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('allowance_type', sa.String(20), nullable=False),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('effective_from', sa.Date(), nullable=False),
        sa.Column('effective_to', sa.Date(), nullable=True),
        sa.CheckConstraint('amount >= 0', name='ck_allowance_rule_amount'),
        sa.ForeignKeyConstraint(['award_id'], ['awards.id']),
        sa.ForeignKeyConstraint(['classification_id'], ['classifications.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_allowance_rules_award_id'), 'allowance_rules', ['award_id'], unique=False)

    op.create_table(
        'public_holidays',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('jurisdiction', sa.String(10), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('jurisdiction', 'date', name='uq_public_holiday_jurisdiction_date')
    )
    op.create_index(op.f('ix_public_holidays_jurisdiction'), 'public_holidays', ['jurisdiction'], unique=False)
    op.create_index(op.f('ix_public_holidays_date'), 'public_holidays', ['date'], unique=False)

    op.create_table(
        'trade_award_mappings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('keyword', sa.String(100), nullable=False),
        sa.Column('award_code', sa.String(20), nullable=False),
        sa.Column('priority', sa.Integer(), nullable=False),
        sa.Column('version', sa.String(20), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('keyword', 'version', name='uq_trade_mapping_keyword_version')
    )

    op.create_table(
        'apprentices',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('trade', sa.String(200), nullable=True),
        sa.Column('apprenticeship_year', sa.Integer(), nullable=True),
        sa.Column('state', sa.String(10), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'placements',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('apprentice_id', sa.Integer(), nullable=False),
        sa.Column('host_employer_id', sa.Integer(), nullable=True),
        sa.Column('state', sa.String(10), nullable=True),
        sa.ForeignKeyConstraint(['apprentice_id'], ['apprentices.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_placements_apprentice_id'), 'placements', ['apprentice_id'], unique=False)

    op.create_table(
        'timesheets',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('apprentice_id', sa.Integer(), nullable=False),
        sa.Column('placement_id', sa.Integer(), nullable=True),
        sa.Column('week_starting', sa.Date(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.ForeignKeyConstraint(['apprentice_id'], ['apprentices.id']),
        sa.ForeignKeyConstraint(['placement_id'], ['placements.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_timesheets_apprentice_id'), 'timesheets', ['apprentice_id'], unique=False)

    op.create_table(
        'timesheet_shifts',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('timesheet_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=True),
        sa.Column('start_time', sa.String(10), nullable=True),
        sa.Column('end_time', sa.String(10), nullable=True),
        sa.Column('break_duration', sa.Numeric(5, 2), nullable=False),
        sa.Column('day_type', sa.String(20), nullable=True),
        sa.ForeignKeyConstraint(['timesheet_id'], ['timesheets.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_timesheet_shifts_timesheet_id'), 'timesheet_shifts', ['timesheet_id'], unique=False)

    op.create_table(
        'timesheet_calculations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('timesheet_id', sa.Integer(), nullable=False),
        sa.Column('award_id', sa.Integer(), nullable=True),
        sa.Column('classification_id', sa.Integer(), nullable=True),
        sa.Column('award_code', sa.String(20), nullable=True),
        sa.Column('award_name', sa.String(200), nullable=True),
        sa.Column('classification_name', sa.String(200), nullable=True),
        sa.Column('apprenticeship_year', sa.Integer(), nullable=True),
        sa.Column('mapping_version', sa.String(20), nullable=True),
        sa.Column('total_hours', sa.Numeric(10, 2), nullable=False),
        sa.Column('base_pay', sa.Numeric(12, 2), nullable=False),
        sa.Column('penalty_pay', sa.Numeric(12, 2), nullable=False),
        sa.Column('allowances_total', sa.Numeric(12, 2), nullable=False),
        sa.Column('gross_pay', sa.Numeric(12, 2), nullable=False),
        sa.Column('shift_count', sa.Integer(), nullable=False),
        sa.Column('skipped_shifts', sa.Integer(), nullable=False),
        sa.Column('shift_results', sa.JSON(), nullable=False),
        sa.Column('revision', sa.Integer(), nullable=False),
        sa.Column('calculated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['timesheet_id'], ['timesheets.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        op.f('ix_timesheet_calculations_timesheet_id'), 'timesheet_calculations', ['timesheet_id'], unique=True
    )

    op.create_table(
        'compliance_check_logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('award_code', sa.String(20), nullable=False),
        sa.Column('classification_code', sa.String(50), nullable=False),
        sa.Column('check_date', sa.Date(), nullable=False),
        sa.Column('requested_rate', sa.Numeric(12, 4), nullable=False),
        sa.Column('minimum_rate', sa.Numeric(10, 2), nullable=True),
        sa.Column('is_valid', sa.Boolean(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('request_payload', sa.JSON(), nullable=False),
        sa.Column('response_payload', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_compliance_check_logs_award_code'), 'compliance_check_logs', ['award_code'], unique=False)
    op.create_index(
        op.f('ix_compliance_check_logs_classification_code'), 'compliance_check_logs', ['classification_code'],
        unique=False,
    )
    op.create_index(op.f('ix_compliance_check_logs_check_date'), 'compliance_check_logs', ['check_date'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_compliance_check_logs_check_date'), table_name='compliance_check_logs')
    op.drop_index(op.f('ix_compliance_check_logs_classification_code'), table_name='compliance_check_logs')
    op.drop_index(op.f('ix_compliance_check_logs_award_code'), table_name='compliance_check_logs')
    op.drop_table('compliance_check_logs')
    op.drop_index(op.f('ix_timesheet_calculations_timesheet_id'), table_name='timesheet_calculations')
    op.drop_table('timesheet_calculations')
    op.drop_index(op.f('ix_timesheet_shifts_timesheet_id'), table_name='timesheet_shifts')
    op.drop_table('timesheet_shifts')
    op.drop_index(op.f('ix_timesheets_apprentice_id'), table_name='timesheets')
    op.drop_table('timesheets')
    op.drop_index(op.f('ix_placements_apprentice_id'), table_name='placements')
    op.drop_table('placements')
    op.drop_table('apprentices')
    op.drop_table('trade_award_mappings')
    op.drop_index(op.f('ix_public_holidays_date'), table_name='public_holidays')
    op.drop_index(op.f('ix_public_holidays_jurisdiction'), table_name='public_holidays')
    op.drop_table('public_holidays')
    op.drop_index(op.f('ix_allowance_rules_award_id'), table_name='allowance_rules')
    op.drop_table('allowance_rules')
    op.drop_index(op.f('ix_penalty_rules_award_id'), table_name='penalty_rules')
    op.drop_table('penalty_rules')
    op.drop_index(op.f('ix_pay_rates_classification_id'), table_name='pay_rates')
    op.drop_table('pay_rates')
    op.drop_index(op.f('ix_classifications_award_id'), table_name='classifications')
    op.drop_table('classifications')
    op.drop_index(op.f('ix_awards_code'), table_name='awards')
    op.drop_table('awards')
