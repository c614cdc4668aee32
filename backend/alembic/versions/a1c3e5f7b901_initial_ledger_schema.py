"""initial ledger schema

Revision ID: a1c3e5f7b901
Revises:
Create Date: 2026-10-19 10:12:44.518302

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'a1c3e5f7b901'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('updated_by', sa.Integer(), nullable=True),
    ]


def upgrade() -> None:
    account_type = sa.Enum('ASSET', 'LIABILITY', 'EQUITY', 'REVENUE', 'EXPENSE', name='account_type')
    entry_type = sa.Enum('DEBIT', 'CREDIT', name='entry_type')
    transaction_type = sa.Enum('INCOME', 'EXPENSE', 'TRANSFER', 'JOURNAL_ENTRY', 'OPENING_BALANCE', 'ADJUSTMENT',
                               name='transaction_type')
    category_type = sa.Enum('INCOME', 'EXPENSE', 'TRANSFER', 'INVESTMENT', 'OTHER', name='category_type')
    budget_type = sa.Enum('MONTHLY', 'ANNUAL', 'CUSTOM', name='budget_type')
    frequency_type = sa.Enum('MONTHLY', 'ANNUALLY', 'ONCE', 'QUARTERLY', name='frequency_type')
    recurring_type = sa.Enum('INCOME', 'EXPENSE', 'TRANSFER', name='recurring_type')
    frequency_unit = sa.Enum('DAY', 'WEEK', 'MONTH', 'YEAR', name='frequency_unit')

    op.create_table(
        'currencies',
        sa.Column('code', sa.String(3), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        sa.Column('symbol', sa.String(10), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('auth_provider_type', sa.String(50), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'tenants',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        sa.Column('industry', sa.String(100), nullable=True),
        sa.Column('base_currency_code', sa.String(3), sa.ForeignKey('currencies.code'), nullable=False),
        sa.Column('fiscal_year_end_month', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('fiscal_year_end_month >= 1 AND fiscal_year_end_month <= 12',
                           name='check_fiscal_year_end_month'),
    )

    op.create_table(
        'exchange_rates',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=True, index=True),
        sa.Column('base_currency_code', sa.String(3), sa.ForeignKey('currencies.code'), nullable=False),
        sa.Column('target_currency_code', sa.String(3), sa.ForeignKey('currencies.code'), nullable=False),
        sa.Column('rate', sa.Numeric(18, 6), sa.CheckConstraint('rate > 0'), nullable=False),
        sa.Column('rate_date', sa.Date(), nullable=False),
        sa.Column('source', sa.String(100), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('tenant_id', 'base_currency_code', 'target_currency_code', 'rate_date',
                            name='_tenant_rate_pair_date_uc'),
    )
    op.create_index('idx_exchange_rates_base_target_date', 'exchange_rates',
                    ['base_currency_code', 'target_currency_code', 'rate_date'])

    op.create_table(
        'accounts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('account_code', sa.String(50), nullable=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('account_type', account_type, nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('currency_code', sa.String(3), sa.ForeignKey('currencies.code'), nullable=False, index=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('tenant_id', 'name', name='_tenant_account_name_uc'),
        sa.UniqueConstraint('tenant_id', 'account_code', name='_tenant_account_code_uc'),
    )

    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('type', category_type, nullable=False),
        sa.Column('parent_category_id', sa.Integer(), sa.ForeignKey('categories.id'), nullable=True, index=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('tenant_id', 'name', name='_tenant_category_name_uc'),
    )

    op.create_table(
        'tags',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('tenant_id', 'name', name='_tenant_tag_name_uc'),
    )

    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('transaction_date', sa.Date(), nullable=False, index=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('type', transaction_type, nullable=False, index=True),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('categories.id'), nullable=True, index=True),
        sa.Column('tag_ids', sa.JSON(), nullable=True),
        sa.Column('amount', sa.Numeric(18, 2), nullable=False),
        sa.Column('currency_code', sa.String(3), sa.ForeignKey('currencies.code'), nullable=False),
        sa.Column('is_reconciled', sa.Boolean(), nullable=False),
        sa.Column('reconciliation_date', sa.Date(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('source_document_url', sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'journal_entries',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('transaction_id', sa.Integer(), sa.ForeignKey('transactions.id'), nullable=False, index=True),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('accounts.id'), nullable=False, index=True),
        sa.Column('entry_type', entry_type, nullable=False),
        sa.Column('amount', sa.Numeric(18, 2), sa.CheckConstraint('amount >= 0'), nullable=False),
        sa.Column('currency_code', sa.String(3), sa.ForeignKey('currencies.code'), nullable=False),
        sa.Column('exchange_rate', sa.Numeric(18, 6), nullable=True),
        sa.Column('converted_amount', sa.Numeric(18, 2), nullable=True),
        sa.Column('memo', sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('transaction_id', 'account_id', 'entry_type', name='_transaction_account_entry_type_uc'),
    )

    op.create_table(
        'budgets',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('budget_type', budget_type, nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deleted_by', sa.Integer(), nullable=True),
        sa.UniqueConstraint('tenant_id', 'name', name='_tenant_budget_name_uc'),
        sa.CheckConstraint('end_date >= start_date', name='check_budget_date_range'),
    )

    op.create_table(
        'budget_line_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('budget_id', sa.Integer(), sa.ForeignKey('budgets.id'), nullable=False, index=True),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('categories.id'), nullable=True, index=True),
        sa.Column('amount', sa.Numeric(18, 2), sa.CheckConstraint('amount >= 0'), nullable=False),
        sa.Column('frequency_type', frequency_type, nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('budget_id', 'category_id', name='_budget_category_uc'),
    )

    op.create_table(
        'recurring_transactions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('type', recurring_type, nullable=False),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('categories.id'), nullable=True),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('accounts.id'), nullable=False),
        sa.Column('counter_account_id', sa.Integer(), sa.ForeignKey('accounts.id'), nullable=False),
        sa.Column('amount', sa.Numeric(18, 2), sa.CheckConstraint('amount > 0'), nullable=False),
        sa.Column('currency_code', sa.String(3), sa.ForeignKey('currencies.code'), nullable=False),
        sa.Column('frequency_value', sa.Integer(), sa.CheckConstraint('frequency_value > 0'), nullable=False),
        sa.Column('frequency_unit', frequency_unit, nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('last_generated_date', sa.Date(), nullable=True),
        sa.Column('next_due_date', sa.Date(), nullable=True, index=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'custom_reports',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('report_type', sa.String(50), nullable=False),
        sa.Column('configuration', sa.JSON(), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('tenant_id', 'name', name='_tenant_report_name_uc'),
    )

    op.create_table(
        'dashboards',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_default', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'name', name='_user_dashboard_name_uc'),
    )

    op.create_table(
        'dashboard_widgets',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('dashboard_id', sa.Integer(), sa.ForeignKey('dashboards.id'), nullable=False, index=True),
        sa.Column('widget_type', sa.String(50), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('order_index', sa.Integer(), nullable=False),
        sa.Column('parameters', sa.JSON(), nullable=True),
        sa.Column('properties', sa.JSON(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'permissions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        'roles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_system_role', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        'role_permissions',
        sa.Column('role_id', sa.Integer(), sa.ForeignKey('roles.id'), primary_key=True),
        sa.Column('permission_id', sa.Integer(), sa.ForeignKey('permissions.id'), primary_key=True, index=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=True),
    )
    op.create_table(
        'user_tenant_roles',
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), primary_key=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), primary_key=True, index=True),
        sa.Column('role_id', sa.Integer(), sa.ForeignKey('roles.id'), primary_key=True, index=True),
        *_timestamps(),
    )

    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.Integer(), nullable=True, index=True),
        sa.Column('table_name', sa.String(), nullable=False),
        sa.Column('record_id', sa.Integer(), nullable=False),
        sa.Column('changed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('changed_by', sa.Integer(), nullable=True),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('old_values', sa.JSON(), nullable=True),
        sa.Column('new_values', sa.JSON(), nullable=True),
    )


def downgrade() -> None:
    for table in (
        'audit_log', 'user_tenant_roles', 'role_permissions', 'roles', 'permissions',
        'dashboard_widgets', 'dashboards', 'custom_reports', 'recurring_transactions',
        'budget_line_items', 'budgets', 'journal_entries', 'transactions', 'tags',
        'categories', 'accounts', 'exchange_rates', 'tenants', 'users', 'currencies',
    ):
        op.drop_table(table)
    for enum_name in (
        'frequency_unit', 'recurring_type', 'frequency_type', 'budget_type',
        'category_type', 'transaction_type', 'entry_type', 'account_type',
    ):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
