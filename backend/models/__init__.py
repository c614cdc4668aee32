from models.currency import Currency
from models.users import User
from models.tenant import Tenant
from models.exchange_rate import ExchangeRate
from models.journal_entry import JournalEntry, EntryType
from models.account import Account, AccountType
from models.category import Category, CategoryType
from models.tag import Tag
from models.transaction import Transaction, TransactionType
from models.budget import Budget, BudgetLineItem, BudgetType, FrequencyType
from models.recurring_transaction import RecurringTransaction, RecurringType, FrequencyUnit
from models.custom_report import CustomReport
from models.dashboard import Dashboard, DashboardWidget
from models.rbac import Permission, Role, UserTenantRole, role_permissions
from models.audit_log import AuditLog

__all__ = ['Account', 'AccountType', 'AuditLog', 'Budget', 'BudgetLineItem', 'BudgetType', 'Category', 'CategoryType', 'Currency', 'CustomReport', 'Dashboard', 'DashboardWidget', 'EntryType', 'ExchangeRate', 'FrequencyType', 'FrequencyUnit', 'JournalEntry', 'Permission', 'RecurringTransaction', 'RecurringType', 'Role', 'Tag', 'Tenant', 'Transaction', 'TransactionType', 'User', 'UserTenantRole', 'role_permissions',]
