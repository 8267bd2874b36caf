"""
Data Models Package

This package contains all Pydantic models used in the Finance Tracker.
All data flowing through the ledger must conform to these schemas.
"""

from finance_tracker.models.ledger import (
    DEFAULT_USER_ID,
    OTHERS_CATEGORY_ID,
    Budget,
    BudgetCreate,
    Category,
    CategoryCreate,
    CategoryIcon,
    Goal,
    GoalCreate,
    GoalUpdate,
    Transaction,
    TransactionCreate,
    TransactionFilters,
    TransactionType,
    User,
    ValidationIssue,
    format_money,
    parse_money,
    quantize_money,
)
from finance_tracker.models.views import (
    BudgetOverview,
    BudgetStatus,
    CategoryBreakdownItem,
    DashboardSummary,
    GoalProgress,
    MonthlyEvolutionPoint,
    StatisticsSummary,
)
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "DEFAULT_USER_ID",
    "OTHERS_CATEGORY_ID",
    "Budget",
    "BudgetCreate",
    "Category",
    "CategoryCreate",
    "CategoryIcon",
    "Goal",
    "GoalCreate",
    "GoalUpdate",
    "Transaction",
    "TransactionCreate",
    "TransactionFilters",
    "TransactionType",
    "User",
    "ValidationIssue",
    "format_money",
    "parse_money",
    "quantize_money",
    # Views
    "BudgetOverview",
    "BudgetStatus",
    "CategoryBreakdownItem",
    "DashboardSummary",
    "GoalProgress",
    "MonthlyEvolutionPoint",
    "StatisticsSummary",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
