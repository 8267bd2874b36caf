"""Aggregation package: derived views and the budget spent side effect."""

from finance_tracker.aggregation.engine import (
    FALLBACK_CATEGORY_COLOR,
    FALLBACK_CATEGORY_LABEL,
    add_money,
    budget_overview,
    budget_status,
    build_dashboard,
    category_breakdown,
    daily_spending_suggestion,
    days_remaining_in_month,
    days_remaining_in_period,
    goal_progress,
    monthly_evolution,
    sum_by_type,
)
from finance_tracker.aggregation.spent import (
    apply_expense_to_budgets,
    budgets_for_expense,
    find_spent_overflow,
)

__all__ = [
    "FALLBACK_CATEGORY_COLOR",
    "FALLBACK_CATEGORY_LABEL",
    "add_money",
    "apply_expense_to_budgets",
    "budgets_for_expense",
    "budget_overview",
    "budget_status",
    "build_dashboard",
    "category_breakdown",
    "daily_spending_suggestion",
    "days_remaining_in_month",
    "days_remaining_in_period",
    "find_spent_overflow",
    "goal_progress",
    "monthly_evolution",
    "sum_by_type",
]
