"""
Derived View Models

Read-only shapes produced by the aggregation engine. Nothing here is ever
stored; every view is recomputed from the ledger on each request.
"""

from typing import Optional

from pydantic import Field

from finance_tracker.models.ledger import (
    Budget,
    Goal,
    LedgerModel,
    Money,
    Transaction,
)


class DashboardSummary(LedgerModel):
    """
    Current-month totals plus the most recent activity.

    income, expenses and balance cover the current calendar month only;
    recent_transactions is drawn from the whole ledger.
    """

    balance: Money
    income: Money
    expenses: Money
    recent_transactions: list[Transaction] = Field(default_factory=list)
    budgets: list[Budget] = Field(default_factory=list)


class MonthlyEvolutionPoint(LedgerModel):
    """Income and expenses for one (year, month) bucket."""

    year: int
    month: int = Field(..., ge=1, le=12)
    label: str = Field(..., description="YYYY-MM")
    income: Money
    expenses: Money


class CategoryBreakdownItem(LedgerModel):
    """Total expenses attributed to one category."""

    category_id: Optional[str] = None
    label: str
    color: str
    total: Money


class BudgetStatus(LedgerModel):
    budget: Budget
    percentage: float = Field(..., ge=0, description="Spent as a share of amount")
    remaining: Money
    days_remaining: int = Field(..., ge=0)
    daily_suggestion: Optional[Money] = None


class BudgetOverview(LedgerModel):
    """Totals across every budget of one month."""

    month: int = Field(..., ge=1, le=12)
    year: int
    total_budget: Money
    total_spent: Money
    remaining: Money
    days_remaining: int = Field(..., ge=0)
    daily_suggestion: Optional[Money] = None
    budgets: list[BudgetStatus] = Field(default_factory=list)


class StatisticsSummary(LedgerModel):
    monthly_evolution: list[MonthlyEvolutionPoint] = Field(default_factory=list)
    category_breakdown: list[CategoryBreakdownItem] = Field(default_factory=list)
    total_transactions: int = Field(..., ge=0)
    active_categories: int = Field(..., ge=0)


class GoalProgress(LedgerModel):
    goal: Goal
    percentage: float = Field(..., ge=0)
    remaining: Money
    months_remaining: int = Field(..., ge=0)
