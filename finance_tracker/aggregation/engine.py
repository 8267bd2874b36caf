"""
Aggregation Engine

DESIGN DECISION: Every derived view is a pure function over a snapshot of
ledger records. Nothing is cached or pre-aggregated; the service re-reads
the ledger and calls these on each request, so views always reflect the
latest writes.

All arithmetic is Decimal. Results are quantized to cents before they
leave this module.
"""

import calendar
import math
from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from finance_tracker.models.ledger import (
    Budget,
    Category,
    Goal,
    Transaction,
    TransactionType,
    quantize_money,
)
from finance_tracker.models.views import (
    BudgetOverview,
    BudgetStatus,
    CategoryBreakdownItem,
    DashboardSummary,
    GoalProgress,
    MonthlyEvolutionPoint,
)


ZERO = Decimal("0.00")

FALLBACK_CATEGORY_LABEL = "Uncategorized"
FALLBACK_CATEGORY_COLOR = "#666666"

GOAL_MONTH = timedelta(days=30)


def add_money(*amounts: Decimal) -> Decimal:
    """Sum amounts and quantize the result to cents."""
    return quantize_money(sum(amounts, ZERO))


def _percentage(part: Decimal, whole: Decimal) -> float:
    if whole <= 0:
        return 0.0
    return float((part / whole * 100).quantize(Decimal("0.01")))


# =============================================================================
# DASHBOARD
# =============================================================================

def sum_by_type(transactions: Iterable[Transaction]) -> tuple[Decimal, Decimal]:
    """
    Total income and expenses.

    Returns:
        (income, expenses)
    """
    income = ZERO
    expenses = ZERO
    for transaction in transactions:
        if transaction.type == TransactionType.INCOME:
            income += transaction.amount
        else:
            expenses += transaction.amount
    return quantize_money(income), quantize_money(expenses)


def build_dashboard(
    current_month_transactions: list[Transaction],
    all_transactions: list[Transaction],
    budgets: list[Budget],
    recent_limit: int = 5,
) -> DashboardSummary:
    """
    Build the dashboard summary.

    Totals come from the current month only; recent transactions come
    from the whole ledger, newest first.
    """
    income, expenses = sum_by_type(current_month_transactions)
    recent = sorted(all_transactions, key=lambda t: t.date, reverse=True)[:recent_limit]

    return DashboardSummary(
        balance=income - expenses,
        income=income,
        expenses=expenses,
        recent_transactions=recent,
        budgets=budgets,
    )


# =============================================================================
# BUDGETS
# =============================================================================

def days_remaining_in_month(today: date) -> int:
    """Calendar days left in today's month, today included."""
    days_in_month = calendar.monthrange(today.year, today.month)[1]
    return days_in_month - today.day + 1


def days_remaining_in_period(year: int, month: int, today: date) -> int:
    """
    Days left in a budget period relative to today.

    Past months have none left, future months have all of theirs.
    """
    if (year, month) < (today.year, today.month):
        return 0
    if (year, month) > (today.year, today.month):
        return calendar.monthrange(year, month)[1]
    return days_remaining_in_month(today)


def daily_spending_suggestion(
    remaining: Decimal,
    days_remaining: int,
) -> Optional[Decimal]:
    """
    How much can be spent per day without exceeding the budget.

    Returns None when there is nothing left to spend or no days left.
    """
    if days_remaining <= 0 or remaining <= 0:
        return None
    return quantize_money(remaining / days_remaining)


def budget_status(budget: Budget, today: date) -> BudgetStatus:
    remaining = quantize_money(budget.amount - budget.spent)
    days = days_remaining_in_period(budget.year, budget.month, today)
    return BudgetStatus(
        budget=budget,
        percentage=_percentage(budget.spent, budget.amount),
        remaining=remaining,
        days_remaining=days,
        daily_suggestion=daily_spending_suggestion(remaining, days),
    )


def budget_overview(
    budgets: list[Budget],
    month: int,
    year: int,
    today: date,
) -> BudgetOverview:
    """Combine every budget of a period into one overview."""
    total_budget = add_money(*(b.amount for b in budgets))
    total_spent = add_money(*(b.spent for b in budgets))
    remaining = total_budget - total_spent
    days = days_remaining_in_period(year, month, today)

    return BudgetOverview(
        month=month,
        year=year,
        total_budget=total_budget,
        total_spent=total_spent,
        remaining=remaining,
        days_remaining=days,
        daily_suggestion=daily_spending_suggestion(remaining, days),
        budgets=[budget_status(b, today) for b in budgets],
    )


# =============================================================================
# STATISTICS
# =============================================================================

def monthly_evolution(
    transactions: Iterable[Transaction],
    months: int = 6,
) -> list[MonthlyEvolutionPoint]:
    """
    Income and expenses per (year, month), keeping the most recent
    `months` months present in the data, oldest first.
    """
    buckets: dict[tuple[int, int], list[Decimal]] = defaultdict(lambda: [ZERO, ZERO])
    for transaction in transactions:
        bucket = buckets[(transaction.date.year, transaction.date.month)]
        if transaction.type == TransactionType.INCOME:
            bucket[0] += transaction.amount
        else:
            bucket[1] += transaction.amount

    keys = sorted(buckets)[-months:] if months > 0 else []
    return [
        MonthlyEvolutionPoint(
            year=year,
            month=month,
            label=f"{year:04d}-{month:02d}",
            income=quantize_money(buckets[(year, month)][0]),
            expenses=quantize_money(buckets[(year, month)][1]),
        )
        for year, month in keys
    ]


def category_breakdown(
    transactions: Iterable[Transaction],
    categories: Iterable[Category],
    limit: int = 5,
) -> list[CategoryBreakdownItem]:
    """
    Expense totals per category, largest first, top `limit` only.

    Transactions without a category, or whose category was deleted, are
    labelled with the fallback label and colour.
    """
    by_id = {category.id: category for category in categories}

    totals: dict[Optional[str], Decimal] = defaultdict(lambda: ZERO)
    for transaction in transactions:
        if transaction.type != TransactionType.EXPENSE:
            continue
        totals[transaction.category_id] += transaction.amount

    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)[:limit]

    items = []
    for category_id, total in ranked:
        category = by_id.get(category_id) if category_id else None
        items.append(
            CategoryBreakdownItem(
                category_id=category_id,
                label=category.name if category else FALLBACK_CATEGORY_LABEL,
                color=category.color if category else FALLBACK_CATEGORY_COLOR,
                total=quantize_money(total),
            )
        )
    return items


# =============================================================================
# GOALS
# =============================================================================

def goal_progress(goal: Goal, now: datetime) -> GoalProgress:
    """
    Progress towards a savings goal.

    Months remaining count 30-day months, rounded up, never negative.
    """
    remaining = max(quantize_money(goal.target_amount - goal.current_amount), ZERO)
    months = math.ceil((goal.target_date - now) / GOAL_MONTH)

    return GoalProgress(
        goal=goal,
        percentage=_percentage(goal.current_amount, goal.target_amount),
        remaining=remaining,
        months_remaining=max(0, months),
    )
