"""
Tests for the aggregation engine.

All functions under test are pure, so records are built directly.
"""

from datetime import date, datetime
from decimal import Decimal

from finance_tracker.aggregation import (
    FALLBACK_CATEGORY_COLOR,
    FALLBACK_CATEGORY_LABEL,
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
from finance_tracker.models.ledger import Budget, Category, Goal, Transaction


_counter = iter(range(1, 10_000))


def tx(amount, type="expense", category_id="cat-1", when=datetime(2024, 3, 15)):
    return Transaction(
        id=f"tx-{next(_counter)}",
        amount=amount,
        type=type,
        category_id=category_id,
        date=when,
    )


def budget(amount="100.00", spent="0.00", month=3, year=2024, category_id="cat-1"):
    return Budget(
        id=f"budget-{next(_counter)}",
        name="Budget",
        amount=amount,
        spent=spent,
        category_id=category_id,
        month=month,
        year=year,
    )


class TestDashboard:
    """Tests for the dashboard summary."""

    def test_sum_by_type(self):
        """Test income and expense totals."""
        income, expenses = sum_by_type([
            tx("1000", type="income"),
            tx("30.10"),
            tx("19.90"),
        ])
        assert income == Decimal("1000.00")
        assert expenses == Decimal("50.00")

    def test_balance_is_income_minus_expenses(self):
        """Test the dashboard balance."""
        current = [tx("100", type="income"), tx("130")]
        summary = build_dashboard(current, current, [])
        assert summary.balance == Decimal("-30.00")

    def test_totals_from_current_month_recent_from_all_time(self):
        """Test that totals and recent activity use different windows."""
        old = [tx("5", when=datetime(2023, m, 1)) for m in range(1, 8)]
        current = [tx("40", when=datetime(2024, 3, 1))]
        summary = build_dashboard(current, old + current, [budget()])

        assert summary.expenses == Decimal("40.00")
        assert len(summary.recent_transactions) == 5
        assert summary.recent_transactions[0].date == datetime(2024, 3, 1)
        dates = [t.date for t in summary.recent_transactions]
        assert dates == sorted(dates, reverse=True)
        assert len(summary.budgets) == 1

    def test_dashboard_money_serializes_as_strings(self):
        """Test the dashboard wire format."""
        summary = build_dashboard([tx("12.5", type="income")], [], [])
        data = summary.model_dump(mode="json", by_alias=True)
        assert data["income"] == "12.50"
        assert data["expenses"] == "0.00"
        assert data["recentTransactions"] == []


class TestDailySuggestion:
    """Tests for the daily spending suggestion."""

    def test_days_remaining_includes_today(self):
        """Test that today counts as a remaining day."""
        assert days_remaining_in_month(date(2024, 3, 31)) == 1
        assert days_remaining_in_month(date(2024, 3, 1)) == 31
        assert days_remaining_in_month(date(2024, 2, 20)) == 10

    def test_days_remaining_in_other_periods(self):
        """Test past and future budget periods."""
        today = date(2024, 3, 10)
        assert days_remaining_in_period(2024, 2, today) == 0
        assert days_remaining_in_period(2024, 4, today) == 30
        assert days_remaining_in_period(2024, 3, today) == 22

    def test_suggestion(self):
        """Test remaining divided by days remaining."""
        assert daily_spending_suggestion(Decimal("100.00"), 3) == Decimal("33.33")

    def test_no_suggestion_when_overspent_or_no_days(self):
        """Test that the suggestion is absent when meaningless."""
        assert daily_spending_suggestion(Decimal("0.00"), 10) is None
        assert daily_spending_suggestion(Decimal("-5.00"), 10) is None
        assert daily_spending_suggestion(Decimal("50.00"), 0) is None

    def test_budget_status(self):
        """Test per-budget percentage and remaining."""
        status = budget_status(budget(amount="200", spent="50"), date(2024, 3, 31))
        assert status.percentage == 25.0
        assert status.remaining == Decimal("150.00")
        assert status.days_remaining == 1
        assert status.daily_suggestion == Decimal("150.00")

    def test_budget_overview_totals(self):
        """Test that the overview sums every budget of the period."""
        overview = budget_overview(
            [budget(amount="100", spent="30"), budget(amount="50", spent="60")],
            month=3,
            year=2024,
            today=date(2024, 3, 22),
        )
        assert overview.total_budget == Decimal("150.00")
        assert overview.total_spent == Decimal("90.00")
        assert overview.remaining == Decimal("60.00")
        assert overview.days_remaining == 10
        assert overview.daily_suggestion == Decimal("6.00")
        assert overview.budgets[1].daily_suggestion is None


class TestMonthlyEvolution:
    """Tests for the monthly evolution series."""

    def test_keeps_most_recent_six_months_ascending(self):
        """Test 8 distinct months yield the latest 6, oldest first."""
        transactions = [
            tx("10", when=datetime(2023, 11, 3)),
            tx("10", when=datetime(2023, 12, 3)),
            tx("10", when=datetime(2024, 1, 3)),
            tx("10", when=datetime(2024, 2, 3)),
            tx("10", when=datetime(2024, 3, 3)),
            tx("10", when=datetime(2024, 4, 3)),
            tx("10", when=datetime(2024, 5, 3)),
            tx("10", when=datetime(2024, 6, 3)),
        ]
        series = monthly_evolution(list(reversed(transactions)))

        assert [point.label for point in series] == [
            "2024-01", "2024-02", "2024-03", "2024-04", "2024-05", "2024-06",
        ]

    def test_sums_income_and_expenses_per_month(self):
        """Test per-month totals."""
        series = monthly_evolution([
            tx("100", type="income", when=datetime(2024, 3, 1)),
            tx("20", when=datetime(2024, 3, 2)),
            tx("5.55", when=datetime(2024, 3, 30)),
        ])
        assert len(series) == 1
        assert series[0].income == Decimal("100.00")
        assert series[0].expenses == Decimal("25.55")

    def test_empty_ledger(self):
        """Test that no transactions means an empty series."""
        assert monthly_evolution([]) == []


class TestCategoryBreakdown:
    """Tests for the expense breakdown."""

    def test_top_five_descending(self):
        """Test 7 categories yield the 5 largest, descending."""
        categories = [
            Category(id=f"cat-{i}", name=f"Cat {i}", icon="circle", color="#000000")
            for i in range(1, 8)
        ]
        transactions = [tx(str(i * 10), category_id=f"cat-{i}") for i in range(1, 8)]
        transactions.append(tx("1000", type="income", category_id="cat-1"))

        breakdown = category_breakdown(transactions, categories)

        assert [item.category_id for item in breakdown] == [
            "cat-7", "cat-6", "cat-5", "cat-4", "cat-3",
        ]
        assert breakdown[0].total == Decimal("70.00")
        assert breakdown[0].label == "Cat 7"

    def test_deleted_category_uses_fallback(self):
        """Test that dangling ids render with the fallback label and colour."""
        breakdown = category_breakdown([tx("10", category_id="gone")], [])
        assert breakdown[0].label == FALLBACK_CATEGORY_LABEL
        assert breakdown[0].color == FALLBACK_CATEGORY_COLOR


class TestGoalProgress:
    """Tests for goal progress."""

    def _goal(self, current="250", target="1000", when=datetime(2024, 12, 31)):
        return Goal(
            id="goal-1",
            name="Trip",
            target_amount=target,
            current_amount=current,
            target_date=when,
        )

    def test_progress(self):
        """Test percentage, remaining and months remaining."""
        progress = goal_progress(self._goal(), datetime(2024, 12, 1))
        assert progress.percentage == 25.0
        assert progress.remaining == Decimal("750.00")
        assert progress.months_remaining == 1

    def test_past_goal_has_no_months_left(self):
        """Test that an overdue goal never reports negative months."""
        progress = goal_progress(self._goal(), datetime(2025, 6, 1))
        assert progress.months_remaining == 0

    def test_overfunded_goal_has_nothing_remaining(self):
        """Test that remaining never goes below zero."""
        progress = goal_progress(self._goal(current="1200"), datetime(2024, 1, 1))
        assert progress.remaining == Decimal("0.00")
        assert progress.percentage == 120.0
