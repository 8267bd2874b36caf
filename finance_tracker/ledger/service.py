"""
Ledger Service

This module ties together storage, validation, aggregation and audit
logging, and defines every operation the API exposes.

DESIGN DECISION: The service is the only place business rules live:
- Payloads are validated here, never in storage
- Unknown ids become NotFoundError here
- The budget spent side effect is triggered here, once, after a
  transaction is stored, and only once every matching budget is known
  to have room for it
- Every mutation is audited

Both the HTTP server (memory storage) and the offline mirror (local file
storage) run this exact class, so their behaviour cannot diverge.
"""

from datetime import date, datetime
from typing import Any, Optional

from finance_tracker.aggregation import (
    apply_expense_to_budgets,
    budget_overview,
    build_dashboard,
    category_breakdown,
    find_spent_overflow,
    goal_progress,
    monthly_evolution,
)
from finance_tracker.audit import AuditLogger
from finance_tracker.config import AppSettings, get_settings
from finance_tracker.models.ledger import (
    MAX_MONEY,
    OTHERS_CATEGORY_ID,
    OTHERS_DESCRIPTION_MESSAGE,
    Budget,
    BudgetCreate,
    Category,
    CategoryCreate,
    Goal,
    GoalCreate,
    GoalUpdate,
    Transaction,
    TransactionCreate,
    TransactionFilters,
    ValidationIssue,
    format_money,
)
from finance_tracker.models.views import (
    BudgetOverview,
    DashboardSummary,
    GoalProgress,
    StatisticsSummary,
)
from finance_tracker.services.storage import LedgerStorageInterface, NotFoundError
from finance_tracker.validation import LedgerValidationError, validate_payload


class LedgerService:
    """
    Business layer over a LedgerStorageInterface.

    All records belong to a single configured user id; there is no
    multi-tenant isolation beyond that.
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._settings = settings or get_settings().app
        self._user_id = self._settings.default_user_id

    @property
    def storage(self) -> LedgerStorageInterface:
        return self._storage

    @property
    def user_id(self) -> str:
        return self._user_id

    async def _validate(self, model_cls, payload: Any, entity_type: str):
        try:
            return validate_payload(model_cls, payload, entity_type)
        except LedgerValidationError as e:
            await self._audit_logger.log_validation_failed(entity_type, e.issues_as_dicts())
            raise

    async def _reject(self, entity_type: str, issue: ValidationIssue) -> LedgerValidationError:
        await self._audit_logger.log_validation_failed(entity_type, [issue.model_dump()])
        return LedgerValidationError(entity_type, [issue])

    async def _not_found(self, entity_type: str, entity_id: str) -> NotFoundError:
        await self._audit_logger.log_not_found(entity_type, entity_id)
        return NotFoundError(entity_type, entity_id)

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def list_categories(self) -> list[Category]:
        return await self._storage.list_categories(self._user_id)

    async def create_category(self, payload: Any) -> Category:
        data = await self._validate(CategoryCreate, payload, "category")
        category = await self._storage.create_category(data, self._user_id)
        await self._audit_logger.log_created(
            "category",
            category.id,
            {"name": category.name, "icon": category.icon.value},
        )
        return category

    async def delete_category(self, category_id: str) -> None:
        """
        Delete a category.

        Transactions and budgets referencing it keep the dangling id.
        """
        if not await self._storage.delete_category(category_id):
            raise await self._not_found("category", category_id)
        await self._audit_logger.log_deleted("category", category_id)

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def list_transactions(
        self,
        filters: Optional[TransactionFilters] = None,
    ) -> list[Transaction]:
        """Transactions matching the filters, most recent first."""
        return await self._storage.list_transactions(self._user_id, filters)

    async def create_transaction(self, payload: Any) -> Transaction:
        """
        Record a transaction.

        Expenses with a category also increase `spent` on the matching
        budgets of the transaction's month.
        """
        data = await self._validate(TransactionCreate, payload, "transaction")
        if data.date is None:
            data = data.model_copy(update={"date": datetime.now()})

        overflowing = await find_spent_overflow(
            self._storage,
            self._user_id,
            data.type,
            data.category_id,
            data.date,
            data.amount,
        )
        if overflowing is not None:
            raise await self._reject(
                "transaction",
                ValidationIssue(
                    field="amount",
                    issue_type="budget_spent_overflow",
                    message=(
                        f"Amount would take spent on budget {overflowing.id} "
                        f"past {format_money(MAX_MONEY)}"
                    ),
                ),
            )

        transaction = await self._storage.create_transaction(data, self._user_id)
        await self._audit_logger.log_created(
            "transaction",
            transaction.id,
            {
                "type": transaction.type.value,
                "amount": str(transaction.amount),
                "category_id": transaction.category_id,
            },
        )

        await apply_expense_to_budgets(self._storage, transaction, self._audit_logger)
        return transaction

    async def update_transaction(self, transaction_id: str, payload: Any) -> Transaction:
        """
        Replace a transaction's fields.

        Fields omitted from the payload (e.g. date) keep their stored value,
        and the "Others" description rule is checked on the merged record.
        Budgets are NOT adjusted.
        """
        data = await self._validate(TransactionCreate, payload, "transaction")
        changes = data.model_dump(exclude_unset=True)
        if changes.get("date") is None:
            changes.pop("date", None)

        existing = await self._storage.get_transaction(transaction_id)
        if existing is None:
            raise await self._not_found("transaction", transaction_id)

        category_id = changes.get("category_id", existing.category_id)
        description = changes.get("description", existing.description)
        if category_id == OTHERS_CATEGORY_ID and not description:
            raise await self._reject(
                "transaction",
                ValidationIssue(
                    field="description",
                    issue_type="value_error",
                    message=OTHERS_DESCRIPTION_MESSAGE,
                ),
            )

        transaction = await self._storage.update_transaction(transaction_id, changes)
        if transaction is None:
            raise await self._not_found("transaction", transaction_id)

        await self._audit_logger.log_updated("transaction", transaction_id, list(changes))
        return transaction

    async def delete_transaction(self, transaction_id: str) -> None:
        """Delete a transaction. Budgets are NOT adjusted."""
        if not await self._storage.delete_transaction(transaction_id):
            raise await self._not_found("transaction", transaction_id)
        await self._audit_logger.log_deleted("transaction", transaction_id)

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    async def list_budgets(
        self,
        month: Optional[int] = None,
        year: Optional[int] = None,
        today: Optional[date] = None,
    ) -> list[Budget]:
        """Budgets of one month; defaults to the current month."""
        today = today or date.today()
        return await self._storage.list_budgets(
            self._user_id,
            month=month or today.month,
            year=year or today.year,
        )

    async def create_budget(self, payload: Any) -> Budget:
        data = await self._validate(BudgetCreate, payload, "budget")
        budget = await self._storage.create_budget(data, self._user_id)
        await self._audit_logger.log_created(
            "budget",
            budget.id,
            {
                "amount": str(budget.amount),
                "category_id": budget.category_id,
                "period": f"{budget.year:04d}-{budget.month:02d}",
            },
        )
        return budget

    async def delete_budget(self, budget_id: str) -> None:
        if not await self._storage.delete_budget(budget_id):
            raise await self._not_found("budget", budget_id)
        await self._audit_logger.log_deleted("budget", budget_id)

    async def budget_overview(
        self,
        month: Optional[int] = None,
        year: Optional[int] = None,
        today: Optional[date] = None,
    ) -> BudgetOverview:
        """Period totals with the daily spending suggestion."""
        today = today or date.today()
        month = month or today.month
        year = year or today.year
        budgets = await self._storage.list_budgets(self._user_id, month=month, year=year)
        return budget_overview(budgets, month, year, today)

    # -------------------------------------------------------------------------
    # Goals
    # -------------------------------------------------------------------------

    async def list_goals(self) -> list[Goal]:
        return await self._storage.list_goals(self._user_id)

    async def create_goal(self, payload: Any) -> Goal:
        data = await self._validate(GoalCreate, payload, "goal")
        goal = await self._storage.create_goal(data, self._user_id)
        await self._audit_logger.log_created(
            "goal",
            goal.id,
            {"target_amount": str(goal.target_amount)},
        )
        return goal

    async def update_goal(self, goal_id: str, payload: Any) -> Goal:
        """Apply a partial update; unspecified fields are preserved."""
        data = await self._validate(GoalUpdate, payload, "goal")
        changes = data.changes()

        goal = await self._storage.update_goal(goal_id, changes)
        if goal is None:
            raise await self._not_found("goal", goal_id)

        await self._audit_logger.log_updated("goal", goal_id, list(changes))
        return goal

    async def delete_goal(self, goal_id: str) -> None:
        if not await self._storage.delete_goal(goal_id):
            raise await self._not_found("goal", goal_id)
        await self._audit_logger.log_deleted("goal", goal_id)

    async def goal_progress(
        self,
        goal_id: str,
        now: Optional[datetime] = None,
    ) -> GoalProgress:
        goal = await self._storage.get_goal(goal_id)
        if goal is None:
            raise await self._not_found("goal", goal_id)
        return goal_progress(goal, now or datetime.now())

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    async def dashboard(self, today: Optional[date] = None) -> DashboardSummary:
        """
        Current-month income, expenses and balance, the most recent
        transactions across all time, and the current month's budgets.
        """
        today = today or date.today()
        current_month = await self._storage.list_transactions(
            self._user_id,
            TransactionFilters(month=today.month, year=today.year),
        )
        all_transactions = await self._storage.list_transactions(self._user_id)
        budgets = await self._storage.list_budgets(
            self._user_id,
            month=today.month,
            year=today.year,
        )
        return build_dashboard(
            current_month,
            all_transactions,
            budgets,
            recent_limit=self._settings.recent_transactions_limit,
        )

    async def statistics(self) -> StatisticsSummary:
        """Monthly evolution and expense breakdown over the whole ledger."""
        transactions = await self._storage.list_transactions(self._user_id)
        categories = await self._storage.list_categories(self._user_id)
        return StatisticsSummary(
            monthly_evolution=monthly_evolution(
                transactions,
                months=self._settings.evolution_months,
            ),
            category_breakdown=category_breakdown(
                transactions,
                categories,
                limit=self._settings.top_categories_limit,
            ),
            total_transactions=len(transactions),
            active_categories=len(categories),
        )
