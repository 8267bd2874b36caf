"""
Budget Spent Accumulation

The one side effect in the ledger: creating an expense in a category
increments `spent` on every budget of that category for the expense's
month and year.

DESIGN DECISION: spent is maintained incrementally at creation time only.
Editing or deleting a transaction does not touch any budget. This routine
is the single implementation, used whichever storage backs the service.

The service calls find_spent_overflow() before storing the transaction, so
the increment below never fails half way: either the transaction is
rejected up front, or every matching budget can absorb it.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from finance_tracker.aggregation.engine import add_money
from finance_tracker.audit.logger import AuditLogger
from finance_tracker.models.ledger import (
    MAX_MONEY,
    Budget,
    Transaction,
    TransactionType,
    format_money,
)
from finance_tracker.services.storage.interface import LedgerStorageInterface


async def budgets_for_expense(
    storage: LedgerStorageInterface,
    user_id: Optional[str],
    transaction_type: TransactionType,
    category_id: Optional[str],
    when: datetime,
) -> list[Budget]:
    """
    Budgets an expense would count against.

    A budget matches when it has the same owner and category and its
    month/year equal the expense date's. Uniqueness is not enforced, so
    several budgets may match. Income and uncategorized expenses match
    nothing.
    """
    if transaction_type != TransactionType.EXPENSE or not category_id:
        return []

    return await storage.list_budgets(
        user_id,
        month=when.month,
        year=when.year,
        category_id=category_id,
    )


async def find_spent_overflow(
    storage: LedgerStorageInterface,
    user_id: Optional[str],
    transaction_type: TransactionType,
    category_id: Optional[str],
    when: datetime,
    amount: Decimal,
) -> Optional[Budget]:
    """First matching budget whose spent would exceed MAX_MONEY, if any."""
    matching = await budgets_for_expense(storage, user_id, transaction_type, category_id, when)
    for budget in matching:
        if add_money(budget.spent, amount) > MAX_MONEY:
            return budget
    return None


async def apply_expense_to_budgets(
    storage: LedgerStorageInterface,
    transaction: Transaction,
    audit_logger: Optional[AuditLogger] = None,
) -> list[Budget]:
    """
    Add a newly created expense to every matching budget.

    Returns:
        The updated budgets (empty if nothing matched)
    """
    matching = await budgets_for_expense(
        storage,
        transaction.user_id,
        transaction.type,
        transaction.category_id,
        transaction.date,
    )

    updated = []
    for budget in matching:
        new_spent = add_money(budget.spent, transaction.amount)
        result = await storage.update_budget(budget.id, {"spent": new_spent})
        if result is None:
            # Deleted between listing and update
            continue
        updated.append(result)

        if audit_logger:
            await audit_logger.log_budget_spent_updated(
                budget_id=budget.id,
                previous=format_money(budget.spent),
                current=format_money(result.spent),
                transaction_id=transaction.id,
            )

    return updated
