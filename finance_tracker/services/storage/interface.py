"""
Abstract Storage Interface

DESIGN DECISION: We define one abstract interface for ledger storage.
This allows us to:
1. Serve the HTTP API from process memory
2. Serve the offline mirror from a device-local file
3. Keep every business rule (validation, budget spent updates, dashboards)
   in the service layer, written once against this interface

The interface is intentionally simple - we're not building a full ORM.
Just keyed collections with create/read/update/delete and a few filters.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from finance_tracker.models.ledger import (
    Budget,
    BudgetCreate,
    Category,
    CategoryCreate,
    Goal,
    GoalCreate,
    Transaction,
    TransactionCreate,
    TransactionFilters,
    User,
)


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger storage operations.

    Any storage implementation (memory, local file, ...) must implement
    these methods. update_* methods return None when the id is unknown;
    delete_* methods return whether a record existed.
    """

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @abstractmethod
    async def initialize(self) -> None:
        """Load or seed the store. Safe to call more than once."""
        pass

    @abstractmethod
    async def reset(self) -> None:
        """Discard every record. The next operation re-initializes."""
        pass

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[User]:
        pass

    @abstractmethod
    async def create_user(self, username: str, password: str) -> User:
        pass

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    @abstractmethod
    async def list_categories(self, user_id: str) -> list[Category]:
        pass

    @abstractmethod
    async def get_category(self, category_id: str) -> Optional[Category]:
        pass

    @abstractmethod
    async def create_category(self, data: CategoryCreate, user_id: str) -> Category:
        pass

    @abstractmethod
    async def delete_category(self, category_id: str) -> bool:
        pass

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    @abstractmethod
    async def list_transactions(
        self,
        user_id: str,
        filters: Optional[TransactionFilters] = None,
    ) -> list[Transaction]:
        """
        List a user's transactions.

        Returns:
            Matching transactions, most recent date first
        """
        pass

    @abstractmethod
    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        pass

    @abstractmethod
    async def create_transaction(
        self,
        data: TransactionCreate,
        user_id: str,
    ) -> Transaction:
        """
        Store a new transaction.

        Only stores the record. Budget side effects belong to the caller.
        """
        pass

    @abstractmethod
    async def update_transaction(
        self,
        transaction_id: str,
        changes: dict[str, Any],
    ) -> Optional[Transaction]:
        """Merge changes into an existing transaction, preserving other fields."""
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: str) -> bool:
        pass

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    @abstractmethod
    async def list_budgets(
        self,
        user_id: str,
        month: Optional[int] = None,
        year: Optional[int] = None,
        category_id: Optional[str] = None,
    ) -> list[Budget]:
        pass

    @abstractmethod
    async def get_budget(self, budget_id: str) -> Optional[Budget]:
        pass

    @abstractmethod
    async def create_budget(self, data: BudgetCreate, user_id: str) -> Budget:
        """Store a new budget with spent = 0."""
        pass

    @abstractmethod
    async def update_budget(
        self,
        budget_id: str,
        changes: dict[str, Any],
    ) -> Optional[Budget]:
        pass

    @abstractmethod
    async def delete_budget(self, budget_id: str) -> bool:
        pass

    # -------------------------------------------------------------------------
    # Goals
    # -------------------------------------------------------------------------

    @abstractmethod
    async def list_goals(self, user_id: str) -> list[Goal]:
        pass

    @abstractmethod
    async def get_goal(self, goal_id: str) -> Optional[Goal]:
        pass

    @abstractmethod
    async def create_goal(self, data: GoalCreate, user_id: str) -> Goal:
        """Store a new goal with current_amount = 0."""
        pass

    @abstractmethod
    async def update_goal(
        self,
        goal_id: str,
        changes: dict[str, Any],
    ) -> Optional[Goal]:
        pass

    @abstractmethod
    async def delete_goal(self, goal_id: str) -> bool:
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type.capitalize()} not found: {entity_id}")
