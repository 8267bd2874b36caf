"""
Keyed Collection Storage

Shared implementation of LedgerStorageInterface over one dict per entity
type. Subclasses decide only three things:
1. How the collections are loaded (and whether defaults are seeded)
2. How a changed collection is persisted
3. How new ids are generated

Everything else (filtering, ordering, partial updates, defaults) lives
here once, so the server store and the offline mirror cannot drift apart.
"""

from abc import abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from finance_tracker.audit.logger import AuditLogger
from finance_tracker.models.audit import AuditEventBuilder
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
    Transaction,
    TransactionCreate,
    TransactionFilters,
    User,
)
from finance_tracker.services.storage.interface import (
    LedgerStorageInterface,
    StorageError,
)


ModelT = TypeVar("ModelT", bound=BaseModel)

# Collection name -> record model
COLLECTIONS: dict[str, type[BaseModel]] = {
    "users": User,
    "categories": Category,
    "transactions": Transaction,
    "budgets": Budget,
    "goals": Goal,
}

DEFAULT_USER = User(id=DEFAULT_USER_ID, username="demo", password="demo")

DEFAULT_CATEGORIES = [
    Category(id="cat-1", name="Food", icon=CategoryIcon.COFFEE, color="#FF9800", user_id=DEFAULT_USER_ID),
    Category(id="cat-2", name="Transport", icon=CategoryIcon.CAR, color="#2196F3", user_id=DEFAULT_USER_ID),
    Category(id="cat-3", name="Leisure", icon=CategoryIcon.GAMEPAD, color="#9C27B0", user_id=DEFAULT_USER_ID),
    Category(id="cat-4", name="Bills", icon=CategoryIcon.FILE_TEXT, color="#F44336", user_id=DEFAULT_USER_ID),
    Category(id="cat-5", name="Salary", icon=CategoryIcon.ARROW_DOWN_LEFT, color="#4CAF50", user_id=DEFAULT_USER_ID),
    Category(id=OTHERS_CATEGORY_ID, name="Others", icon=CategoryIcon.MORE_HORIZONTAL, color="#757575", user_id=DEFAULT_USER_ID),
]


def _empty_collections() -> dict[str, dict[str, Any]]:
    return {kind: {} for kind in COLLECTIONS}


class KeyedLedgerStorage(LedgerStorageInterface):
    """
    Ledger storage over in-process dicts keyed by record id.

    Initialization is lazy: the first operation loads (or seeds) the
    collections, mirroring how a freshly installed client behaves.
    Returned records are copies; mutate through update_* only.
    """

    backend_name = "keyed"

    def __init__(self, audit_logger: Optional[AuditLogger] = None):
        self._collections = _empty_collections()
        self._initialized = False
        self._audit_logger = audit_logger

    # -------------------------------------------------------------------------
    # Backend hooks
    # -------------------------------------------------------------------------

    @abstractmethod
    async def _load(self) -> bool:
        """Populate self._collections. Returns True if defaults were seeded."""

    @abstractmethod
    async def _persist(self, kind: str) -> None:
        """Persist the named collection after a mutation."""

    @abstractmethod
    def _new_id(self, kind: str) -> str:
        """Generate a fresh id for a record of the named collection."""

    async def _clear(self) -> None:
        """Drop any persisted state. Called by reset()."""

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def initialize(self) -> None:
        if self._initialized:
            return
        seeded = await self._load()
        self._initialized = True
        if self._audit_logger:
            await self._audit_logger.log(
                AuditEventBuilder.store_initialized(self.backend_name, seeded)
            )

    async def reset(self) -> None:
        self._collections = _empty_collections()
        self._initialized = False
        await self._clear()
        if self._audit_logger:
            await self._audit_logger.log(AuditEventBuilder.store_reset(self.backend_name))

    def _seed_defaults(self) -> None:
        """Add the default user and categories without overwriting anything."""
        self._collections["users"].setdefault(DEFAULT_USER.id, DEFAULT_USER.model_copy())
        for category in DEFAULT_CATEGORIES:
            self._collections["categories"].setdefault(category.id, category.model_copy())

    # -------------------------------------------------------------------------
    # Generic collection helpers
    # -------------------------------------------------------------------------

    async def _records(self, kind: str) -> dict[str, Any]:
        await self.initialize()
        return self._collections[kind]

    async def _get(self, kind: str, record_id: str) -> Optional[Any]:
        record = (await self._records(kind)).get(record_id)
        return record.model_copy(deep=True) if record is not None else None

    async def _insert(self, kind: str, record: ModelT) -> ModelT:
        records = await self._records(kind)
        records[record.id] = record
        await self._persist(kind)
        return record.model_copy(deep=True)

    async def _merge(
        self,
        kind: str,
        record_id: str,
        changes: dict[str, Any],
    ) -> Optional[Any]:
        records = await self._records(kind)
        existing = records.get(record_id)
        if existing is None:
            return None

        model_cls = COLLECTIONS[kind]
        try:
            merged = model_cls.model_validate(
                {**existing.model_dump(), **changes, "id": existing.id}
            )
        except ValidationError as e:
            raise StorageError(f"Invalid update for {kind} {record_id}: {e}")

        records[record_id] = merged
        await self._persist(kind)
        return merged.model_copy(deep=True)

    async def _remove(self, kind: str, record_id: str) -> bool:
        records = await self._records(kind)
        if records.pop(record_id, None) is None:
            return False
        await self._persist(kind)
        return True

    async def _owned_by(self, kind: str, user_id: str) -> list[Any]:
        return [
            record.model_copy(deep=True)
            for record in (await self._records(kind)).values()
            if record.user_id == user_id
        ]

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    async def get_user(self, user_id: str) -> Optional[User]:
        return await self._get("users", user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        for user in (await self._records("users")).values():
            if user.username == username:
                return user.model_copy()
        return None

    async def create_user(self, username: str, password: str) -> User:
        user = User(id=self._new_id("users"), username=username, password=password)
        return await self._insert("users", user)

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def list_categories(self, user_id: str) -> list[Category]:
        return await self._owned_by("categories", user_id)

    async def get_category(self, category_id: str) -> Optional[Category]:
        return await self._get("categories", category_id)

    async def create_category(self, data: CategoryCreate, user_id: str) -> Category:
        category = Category(
            id=self._new_id("categories"),
            name=data.name,
            icon=data.icon,
            color=data.color,
            user_id=user_id,
        )
        return await self._insert("categories", category)

    async def delete_category(self, category_id: str) -> bool:
        return await self._remove("categories", category_id)

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def list_transactions(
        self,
        user_id: str,
        filters: Optional[TransactionFilters] = None,
    ) -> list[Transaction]:
        transactions = await self._owned_by("transactions", user_id)
        if filters:
            transactions = [t for t in transactions if filters.matches(t)]

        # Most recent first
        transactions.sort(key=lambda t: t.date, reverse=True)
        return transactions

    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return await self._get("transactions", transaction_id)

    async def create_transaction(
        self,
        data: TransactionCreate,
        user_id: str,
    ) -> Transaction:
        transaction = Transaction(
            id=self._new_id("transactions"),
            amount=data.amount,
            description=data.description,
            type=data.type,
            category_id=data.category_id,
            user_id=user_id,
            date=data.date or datetime.now(),
            tags=data.tags,
        )
        return await self._insert("transactions", transaction)

    async def update_transaction(
        self,
        transaction_id: str,
        changes: dict[str, Any],
    ) -> Optional[Transaction]:
        return await self._merge("transactions", transaction_id, changes)

    async def delete_transaction(self, transaction_id: str) -> bool:
        return await self._remove("transactions", transaction_id)

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    async def list_budgets(
        self,
        user_id: str,
        month: Optional[int] = None,
        year: Optional[int] = None,
        category_id: Optional[str] = None,
    ) -> list[Budget]:
        budgets = await self._owned_by("budgets", user_id)
        return [
            b for b in budgets
            if (month is None or b.month == month)
            and (year is None or b.year == year)
            and (category_id is None or b.category_id == category_id)
        ]

    async def get_budget(self, budget_id: str) -> Optional[Budget]:
        return await self._get("budgets", budget_id)

    async def create_budget(self, data: BudgetCreate, user_id: str) -> Budget:
        budget = Budget(
            id=self._new_id("budgets"),
            name=data.name,
            amount=data.amount,
            spent=Decimal("0.00"),
            category_id=data.category_id,
            user_id=user_id,
            month=data.month,
            year=data.year,
        )
        return await self._insert("budgets", budget)

    async def update_budget(
        self,
        budget_id: str,
        changes: dict[str, Any],
    ) -> Optional[Budget]:
        return await self._merge("budgets", budget_id, changes)

    async def delete_budget(self, budget_id: str) -> bool:
        return await self._remove("budgets", budget_id)

    # -------------------------------------------------------------------------
    # Goals
    # -------------------------------------------------------------------------

    async def list_goals(self, user_id: str) -> list[Goal]:
        return await self._owned_by("goals", user_id)

    async def get_goal(self, goal_id: str) -> Optional[Goal]:
        return await self._get("goals", goal_id)

    async def create_goal(self, data: GoalCreate, user_id: str) -> Goal:
        goal = Goal(
            id=self._new_id("goals"),
            name=data.name,
            target_amount=data.target_amount,
            current_amount=Decimal("0.00"),
            target_date=data.target_date,
            user_id=user_id,
        )
        return await self._insert("goals", goal)

    async def update_goal(
        self,
        goal_id: str,
        changes: dict[str, Any],
    ) -> Optional[Goal]:
        return await self._merge("goals", goal_id, changes)

    async def delete_goal(self, goal_id: str) -> bool:
        return await self._remove("goals", goal_id)
