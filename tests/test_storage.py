"""
Tests for ledger storage backends.

Both backends share KeyedLedgerStorage, so behavioural tests run against
each of them; seeding and id tests are backend-specific.
"""

import asyncio
import json
import re
from datetime import datetime
from decimal import Decimal

import pytest

from finance_tracker.models.ledger import (
    DEFAULT_USER_ID,
    OTHERS_CATEGORY_ID,
    BudgetCreate,
    CategoryCreate,
    GoalCreate,
    TransactionCreate,
    TransactionFilters,
    TransactionType,
)
from finance_tracker.services.storage import (
    DEFAULT_CATEGORIES,
    InMemoryLedgerStorage,
    LocalFileLedgerStorage,
    StorageError,
)


def run(coro):
    return asyncio.run(coro)


@pytest.fixture(params=["memory", "local_file"])
def storage(request, tmp_path):
    if request.param == "memory":
        return InMemoryLedgerStorage()
    return LocalFileLedgerStorage(path=tmp_path / "ledger.json")


def _expense(amount="10.00", category_id="cat-1", date=None, **extra):
    return TransactionCreate(
        amount=amount,
        type=TransactionType.EXPENSE,
        category_id=category_id,
        date=date,
        **extra,
    )


class TestSharedBehaviour:
    """Tests that hold for every storage backend."""

    def test_seeds_default_categories(self, storage):
        """Test that a new store has the six default categories."""
        categories = run(storage.list_categories(DEFAULT_USER_ID))
        ids = {category.id for category in categories}
        assert len(categories) == 6
        assert OTHERS_CATEGORY_ID in ids
        assert ids == {category.id for category in DEFAULT_CATEGORIES}

    def test_seeds_default_user(self, storage):
        """Test that the demo user exists."""
        user = run(storage.get_user_by_username("demo"))
        assert user is not None
        assert user.id == DEFAULT_USER_ID

    def test_create_and_get_user(self, storage):
        """Test user creation and lookup by id."""
        async def scenario():
            created = await storage.create_user("alice", "secret")
            return created, await storage.get_user(created.id)

        created, fetched = run(scenario())
        assert fetched.username == "alice"
        assert fetched.id == created.id

    def test_transactions_listed_most_recent_first(self, storage):
        """Test that listing orders transactions by date descending."""
        async def scenario():
            await storage.create_transaction(_expense(date=datetime(2024, 1, 5)), DEFAULT_USER_ID)
            await storage.create_transaction(_expense(date=datetime(2024, 3, 5)), DEFAULT_USER_ID)
            await storage.create_transaction(_expense(date=datetime(2024, 2, 5)), DEFAULT_USER_ID)
            return await storage.list_transactions(DEFAULT_USER_ID)

        transactions = run(scenario())
        assert [t.date.month for t in transactions] == [3, 2, 1]

    def test_transaction_filters(self, storage):
        """Test filtering by type and by (month, year) period."""
        async def scenario():
            await storage.create_transaction(_expense(date=datetime(2024, 3, 5)), DEFAULT_USER_ID)
            await storage.create_transaction(
                TransactionCreate(amount="500", type="income", category_id="cat-5", date=datetime(2024, 3, 1)),
                DEFAULT_USER_ID,
            )
            await storage.create_transaction(_expense(date=datetime(2023, 3, 5)), DEFAULT_USER_ID)
            by_type = await storage.list_transactions(
                DEFAULT_USER_ID, TransactionFilters(type=TransactionType.INCOME)
            )
            by_period = await storage.list_transactions(
                DEFAULT_USER_ID, TransactionFilters(month=3, year=2024)
            )
            # month without year does not filter by date
            by_month = await storage.list_transactions(
                DEFAULT_USER_ID, TransactionFilters(month=3)
            )
            return by_type, by_period, by_month

        by_type, by_period, by_month = run(scenario())
        assert len(by_type) == 1
        assert len(by_period) == 2
        assert len(by_month) == 3

    def test_partial_update_preserves_other_fields(self, storage):
        """Test that update merges only the provided fields."""
        async def scenario():
            created = await storage.create_transaction(
                _expense(description="Lunch", date=datetime(2024, 3, 5)),
                DEFAULT_USER_ID,
            )
            updated = await storage.update_transaction(created.id, {"amount": "12.50"})
            return created, updated

        created, updated = run(scenario())
        assert updated.id == created.id
        assert updated.amount == Decimal("12.50")
        assert updated.description == "Lunch"
        assert updated.date == created.date

    def test_update_unknown_id_returns_none(self, storage):
        """Test that updating a missing record signals not found."""
        assert run(storage.update_goal("missing", {"name": "x"})) is None

    def test_delete_transaction(self, storage):
        """Test that deleted transactions are gone and re-deleting fails."""
        async def scenario():
            created = await storage.create_transaction(_expense(), DEFAULT_USER_ID)
            first = await storage.delete_transaction(created.id)
            second = await storage.delete_transaction(created.id)
            remaining = await storage.list_transactions(DEFAULT_USER_ID)
            return created, first, second, remaining

        created, first, second, remaining = run(scenario())
        assert first is True
        assert second is False
        assert created.id not in {t.id for t in remaining}

    def test_list_budgets_by_period_and_category(self, storage):
        """Test budget filters."""
        async def scenario():
            await storage.create_budget(
                BudgetCreate(name="Food", amount="100", category_id="cat-1", month=3, year=2024),
                DEFAULT_USER_ID,
            )
            await storage.create_budget(
                BudgetCreate(name="Fun", amount="50", category_id="cat-3", month=3, year=2024),
                DEFAULT_USER_ID,
            )
            await storage.create_budget(
                BudgetCreate(name="Food", amount="100", category_id="cat-1", month=4, year=2024),
                DEFAULT_USER_ID,
            )
            march = await storage.list_budgets(DEFAULT_USER_ID, month=3, year=2024)
            food = await storage.list_budgets(DEFAULT_USER_ID, month=3, year=2024, category_id="cat-1")
            return march, food

        march, food = run(scenario())
        assert len(march) == 2
        assert len(food) == 1
        assert food[0].spent == Decimal("0.00")

    def test_goal_starts_at_zero(self, storage):
        """Test that a new goal has currentAmount 0.00."""
        goal = run(storage.create_goal(
            GoalCreate(name="Trip", target_amount="1000", target_date=datetime(2030, 1, 1)),
            DEFAULT_USER_ID,
        ))
        assert goal.current_amount == Decimal("0.00")

    def test_returned_records_are_copies(self, storage):
        """Test that mutating a returned record does not touch the store."""
        async def scenario():
            category = await storage.get_category("cat-1")
            category.name = "Changed"
            return await storage.get_category("cat-1")

        assert run(scenario()).name == "Food"

    def test_reset_discards_data(self, storage):
        """Test that reset() empties the store and re-seeds on next use."""
        async def scenario():
            await storage.create_category(
                CategoryCreate(name="Pets", icon="heart", color="#123456"),
                DEFAULT_USER_ID,
            )
            await storage.reset()
            return await storage.list_categories(DEFAULT_USER_ID)

        categories = run(scenario())
        assert len(categories) == 6
        assert "Pets" not in {category.name for category in categories}


class TestInMemoryLedgerStorage:
    """Tests specific to the server store."""

    def test_ids_are_uuids(self):
        """Test that new ids are UUID4 strings."""
        storage = InMemoryLedgerStorage()
        category = run(storage.create_category(
            CategoryCreate(name="Pets", icon="heart", color="#123456"),
            DEFAULT_USER_ID,
        ))
        assert re.fullmatch(r"[0-9a-f-]{36}", category.id)


class TestLocalFileLedgerStorage:
    """Tests specific to the offline mirror."""

    def test_ids_use_prefix_timestamp_suffix(self, tmp_path):
        """Test the offline id scheme."""
        storage = LocalFileLedgerStorage(path=tmp_path / "ledger.json")
        transaction = run(storage.create_transaction(_expense(), DEFAULT_USER_ID))
        budget = run(storage.create_budget(
            BudgetCreate(name="Food", amount="100", category_id="cat-1", month=3, year=2024),
            DEFAULT_USER_ID,
        ))
        assert re.fullmatch(r"tx-\d{13}-[a-z0-9]{9}", transaction.id)
        assert re.fullmatch(r"budget-\d{13}-[a-z0-9]{9}", budget.id)

    def test_data_survives_reopen(self, tmp_path):
        """Test that a second store instance reads the same document."""
        path = tmp_path / "ledger.json"
        created = run(LocalFileLedgerStorage(path=path).create_transaction(_expense(), DEFAULT_USER_ID))

        reopened = LocalFileLedgerStorage(path=path)
        fetched = run(reopened.get_transaction(created.id))
        assert fetched is not None
        assert fetched.amount == Decimal("10.00")

    def test_document_uses_wire_format(self, tmp_path):
        """Test that the file holds camelCase records and money strings."""
        path = tmp_path / "ledger.json"
        storage = LocalFileLedgerStorage(path=path)
        run(storage.create_transaction(_expense(amount="7,5"), DEFAULT_USER_ID))

        document = json.loads(path.read_text(encoding="utf-8"))
        assert document["initialized"] is True
        assert document["transactions"][0]["amount"] == "7.50"
        assert document["transactions"][0]["categoryId"] == "cat-1"

    def test_seeds_only_once(self, tmp_path):
        """Test that deleted defaults are not re-seeded on the next run."""
        path = tmp_path / "ledger.json"

        async def first_run():
            storage = LocalFileLedgerStorage(path=path)
            for category in await storage.list_categories(DEFAULT_USER_ID):
                await storage.delete_category(category.id)

        run(first_run())
        categories = run(LocalFileLedgerStorage(path=path).list_categories(DEFAULT_USER_ID))
        assert categories == []

    def test_corrupt_file_raises(self, tmp_path):
        """Test that an unreadable document is reported, not reseeded."""
        path = tmp_path / "ledger.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(StorageError):
            run(LocalFileLedgerStorage(path=path).list_categories(DEFAULT_USER_ID))

    def test_reset_removes_file(self, tmp_path):
        """Test that reset() deletes the document."""
        path = tmp_path / "ledger.json"
        storage = LocalFileLedgerStorage(path=path)
        run(storage.initialize())
        assert path.exists()

        run(storage.reset())
        assert not path.exists()
