"""
Tests for the expense store against an in-process DynamoDB.

Covers create/get/update/delete, month and day listings, profile
decoration and the index backfill.
"""

import pytest

from services.dynamodb import iterate_pages
from utils.errors import (ExpenseNotFoundError, InputValidationError,
                          NoFieldsToUpdateError)


def raw_item(table, expense):
    return table.get_item(
        Key={"userId": expense.user_id, "expenseId": expense.expense_id}
    ).get("Item")


class TestCreate:
    """Test expense creation."""

    def test_create_assigns_derived_fields(self, expense_store, expenses_table, expense_input):
        expense = expense_store.create(expense_input())

        assert expense.month_key == "2025-10"
        assert expense.expense_id.startswith("2025-10-15#")
        assert expense.amount_minor == 1999
        assert expense.currency == "GBP"

        item = raw_item(expenses_table, expense)
        assert item["monthKey"] == "2025-10"
        assert item["GSI1PK"] == "u1#2025-10"
        assert item["GSI1SK"] == item["occurredAt"] == "2025-10-15T12:00:00.000Z"
        assert "note" not in item

    def test_create_keeps_optional_note(self, expense_store, expense_input):
        expense = expense_store.create(expense_input(note="team lunch"))
        assert expense_store.get("u1", expense.expense_id).note == "team lunch"

    def test_invalid_input_writes_nothing(self, expense_store, expenses_table, expense_input):
        with pytest.raises(InputValidationError):
            expense_store.create(expense_input(amountMinor=-1))
        assert expenses_table.scan()["Count"] == 0

    def test_out_of_range_timestamp_writes_nothing(self, expense_store, expenses_table, expense_input):
        with pytest.raises(InputValidationError) as exc_info:
            expense_store.create(expense_input(occurredAt="0001-01-01T00:00:00+01:00"))
        assert exc_info.value.errors[0]["field"] == "occurredAt"
        assert expenses_table.scan()["Count"] == 0


class TestGet:
    """Test point lookups."""

    def test_get_returns_stored_expense(self, expense_store, expense_input):
        created = expense_store.create(expense_input())

        fetched = expense_store.get("u1", created.expense_id)

        assert fetched == created

    def test_get_missing_returns_none(self, expense_store):
        assert expense_store.get("u1", "2025-10-15#missing") is None

    def test_get_is_scoped_by_user_key(self, expense_store, expense_input):
        created = expense_store.create(expense_input())
        assert expense_store.get("u2", created.expense_id) is None


class TestUpdate:
    """Test partial conditional updates."""

    def test_update_changes_only_supplied_fields(self, expense_store, expenses_table, expense_input):
        created = expense_store.create(expense_input(note="before"))
        before = raw_item(expenses_table, created)

        updated = expense_store.update(
            {"userId": "u1", "expenseId": created.expense_id, "amountMinor": 2500}
        )

        assert updated.amount_minor == 2500
        assert updated.note == "before"
        assert updated.category == "Food"
        after = raw_item(expenses_table, created)
        for attr in ("occurredAt", "monthKey", "GSI1PK", "GSI1SK"):
            assert after[attr] == before[attr]

    def test_update_occurred_at_moves_expense_to_new_month(self, expense_store, expenses_table, expense_input):
        created = expense_store.create(expense_input())

        updated = expense_store.update(
            {
                "userId": "u1",
                "expenseId": created.expense_id,
                "occurredAt": "2025-11-02T08:30:00Z",
            }
        )

        assert updated.month_key == "2025-11"
        assert updated.occurred_at == "2025-11-02T08:30:00.000Z"
        # The key is not re-encoded; only the derived attributes move
        assert updated.expense_id == created.expense_id

        item = raw_item(expenses_table, created)
        assert item["GSI1PK"] == "u1#2025-11"
        assert item["GSI1SK"] == "2025-11-02T08:30:00.000Z"

        assert expense_store.list_by_user_month("u1", "2025-10") == []
        assert [e.expense_id for e in expense_store.list_by_user_month("u1", "2025-11")] == [
            created.expense_id
        ]

    def test_update_without_fields_fails(self, expense_store, expense_input):
        created = expense_store.create(expense_input())

        with pytest.raises(NoFieldsToUpdateError):
            expense_store.update({"userId": "u1", "expenseId": created.expense_id})

    def test_update_missing_expense_fails_without_creating_it(self, expense_store, expenses_table):
        with pytest.raises(ExpenseNotFoundError):
            expense_store.update(
                {"userId": "u1", "expenseId": "2025-10-15#missing", "category": "Rent"}
            )
        assert expenses_table.scan()["Count"] == 0

    def test_update_with_out_of_range_timestamp_fails(self, expense_store, expense_input):
        created = expense_store.create(expense_input())

        with pytest.raises(InputValidationError):
            expense_store.update(
                {
                    "userId": "u1",
                    "expenseId": created.expense_id,
                    "occurredAt": "0001-01-01T00:00:00+01:00",
                }
            )
        assert expense_store.get("u1", created.expense_id).month_key == "2025-10"

    def test_update_currency_is_normalized(self, expense_store, expense_input):
        created = expense_store.create(expense_input())
        updated = expense_store.update(
            {"userId": "u1", "expenseId": created.expense_id, "currency": "eur"}
        )
        assert updated.currency == "EUR"


class TestDelete:
    """Test idempotent deletes."""

    def test_delete_removes_expense(self, expense_store, expense_input):
        created = expense_store.create(expense_input())

        assert expense_store.delete("u1", created.expense_id) is True
        assert expense_store.get("u1", created.expense_id) is None

    def test_delete_missing_expense_succeeds(self, expense_store):
        assert expense_store.delete("u1", "2025-10-15#never-existed") is True


class TestListings:
    """Test month and day listings."""

    @pytest.fixture
    def seeded(self, expense_store, expense_input):
        return {
            "oct20": expense_store.create(expense_input(occurredAt="2025-10-20T09:00:00Z")),
            "oct05": expense_store.create(expense_input(occurredAt="2025-10-05T18:45:00Z")),
            "nov01": expense_store.create(expense_input(occurredAt="2025-11-01T00:00:00Z")),
            "u2_oct10": expense_store.create(
                expense_input(userId="u2", occurredAt="2025-10-10T10:00:00Z")
            ),
        }

    def test_list_by_user_month_is_scoped_and_ordered(self, expense_store, seeded):
        expenses = expense_store.list_by_user_month("u1", "2025-10")

        assert [e.expense_id for e in expenses] == [
            seeded["oct05"].expense_id,
            seeded["oct20"].expense_id,
        ]
        assert all(e.user_id == "u1" and e.month_key == "2025-10" for e in expenses)

    def test_list_by_user_month_decorates_with_profile(self, expense_store, profile_store, seeded):
        profile_store.upsert({"userId": "u1", "firstName": "Ada"}, "ada@example.com")

        expenses = expense_store.list_by_user_month("u1", "2025-10")

        assert all(e.user.first_name == "Ada" for e in expenses)
        assert expenses[0].user.email == "ada@example.com"

    def test_list_without_profile_leaves_user_empty(self, expense_store, seeded):
        expenses = expense_store.list_by_user_month("u1", "2025-10")
        assert all(e.user is None for e in expenses)

    def test_list_by_user_month_without_decoration(self, expense_store, profile_store, seeded):
        profile_store.upsert({"userId": "u1"}, "ada@example.com")
        expenses = expense_store.list_by_user_month("u1", "2025-10", decorate=False)
        assert all(e.user is None for e in expenses)

    def test_list_all_by_month_covers_every_user(self, expense_store, profile_store, seeded):
        profile_store.upsert({"userId": "u1", "firstName": "Ada"}, "ada@example.com")
        profile_store.upsert({"userId": "u2", "firstName": "Grace"}, "grace@example.com")

        expenses = expense_store.list_all_by_month("2025-10")

        assert [e.expense_id for e in expenses] == [
            seeded["oct05"].expense_id,
            seeded["u2_oct10"].expense_id,
            seeded["oct20"].expense_id,
        ]
        assert [e.user.first_name for e in expenses] == ["Ada", "Grace", "Ada"]

    def test_list_all_by_empty_month(self, expense_store, seeded):
        assert expense_store.list_all_by_month("2024-01") == []

    def test_find_by_user_date_matches_id_prefix(self, expense_store, expense_input):
        morning = expense_store.create(expense_input(occurredAt="2025-10-15T08:00:00Z"))
        evening = expense_store.create(expense_input(occurredAt="2025-10-15T20:00:00Z"))
        expense_store.create(expense_input(occurredAt="2025-10-16T08:00:00Z"))
        expense_store.create(expense_input(userId="u2", occurredAt="2025-10-15T09:00:00Z"))

        found = expense_store.find_by_user_date("u1", "2025-10-15")

        assert {e.expense_id for e in found} == {morning.expense_id, evening.expense_id}
        assert all(e.expense_id.startswith("2025-10-15") for e in found)

    @pytest.mark.parametrize("month", ["2025-13", "2025-1", "October", ""])
    def test_invalid_month_is_rejected(self, expense_store, month):
        with pytest.raises(InputValidationError):
            expense_store.list_by_user_month("u1", month)

    def test_invalid_date_is_rejected(self, expense_store):
        with pytest.raises(InputValidationError):
            expense_store.find_by_user_date("u1", "2025-10")


class TestBackfill:
    """Test repair of stale index fields."""

    def put_legacy_item(self, table, **attributes):
        item = {
            "userId": "u1",
            "expenseId": "2025-10-31#legacy",
            "amountMinor": 1200,
            "currency": "GBP",
            "category": "Travel",
            "occurredAt": "2025-10-31T23:30:00Z",
            "createdAt": "2025-10-31T23:31:00.000Z",
        }
        item.update(attributes)
        table.put_item(Item=item)
        return item

    def test_backfill_repairs_stale_items(self, expense_store, expenses_table, expense_input):
        expense_store.create(expense_input())
        self.put_legacy_item(expenses_table, monthKey="2025-11")

        counts = expense_store.backfill_index_fields()

        assert counts == {"updated": 1, "skipped": 1}
        item = expenses_table.get_item(
            Key={"userId": "u1", "expenseId": "2025-10-31#legacy"}
        )["Item"]
        assert item["monthKey"] == "2025-10"
        assert item["GSI1PK"] == "u1#2025-10"
        assert item["GSI1SK"] == item["occurredAt"] == "2025-10-31T23:30:00.000Z"
        assert len(expense_store.list_by_user_month("u1", "2025-10")) == 2

    def test_backfill_is_repeatable(self, expense_store, expenses_table):
        self.put_legacy_item(expenses_table)

        expense_store.backfill_index_fields()

        assert expense_store.backfill_index_fields() == {"updated": 0, "skipped": 1}

    def test_dry_run_writes_nothing(self, expense_store, expenses_table):
        self.put_legacy_item(expenses_table)

        assert expense_store.backfill_index_fields(dry_run=True) == {
            "updated": 1,
            "skipped": 0,
        }
        item = expenses_table.get_item(
            Key={"userId": "u1", "expenseId": "2025-10-31#legacy"}
        )["Item"]
        assert "GSI1PK" not in item


class TestIteratePages:
    """Test pagination across LastEvaluatedKey."""

    def test_follows_last_evaluated_key(self):
        pages = [
            {"Items": [1, 2], "LastEvaluatedKey": {"k": "2"}},
            {"Items": [3], "LastEvaluatedKey": {"k": "3"}},
            {"Items": []},
        ]
        calls = []

        def operation(**kwargs):
            calls.append(dict(kwargs))
            return pages[len(calls) - 1]

        assert list(iterate_pages(operation, TableName="t")) == [1, 2, 3]
        assert calls[0] == {"TableName": "t"}
        assert calls[1]["ExclusiveStartKey"] == {"k": "2"}
        assert calls[2]["ExclusiveStartKey"] == {"k": "3"}
