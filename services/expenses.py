"""
Expense store for the expense tracker.

Expenses are keyed by ``(userId, expenseId)`` where ``expenseId`` is
``<YYYY-MM-DD>#<uuid>``. The ``GSI1`` index is keyed by
``(userId#monthKey, occurredAt)`` for month listings.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

import botocore

from models.dynamodb import parse_timestamp
from models.expense import (ExpenseBase, ExpenseCreate, ExpenseKey,
                            ExpenseUpdate, MonthQuery, UserDateQuery,
                            UserMonthQuery, derive_index_fields)
from services.dynamodb import (get_dynamodb_resource, iterate_pages,
                               log_client_error)
from services.parameter_store import TableConfig
from services.users import UserProfileStore
from utils.errors import ExpenseNotFoundError, NoFieldsToUpdateError
from utils.validation import parse_input

logger = logging.getLogger(__name__)

INDEX_FIELDS = ("occurredAt", "monthKey", "GSI1PK", "GSI1SK")


class ExpenseStore:
    """
    Encapsulates operations on the Amazon DynamoDB expenses table.

    Storage errors are logged and re-raised unchanged; nothing is retried.
    """

    def __init__(
        self,
        table_config: TableConfig,
        dynamodb_resource=None,
        profiles: Optional[UserProfileStore] = None,
    ):
        """
        :param table_config: Table and index names.
        :param dynamodb_resource: boto3 DynamoDB resource; the shared one by default.
        :param profiles: Store used to decorate listings with user profiles.
        """
        resource = dynamodb_resource or get_dynamodb_resource()
        self.table = resource.Table(table_config.expenses_table)
        self.month_index = table_config.expenses_month_index
        self.profiles = profiles

    def create(self, data: Union[ExpenseCreate, Mapping[str, Any]]) -> ExpenseBase:
        """
        Adds an expense, assigning its ID, month bucket and index keys.

        The write is unconditional; the random suffix of the ID makes a
        collision with an existing key practically impossible.

        :param data: Expense input.
        :return: The stored expense.
        """
        expense = parse_input(ExpenseCreate, data).to_expense()
        try:
            self.table.put_item(
                Item=expense.to_dynamodb_item().model_dump(exclude_none=True)
            )
        except botocore.exceptions.ClientError as err:
            log_client_error(
                err,
                "put expense",
                self.table.name,
                user_id=expense.user_id,
                expense_id=expense.expense_id,
            )
            raise

        logger.info(
            "Created expense %s for user %s", expense.expense_id, expense.user_id
        )
        return expense

    def get(self, user_id: str, expense_id: str) -> Optional[ExpenseBase]:
        """
        Gets a specific expense.

        :param user_id: The owner of the expense.
        :param expense_id: The expense ID.
        :return: The expense if found, None otherwise.
        """
        key = parse_input(ExpenseKey, {"userId": user_id, "expenseId": expense_id})
        try:
            response = self.table.get_item(
                Key={"userId": key.user_id, "expenseId": key.expense_id}
            )
        except botocore.exceptions.ClientError as err:
            log_client_error(
                err,
                "get expense",
                self.table.name,
                user_id=user_id,
                expense_id=expense_id,
            )
            raise

        return ExpenseBase.from_dynamodb_item(response.get("Item"))

    def update(self, data: Union[ExpenseUpdate, Mapping[str, Any]]) -> ExpenseBase:
        """
        Applies a partial update in a single conditional UpdateItem.

        When ``occurredAt`` changes, ``monthKey`` and both index keys are set
        in the same request.

        :param data: Update input; only supplied fields change.
        :return: The expense after the update.
        :raises NoFieldsToUpdateError: if the input changes nothing.
        :raises ExpenseNotFoundError: if the expense does not exist.
        """
        update = parse_input(ExpenseUpdate, data)
        changes = update.changes()
        if not changes:
            raise NoFieldsToUpdateError()

        names = {f"#{attr}": attr for attr in changes}
        values = {f":{attr}": value for attr, value in changes.items()}

        try:
            response = self.table.update_item(
                Key={"userId": update.user_id, "expenseId": update.expense_id},
                UpdateExpression="SET "
                + ", ".join(f"#{attr} = :{attr}" for attr in changes),
                ConditionExpression="attribute_exists(expenseId)",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_NEW",
            )
        except botocore.exceptions.ClientError as err:
            if err.response["Error"]["Code"] == "ConditionalCheckFailedException":
                raise ExpenseNotFoundError(update.user_id, update.expense_id) from err
            log_client_error(
                err,
                "update expense",
                self.table.name,
                user_id=update.user_id,
                expense_id=update.expense_id,
            )
            raise

        return ExpenseBase.from_dynamodb_item(response["Attributes"])

    def delete(self, user_id: str, expense_id: str) -> bool:
        """
        Deletes a specific expense. Deleting a missing expense also succeeds.

        :param user_id: The owner of the expense.
        :param expense_id: The expense ID.
        :return: True if successful, raises exception otherwise.
        """
        key = parse_input(ExpenseKey, {"userId": user_id, "expenseId": expense_id})
        try:
            self.table.delete_item(
                Key={"userId": key.user_id, "expenseId": key.expense_id}
            )
        except botocore.exceptions.ClientError as err:
            log_client_error(
                err,
                "delete expense",
                self.table.name,
                user_id=user_id,
                expense_id=expense_id,
            )
            raise
        return True

    def list_by_user_month(
        self, user_id: str, month: str, decorate: bool = True
    ) -> List[ExpenseBase]:
        """
        Lists a user's expenses for one month, oldest first.

        :param user_id: The owner of the expenses.
        :param month: Month bucket, ``YYYY-MM``.
        :param decorate: Attach the owner's profile to each expense.
        """
        query = parse_input(UserMonthQuery, {"userId": user_id, "month": month})
        partition = f"{query.user_id}#{query.month}"
        try:
            items = list(
                iterate_pages(
                    self.table.query,
                    IndexName=self.month_index,
                    KeyConditionExpression="GSI1PK = :gsi1pk",
                    ExpressionAttributeValues={":gsi1pk": partition},
                    ScanIndexForward=True,
                )
            )
        except botocore.exceptions.ClientError as err:
            log_client_error(
                err,
                "query expenses by month",
                self.table.name,
                user_id=user_id,
                month=month,
            )
            raise

        expenses = [ExpenseBase.from_dynamodb_item(item) for item in items]
        return self._decorate(expenses) if decorate else expenses

    def list_all_by_month(self, month: str, decorate: bool = True) -> List[ExpenseBase]:
        """
        Lists every user's expenses for one month, oldest first.

        This is a filtered full-table scan, so its cost grows with the table
        rather than with the month.

        :param month: Month bucket, ``YYYY-MM``.
        :param decorate: Attach each owner's profile to their expenses.
        """
        query = parse_input(MonthQuery, {"month": month})
        try:
            items = list(
                iterate_pages(
                    self.table.scan,
                    FilterExpression="monthKey = :month",
                    ExpressionAttributeValues={":month": query.month},
                )
            )
        except botocore.exceptions.ClientError as err:
            log_client_error(err, "scan expenses", self.table.name, month=month)
            raise

        expenses = sorted(
            (ExpenseBase.from_dynamodb_item(item) for item in items),
            key=lambda expense: expense.occurred_at,
        )
        return self._decorate(expenses) if decorate else expenses

    def find_by_user_date(self, user_id: str, date: str) -> List[ExpenseBase]:
        """
        Lists a user's expenses for one day using the expense ID date prefix.

        :param user_id: The owner of the expenses.
        :param date: Day, ``YYYY-MM-DD``.
        """
        query = parse_input(UserDateQuery, {"userId": user_id, "date": date})
        try:
            items = iterate_pages(
                self.table.query,
                KeyConditionExpression="userId = :userId AND begins_with(expenseId, :datePrefix)",
                ExpressionAttributeValues={
                    ":userId": query.user_id,
                    ":datePrefix": query.date,
                },
            )
            expenses = [ExpenseBase.from_dynamodb_item(item) for item in items]
        except botocore.exceptions.ClientError as err:
            log_client_error(
                err,
                "query expenses by date",
                self.table.name,
                user_id=user_id,
                date=date,
            )
            raise

        logger.info(
            "Found %d expenses for user %s on %s", len(expenses), user_id, date
        )
        return expenses

    def backfill_index_fields(self, dry_run: bool = False) -> Dict[str, int]:
        """
        Re-derives monthKey and the GSI1 keys for every stored expense.

        Items whose stored values already match are skipped. Each repaired item
        gets all four derived attributes in one UpdateItem.

        :param dry_run: Count the items that need repair without writing.
        :return: Counts of ``updated`` and ``skipped`` items.
        """
        counts = {"updated": 0, "skipped": 0}
        try:
            for item in iterate_pages(self.table.scan):
                expected = derive_index_fields(
                    item["userId"], parse_timestamp(item["occurredAt"])
                )
                if all(item.get(attr) == expected[attr] for attr in INDEX_FIELDS):
                    counts["skipped"] += 1
                    continue

                logger.info(
                    "Repairing index fields of %s/%s: %s",
                    item["userId"],
                    item["expenseId"],
                    expected,
                )
                if not dry_run:
                    self.table.update_item(
                        Key={"userId": item["userId"], "expenseId": item["expenseId"]},
                        UpdateExpression="SET "
                        + ", ".join(f"#{attr} = :{attr}" for attr in INDEX_FIELDS),
                        ExpressionAttributeNames={
                            f"#{attr}": attr for attr in INDEX_FIELDS
                        },
                        ExpressionAttributeValues={
                            f":{attr}": expected[attr] for attr in INDEX_FIELDS
                        },
                    )
                counts["updated"] += 1
        except botocore.exceptions.ClientError as err:
            log_client_error(err, "backfill index fields", self.table.name)
            raise

        return counts

    def _decorate(self, expenses: List[ExpenseBase]) -> List[ExpenseBase]:
        """Attach owner profiles fetched with one batch lookup."""
        if not expenses or self.profiles is None:
            return expenses

        profiles = self.profiles.batch_get(expense.user_id for expense in expenses)
        return [
            expense.model_copy(update={"user": profiles.get(expense.user_id)})
            for expense in expenses
        ]
