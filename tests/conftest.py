"""
Shared fixtures: an in-process DynamoDB (moto) with both tables, stores
bound to it, and a builder for AppSync resolver events.
"""

import os

# Set before any boto3 client or resource is created
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_SECURITY_TOKEN", "testing")
os.environ.setdefault("AWS_SESSION_TOKEN", "testing")
os.environ["AWS_DEFAULT_REGION"] = "eu-west-2"

import boto3
import pytest
from moto import mock_aws

from services.dynamodb import reset_dynamodb_resource
from services.expenses import ExpenseStore
from services.parameter_store import TableConfig, clear_cache
from services.stores import reset_stores
from services.users import UserProfileStore

EXPENSES_TABLE = "expenses-test"
USERS_TABLE = "users-test"


@pytest.fixture(autouse=True)
def table_environment(monkeypatch):
    monkeypatch.setenv("TABLE_NAME", EXPENSES_TABLE)
    monkeypatch.setenv("GSI1_NAME", "GSI1")
    monkeypatch.setenv("USERS_TABLE_NAME", USERS_TABLE)
    monkeypatch.setenv("USERS_EMAIL_INDEX_NAME", "EmailIndex")


@pytest.fixture
def aws():
    """Mock every AWS service for the duration of a test."""
    with mock_aws():
        reset_dynamodb_resource()
        reset_stores()
        clear_cache()
        yield
        reset_dynamodb_resource()
        reset_stores()
        clear_cache()


def create_tables(dynamodb):
    dynamodb.create_table(
        TableName=EXPENSES_TABLE,
        BillingMode="PAY_PER_REQUEST",
        AttributeDefinitions=[
            {"AttributeName": "userId", "AttributeType": "S"},
            {"AttributeName": "expenseId", "AttributeType": "S"},
            {"AttributeName": "GSI1PK", "AttributeType": "S"},
            {"AttributeName": "GSI1SK", "AttributeType": "S"},
        ],
        KeySchema=[
            {"AttributeName": "userId", "KeyType": "HASH"},
            {"AttributeName": "expenseId", "KeyType": "RANGE"},
        ],
        GlobalSecondaryIndexes=[
            {
                "IndexName": "GSI1",
                "KeySchema": [
                    {"AttributeName": "GSI1PK", "KeyType": "HASH"},
                    {"AttributeName": "GSI1SK", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            }
        ],
    )
    dynamodb.create_table(
        TableName=USERS_TABLE,
        BillingMode="PAY_PER_REQUEST",
        AttributeDefinitions=[
            {"AttributeName": "userId", "AttributeType": "S"},
            {"AttributeName": "email", "AttributeType": "S"},
        ],
        KeySchema=[{"AttributeName": "userId", "KeyType": "HASH"}],
        GlobalSecondaryIndexes=[
            {
                "IndexName": "EmailIndex",
                "KeySchema": [{"AttributeName": "email", "KeyType": "HASH"}],
                "Projection": {"ProjectionType": "ALL"},
            }
        ],
    )


@pytest.fixture
def dynamodb(aws):
    resource = boto3.resource("dynamodb", region_name="eu-west-2")
    create_tables(resource)
    return resource


@pytest.fixture
def expenses_table(dynamodb):
    return dynamodb.Table(EXPENSES_TABLE)


@pytest.fixture
def users_table(dynamodb):
    return dynamodb.Table(USERS_TABLE)


@pytest.fixture
def table_config():
    return TableConfig(expenses_table=EXPENSES_TABLE, users_table=USERS_TABLE)


@pytest.fixture
def profile_store(dynamodb, table_config):
    return UserProfileStore(table_config, dynamodb_resource=dynamodb)


@pytest.fixture
def expense_store(dynamodb, table_config, profile_store):
    return ExpenseStore(table_config, dynamodb_resource=dynamodb, profiles=profile_store)


@pytest.fixture
def make_event():
    """Build an AppSync direct Lambda resolver event."""

    def _make_event(parent, field, arguments=None, sub="u1", email="u1@example.com"):
        identity = None
        if sub is not None:
            identity = {"sub": sub, "claims": {"sub": sub, "email": email}}
        return {
            "arguments": arguments or {},
            "identity": identity,
            "info": {"parentTypeName": parent, "fieldName": field},
        }

    return _make_event


@pytest.fixture
def expense_input():
    """Valid createExpense input, with optional field overrides."""

    def _expense_input(**overrides):
        data = {
            "userId": "u1",
            "amountMinor": 1999,
            "currency": "GBP",
            "category": "Food",
            "occurredAt": "2025-10-15T12:00:00Z",
        }
        data.update(overrides)
        return data

    return _expense_input
