import copy
import re
from decimal import Decimal

import pytest
from boto3.dynamodb.types import TypeDeserializer
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient

from seatadmin.config import Settings
from seatadmin.database import DynamoDBClient
from seatadmin.main import build_service, create_app
from seatadmin.models.user import UserCreate, UserRole

SAMPLE_CONFIGURATION = {
    "zones": [
        {
            "name": "Front",
            "sections": [
                {
                    "name": "A",
                    "rows": [
                        {"label": "1", "seatCount": 3},
                        {"label": "2", "seatCount": 2},
                    ],
                }
            ],
        },
        {
            "name": "Back",
            "sections": [
                {
                    "name": "B",
                    "rows": [{"label": "AA", "seatCount": 4, "aisles": [2]}],
                }
            ],
        },
    ]
}

SAMPLE_SEAT_COUNT = 9


def _to_dynamo(value):
    # DynamoDB hands numbers back as Decimal
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, dict):
        return {key: _to_dynamo(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_to_dynamo(item) for item in value]
    return value


def client_error(code, operation="TransactWriteItems"):
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


_deserializer = TypeDeserializer()


def _plain(attributes):
    return {key: _deserializer.deserialize(value) for key, value in attributes.items()}


class FakeDynamoDBClient:
    """Low-level client stand-in running TransactWriteItems against a FakeTable.

    A transaction applies all of its actions or none. Call numbers listed in
    ``fail_calls`` (1-based) fail without writing anything.
    """

    def __init__(self, table):
        self.table = table
        self.calls = 0
        self.fail_calls = set()
        self.transaction_sizes = []

    def fail_next(self, *offsets):
        """Make the given upcoming calls fail; 1 is the next call"""
        self.fail_calls.update(self.calls + offset for offset in offsets)

    def transact_write_items(self, TransactItems):
        self.calls += 1
        if len(TransactItems) > 100:
            raise client_error("ValidationException")
        if self.calls in self.fail_calls:
            raise client_error("TransactionCanceledException")

        snapshot = copy.deepcopy(self.table.items)
        try:
            for action in TransactItems:
                self._apply(action)
        except ClientError:
            self.table.items = snapshot
            raise
        self.transaction_sizes.append(len(TransactItems))
        return {}

    def _apply(self, action):
        (kind, body), = action.items()
        if kind == "Put":
            self.table.put_item(Item=_plain(body["Item"]))
            return
        key = _plain(body["Key"])
        if kind == "Delete":
            self.table.delete_item(Key=key)
            return
        if (key["pk"], key["sk"]) not in self.table.items:
            raise client_error("TransactionCanceledException")
        self.table.update_item(
            Key=key,
            UpdateExpression=body["UpdateExpression"],
            ExpressionAttributeValues=_plain(body["ExpressionAttributeValues"]),
            ExpressionAttributeNames=body.get("ExpressionAttributeNames"),
        )


class FakeTable:
    """Dict-backed stand-in for a boto3 Table resource.

    Understands only the key conditions, filters and update expressions that
    DynamoDBClient sends.
    """

    def __init__(self):
        self.items = {}

    def put_item(self, Item):
        self.items[(Item["pk"], Item["sk"])] = _to_dynamo(copy.deepcopy(Item))
        return {}

    def get_item(self, Key):
        item = self.items.get((Key["pk"], Key["sk"]))
        return {"Item": copy.deepcopy(item)} if item is not None else {}

    def delete_item(self, Key, ReturnValues=None):
        old = self.items.pop((Key["pk"], Key["sk"]), None)
        return {"Attributes": old} if old is not None else {}

    def query(self, KeyConditionExpression, ExpressionAttributeValues, **kwargs):
        pk = ExpressionAttributeValues[":pk"]
        prefix = ExpressionAttributeValues.get(":sk", "")
        matches = [
            copy.deepcopy(item)
            for (item_pk, item_sk), item in sorted(self.items.items())
            if item_pk == pk and item_sk.startswith(prefix)
        ]
        return {"Items": matches, "Count": len(matches)}

    def scan(self, FilterExpression=None, ExpressionAttributeValues=None, **kwargs):
        wanted_sk = (ExpressionAttributeValues or {}).get(":sk")
        matches = [
            copy.deepcopy(item)
            for key, item in sorted(self.items.items())
            if wanted_sk is None or key[1] == wanted_sk
        ]
        return {"Items": matches, "Count": len(matches)}

    def update_item(self, Key, UpdateExpression, ExpressionAttributeValues=None,
                    ExpressionAttributeNames=None, ReturnValues=None):
        values = ExpressionAttributeValues or {}
        names = ExpressionAttributeNames or {}
        item = self.items.setdefault((Key["pk"], Key["sk"]), dict(Key))

        parts = re.split(r"\b(SET|REMOVE|ADD)\b", UpdateExpression)
        for keyword, body in zip(parts[1::2], parts[2::2]):
            for clause in body.split(","):
                clause = clause.strip()
                if keyword == "SET":
                    name, placeholder = [part.strip() for part in clause.split("=")]
                    item[names.get(name, name)] = _to_dynamo(values[placeholder])
                elif keyword == "REMOVE":
                    item.pop(names.get(clause, clause), None)
                else:
                    name, placeholder = clause.split()
                    name = names.get(name, name)
                    item[name] = item.get(name, Decimal(0)) + Decimal(values[placeholder])
        return {"Attributes": copy.deepcopy(item)}


@pytest.fixture
def settings():
    return Settings(store_backend="memory", seed_demo=False, lock_timeout=2.0)


@pytest.fixture
def service(settings):
    return build_service(settings)


@pytest.fixture
def client(settings, service):
    return TestClient(create_app(settings, service))


@pytest.fixture
def fake_table():
    return FakeTable()


@pytest.fixture
def dynamodb_settings():
    return Settings(
        store_backend="dynamodb",
        table_name="seatadmin-test",
        seed_demo=False,
        lock_timeout=2.0,
    )


@pytest.fixture
def fake_client(fake_table):
    return FakeDynamoDBClient(fake_table)


@pytest.fixture
def dynamodb_client(dynamodb_settings, fake_table, fake_client):
    return DynamoDBClient(dynamodb_settings, table=fake_table, client=fake_client)


@pytest.fixture
def admin(service):
    return service.create_user(UserCreate(username="admin", role=UserRole.ADMIN))


@pytest.fixture
def member(service):
    return service.create_user(UserCreate(username="alice", role=UserRole.USER))


@pytest.fixture
def admin_headers(admin):
    return {"X-User-Id": str(admin.id)}


@pytest.fixture
def user_headers(member):
    return {"X-User-Id": str(member.id)}


@pytest.fixture
def test_event(client, admin_headers):
    """Create a test event with the sample layout"""
    event_data = {
        "name": "Test Concert",
        "venue": "Main Hall",
        "date": "2025-06-15",
        "configuration": SAMPLE_CONFIGURATION,
    }

    response = client.post("/api/events", json=event_data, headers=admin_headers)
    assert response.status_code == 201
    return response.json()
