import copy
from datetime import date

import pytest
from fastapi.testclient import TestClient

from app.core.errors import NotFound
from app.core.security import create_access_token
from app.db.dynamo import _convert_for_dynamo, _from_dynamo
from app.main import app
from app.routers.transactions import get_ledger_service
from app.services.ledger import LedgerService

TODAY = date(2024, 5, 15)


class InMemoryStore:
    """Dict-backed stand-in for DynamoTransactionStore, keyed on (user_id, id)."""

    def __init__(self):
        self.items = {}

    def insert(self, record):
        item = _stored(record)
        self.items[(item["user_id"], item["id"])] = item
        return copy.deepcopy(item)

    def select_by_owner(self, owner_id, type=None, category=None, start_date=None, end_date=None):
        records = [
            copy.deepcopy(item)
            for (owner, _), item in self.items.items()
            if owner == owner_id
            and (type is None or item["type"] == type)
            and (category is None or item["category"] == category)
            and (start_date is None or item["date"] >= start_date)
            and (end_date is None or item["date"] <= end_date)
        ]
        records.sort(key=lambda r: (r["date"], r["created_at"]), reverse=True)
        return records

    def select_one(self, transaction_id, owner_id):
        item = self.items.get((owner_id, transaction_id))
        if item is None:
            raise NotFound()
        return copy.deepcopy(item)

    def update(self, transaction_id, owner_id, patch):
        item = self.items.get((owner_id, transaction_id))
        if item is None:
            raise NotFound()
        item.update(_stored(patch))
        return copy.deepcopy(item)

    def delete(self, transaction_id, owner_id):
        item = self.items.pop((owner_id, transaction_id), None)
        if item is None:
            raise NotFound()
        return item

    def ping(self):
        return None


def _stored(record):
    # numbers come back the way DynamoDB hands them out: whole values as int
    return _from_dynamo(_convert_for_dynamo(record))


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def service(store):
    return LedgerService(store, today=lambda: TODAY)


@pytest.fixture
def client(service):
    app.dependency_overrides[get_ledger_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user_id):
        return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}

    return _headers
