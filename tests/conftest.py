import pytest
from httpx import AsyncClient, ASGITransport
import os
from datetime import timedelta
from unittest.mock import MagicMock, patch

# Set up test environment variables before anything else
worker_id = os.environ.get("PYTEST_XDIST_WORKER", "master")
db_name = f"equipcpd_test_{worker_id}"

os.environ["ENV"] = "testing"
os.environ["DB_NAME"] = db_name
os.environ["SECRET_KEY"] = "test_secret_key_12345"
os.environ["SERVICE_ROLE_KEY"] = "test_service_role_key"
os.environ["VAPID_PUBLIC_KEY"] = "BTestPublicKey"
os.environ["VAPID_PRIVATE_KEY"] = "test-vapid-private-key"

from pymongo import ASCENDING, MongoClient
from pywebpush import WebPushException

from config import config
config.ENV = "testing"
config.DB_NAME = db_name

from main import app
from routes.deps import create_access_token
from stores.subscriptions import SubscriptionStore


# Setup sync client for testing fixtures
sync_client = MongoClient(config.MONGO_URI or "mongodb://localhost:27017/")
sync_db = sync_client[config.DB_NAME]


def create_indexes():
    """Same uniqueness guarantees as scripts/setup_indexes.py."""
    sync_db.push_subscriptions.create_index([("user_id", ASCENDING)], unique=True)
    sync_db.push_subscriptions.create_index([("id", ASCENDING)], unique=True, sparse=True)
    sync_db.profiles.create_index([("id", ASCENDING)], unique=True)


@pytest.fixture(scope="session", autouse=True)
def test_db_session():
    # Ensure clean state from any previously crashed runs on startup
    sync_client.drop_database(config.DB_NAME)
    yield sync_db
    # Teardown: drop the database after tests are done
    sync_client.drop_database(config.DB_NAME)


@pytest.fixture(scope="function", autouse=True)
def clean_db(test_db_session):
    """Drop all collections before each test to ensure test isolation."""
    for collection in sync_db.list_collection_names():
        sync_db.drop_collection(collection)
    create_indexes()
    yield


@pytest.fixture(scope="function", autouse=True)
def reset_motor_client():
    # Each test runs on its own event loop; motor must not reuse a client bound to the previous one
    from database import client
    client.reset()
    yield
    client.reset()


@pytest.fixture(scope="function")
def db():
    return sync_db


@pytest.fixture(scope="function")
def subscription_store():
    return SubscriptionStore()


@pytest.fixture(scope="function")
async def async_client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ─── Users ──────────────────────────────────────────────────────────────────

def add_profile(db, user_id: str, role: str, **fields) -> dict:
    profile = {
        "id": user_id,
        "email": f"{user_id}@test.com",
        "name": user_id.replace("_", " ").title(),
        "role": role,
        "low_stock_alerts_enabled": True,
        "overdue_maintenance_alerts_enabled": True,
        "read_notification_ids": [],
        **fields,
    }
    db.profiles.update_one({"id": user_id}, {"$set": profile}, upsert=True)
    return profile


def token_headers(user_id: str) -> dict:
    token = create_access_token(data={"sub": user_id, "role": "authenticated"}, expires_delta=timedelta(minutes=60))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def test_user(db):
    return add_profile(db, "test_admin_id", "admin")


@pytest.fixture(scope="function")
def test_member_user(db):
    """A regular user for RBAC testing."""
    return add_profile(db, "test_member_id", "user")


@pytest.fixture(scope="function")
def test_pending_user(db):
    return add_profile(db, "test_pending_id", "pending")


@pytest.fixture(scope="function")
def auth_headers(test_user):
    return token_headers(test_user["id"])


@pytest.fixture(scope="function")
def member_auth_headers(test_member_user):
    return token_headers(test_member_user["id"])


@pytest.fixture(scope="function")
def pending_auth_headers(test_pending_user):
    return token_headers(test_pending_user["id"])


@pytest.fixture(scope="function")
def service_headers():
    return {"Authorization": f"Bearer {config.SERVICE_ROLE_KEY}"}


# ─── Push service ───────────────────────────────────────────────────────────

def web_push_data(endpoint: str) -> dict:
    return {"endpoint": endpoint, "keys": {"p256dh": "p256dh-key-test", "auth": "auth-key-test"}}


def add_subscription(db, user_id: str, subscription_data, sub_id: str = None) -> dict:
    row = {
        "id": sub_id or f"sub_{user_id}",
        "user_id": user_id,
        "subscription_data": subscription_data,
    }
    db.push_subscriptions.insert_one(dict(row))
    return row


class FakePushService:
    """Records webpush() calls; answers 201 unless a status or error is set for the endpoint."""

    def __init__(self):
        self.calls = []
        self.statuses = {}
        self.errors = {}

    def __call__(self, subscription_info, data=None, vapid_private_key=None, vapid_claims=None, **kwargs):
        endpoint = subscription_info["endpoint"]
        self.calls.append({
            "endpoint": endpoint,
            "data": data,
            "vapid_private_key": vapid_private_key,
            "vapid_claims": vapid_claims,
            **kwargs,
        })
        if endpoint in self.errors:
            raise self.errors[endpoint]
        status = self.statuses.get(endpoint, 201)
        if status > 202:
            raise WebPushException(f"Push failed: {status}", response=MagicMock(status_code=status))
        return MagicMock(status_code=status)

    @property
    def endpoints(self):
        return sorted(call["endpoint"] for call in self.calls)


@pytest.fixture(scope="function")
def fake_push():
    service = FakePushService()
    with patch("utils.push.webpush", side_effect=service):
        yield service
