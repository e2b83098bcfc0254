import pytest
import redis
from fastapi.testclient import TestClient
from sqlalchemy import event

from bankdesk.cache import EphemeralCache
from bankdesk.database.config.config import Settings
from bankdesk.database.core.session import build_engine, init_db, make_session_factory, unit_of_work
from bankdesk.database.daos import AccountDao, TransactionDao, UserDao
from bankdesk.main import create_app

PASSWORD = "s3cret-pass"
NON_ASCII_DESCRIPTION = "Überweisung café – 東京 🚀"


class FakeRedis:
    """In-memory stand-in for ``redis.Redis(decode_responses=True)`` with a manual clock."""

    def __init__(self):
        self.now = 0.0
        self.down = False
        self.store = {}

    def advance(self, seconds):
        self.now += seconds

    def _check(self):
        if self.down:
            raise redis.ConnectionError("Connection refused")

    def _live(self, key):
        item = self.store.get(key)
        if item is None:
            return None
        value, expires_at = item
        if expires_at is not None and expires_at <= self.now:
            del self.store[key]
            return None
        return item

    def set(self, key, value, ex=None):
        self._check()
        self.store[key] = (value, None if ex is None else self.now + ex)
        return True

    def get(self, key):
        self._check()
        item = self._live(key)
        return None if item is None else item[0]

    def delete(self, *keys):
        self._check()
        removed = 0
        for key in keys:
            if self._live(key) is not None:
                del self.store[key]
                removed += 1
        return removed

    def exists(self, *keys):
        self._check()
        return sum(1 for key in keys if self._live(key) is not None)

    def ttl(self, key):
        self._check()
        item = self._live(key)
        if item is None:
            return -2
        if item[1] is None:
            return -1
        return int(item[1] - self.now)

    def ping(self):
        self._check()
        return True

    def close(self):
        pass


@pytest.fixture
def settings():
    return Settings(
        DB_DRIVER_NAME="sqlite",
        DB_DATABASE_NAME=":memory:",
        SECRET_KEY="test-secret",
        ALGORITHM="HS256",
        ACCESS_TOKEN_EXPIRE_MINUTES=5,
        REFRESH_TOKEN_EXPIRE_MINUTES=60,
        CACHE_KEY_PREFIX="test",
        CACHE_DEFAULT_TTL_SECONDS=30,
        REDIS_URL=None,
        REDIS_HOST="localhost",
    )


@pytest.fixture
def engine(settings):
    engine = build_engine(settings)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def seeded(session_factory):
    """Alice owns one account with three transactions; Bob owns one empty account; Root is an admin."""
    with unit_of_work(session_factory) as session:
        users = UserDao(session)
        alice = users.create_user("alice@example.com", PASSWORD, full_name="Alice Ängström")
        bob = users.create_user("bob@example.com", PASSWORD, full_name="Bob")
        users.create_user("root@example.com", PASSWORD, full_name="Root", role="admin")

        accounts = AccountDao(session)
        alice_account = accounts.create_account(alice, "DE00123", nickname="Girokonto")
        bob_account = accounts.create_account(bob, "DE00456")

        transactions = TransactionDao(session)
        first = transactions.create_transaction(alice_account, "100.00", "salary")
        second = transactions.create_transaction(alice_account, "-12.50", NON_ASCII_DESCRIPTION)
        third = transactions.create_transaction(alice_account, "-7.25", "coffee")

        ids = {
            "alice_account": alice_account.id,
            "bob_account": bob_account.id,
            "transactions": [first.id, second.id, third.id],
            "non_ascii_transaction": second.id,
            "non_ascii_description": NON_ASCII_DESCRIPTION,
        }
    return ids


@pytest.fixture
def statement_counter(engine):
    statements = []

    def count(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(engine, "before_cursor_execute", count)
    yield statements
    event.remove(engine, "before_cursor_execute", count)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def cache(fake_redis):
    return EphemeralCache(fake_redis, prefix="test", default_ttl=30)


@pytest.fixture
def client(settings, engine, cache, seeded):
    app = create_app(settings, engine=engine, cache=cache)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def login(client):
    def do_login(email, password=PASSWORD):
        response = client.post("/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return response.json()

    return do_login


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_header():
    return bearer
