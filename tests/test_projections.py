from decimal import Decimal

import pytest
from pydantic import ValidationError
from sqlalchemy.orm.exc import DetachedInstanceError

from bankdesk.database.core.projections import ProjectionLoader, Requester, touch_association
from bankdesk.database.core.session import unit_of_work
from bankdesk.database.daos import TransactionDao
from bankdesk.exceptions import AuthorizationError, NotFoundError, StaleSessionError

ALICE = Requester(email="alice@example.com", role="customer")
BOB = Requester(email="bob@example.com", role="customer")
ROOT = Requester(email="root@example.com", role="admin")


@pytest.fixture
def loader(session_factory):
    return ProjectionLoader(session_factory)


def test_lazy_association_after_close_raises_stale_session(session_factory, seeded):
    with unit_of_work(session_factory) as session:
        transaction = TransactionDao(session).get_by_id(seeded["transactions"][0])

    with pytest.raises(DetachedInstanceError):
        transaction.account
    with pytest.raises(StaleSessionError):
        touch_association(transaction, "account")


def test_load_transaction_includes_account_and_owner(loader, seeded):
    record = loader.load_transaction(seeded["transactions"][0], ALICE)

    assert record.amount == Decimal("100.00")
    assert record.description == "salary"
    assert record.account.number == "DE00123"
    assert record.account.owner.email == "alice@example.com"


def test_load_transaction_issues_one_query(loader, seeded, statement_counter):
    loader.load_transaction(seeded["transactions"][1], ALICE)

    selects = [s for s in statement_counter if s.lstrip().upper().startswith("SELECT")]
    assert len(selects) == 1


def test_list_account_transactions_issues_two_queries(loader, seeded, statement_counter):
    records = loader.list_account_transactions(seeded["alice_account"], ALICE)

    selects = [s for s in statement_counter if s.lstrip().upper().startswith("SELECT")]
    assert len(selects) == 2
    assert [r.id for r in records] == seeded["transactions"]


def test_records_are_usable_after_unit_of_work_closed(loader, seeded):
    records = loader.list_account_transactions(seeded["alice_account"], ALICE)

    assert records[2].account.owner.full_name == "Alice Ängström"
    assert records[0].account.balance == Decimal("80.25")


def test_records_are_immutable(loader, seeded):
    record = loader.load_transaction(seeded["transactions"][0], ALICE)

    with pytest.raises(ValidationError):
        record.description = "changed"


def test_other_customer_is_denied(loader, seeded):
    with pytest.raises(AuthorizationError):
        loader.load_transaction(seeded["transactions"][0], BOB)
    with pytest.raises(AuthorizationError):
        loader.list_account_transactions(seeded["alice_account"], BOB)


def test_admin_may_read_any_account(loader, seeded):
    records = loader.list_account_transactions(seeded["alice_account"], ROOT)
    assert len(records) == 3


def test_empty_account_lists_nothing(loader, seeded):
    assert loader.list_account_transactions(seeded["bob_account"], BOB) == []


def test_unknown_ids_raise_not_found(loader, seeded):
    with pytest.raises(NotFoundError):
        loader.load_transaction(9999, ALICE)
    with pytest.raises(NotFoundError):
        loader.list_account_transactions(9999, ALICE)


def test_denied_load_never_runs_projection(loader, seeded):
    calls = []

    def project(entity):
        calls.append(entity)
        return entity

    with pytest.raises(AuthorizationError):
        loader.load(lambda session: object(), lambda entity: False, project)
    assert calls == []


def test_non_ascii_text_round_trips(loader, seeded):
    record = loader.load_transaction(seeded["non_ascii_transaction"], ALICE)

    expected = seeded["non_ascii_description"]
    assert record.description == expected
    assert record.description.encode("utf-8") == expected.encode("utf-8")
