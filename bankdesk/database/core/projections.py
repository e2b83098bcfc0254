"""
Projection loader: read aggregates together with the associations a caller
needs, check ownership, and hand back immutable records.

Entities never leave the unit of work that loaded them. The loader opens a
session, fetches the aggregate with eager loading, authorizes the caller,
maps everything into frozen pydantic records and only then lets the session
close. Callers therefore never touch a lazy association on a detached
instance.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload, selectinload, sessionmaker
from sqlalchemy.orm.exc import DetachedInstanceError

from bankdesk.database.core.session import unit_of_work
from bankdesk.database.entities import Account, Transaction, User
from bankdesk.exceptions import AuthorizationError, NotFoundError, StaleSessionError

logger = logging.getLogger(__name__)

E = TypeVar("E")
R = TypeVar("R")

ADMIN_ROLE = "admin"


class Requester(BaseModel):
    """Identity of the caller, taken from a verified access token."""

    model_config = ConfigDict(frozen=True)

    email: str
    role: str


class OwnerRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    email: str
    full_name: str


class AccountRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    number: str
    currency: str
    balance: Decimal
    nickname: str
    owner: OwnerRecord


class TransactionRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    amount: Decimal
    description: str
    created_at: datetime
    account: AccountRecord


def touch_association(entity: Any, name: str) -> Any:
    """
    Read association ``name`` from ``entity``.

    Raises:
        StaleSessionError: the entity is detached from its session and the
            association was never loaded.
    """
    try:
        return getattr(entity, name)
    except DetachedInstanceError as exc:
        raise StaleSessionError(
            f"{type(entity).__name__}.{name} accessed after its unit of work closed"
        ) from exc


def owner_or_admin(requester: Requester) -> Callable[[User], bool]:
    """Authorization check: the requester owns the aggregate or is an admin."""

    def check(owner: User) -> bool:
        return requester.role == ADMIN_ROLE or owner.email == requester.email

    return check


def project_owner(user: User) -> OwnerRecord:
    return OwnerRecord(id=user.id, email=user.email, full_name=user.full_name)


def project_account(account: Account) -> AccountRecord:
    return AccountRecord(
        id=account.id,
        number=account.number,
        currency=account.currency,
        balance=account.balance,
        nickname=account.nickname,
        owner=project_owner(touch_association(account, "owner")),
    )


def project_transaction(transaction: Transaction, account_record: Optional[AccountRecord] = None) -> TransactionRecord:
    return TransactionRecord(
        id=transaction.id,
        amount=transaction.amount,
        description=transaction.description,
        created_at=transaction.created_at,
        account=account_record or project_account(touch_association(transaction, "account")),
    )


class ProjectionLoader:
    """
    Loads aggregates within one unit of work and returns projected records.

    Args:
        session_factory: factory used to open a fresh session per call.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def load(
        self,
        fetch: Callable[[Session], Optional[E]],
        authorize: Callable[[E], bool],
        project: Callable[[E], R],
        description: str = "resource",
    ) -> R:
        """
        Run ``fetch``, ``authorize`` and ``project`` inside one unit of work.

        The record is returned after the session has closed. Nothing is
        returned when authorization fails.

        Raises:
            NotFoundError: ``fetch`` returned ``None``.
            AuthorizationError: ``authorize`` rejected the aggregate.
        """
        with unit_of_work(self.session_factory) as session:
            entity = fetch(session)
            if entity is None:
                raise NotFoundError(f"{description} not found")
            if not authorize(entity):
                logger.warning("Access to %s denied", description)
                raise AuthorizationError(f"not allowed to access {description}")
            record = project(entity)
        return record

    def load_transaction(self, transaction_id: int, requester: Requester) -> TransactionRecord:
        """Load one transaction with its account and the account owner in a single query."""

        def fetch(session: Session) -> Optional[Transaction]:
            stmt = (
                select(Transaction)
                .options(joinedload(Transaction.account).joinedload(Account.owner))
                .where(Transaction.id == transaction_id)
            )
            return session.scalars(stmt).first()

        is_allowed = owner_or_admin(requester)
        return self.load(
            fetch,
            lambda transaction: is_allowed(transaction.account.owner),
            project_transaction,
            description=f"transaction {transaction_id}",
        )

    def list_account_transactions(self, account_id: int, requester: Requester) -> List[TransactionRecord]:
        """
        Load an account, its owner and all of its transactions.

        Issues two queries: the account joined to its owner, then the
        transactions via ``selectinload``. Records are ordered by creation
        time, then id.
        """

        def fetch(session: Session) -> Optional[Account]:
            stmt = (
                select(Account)
                .options(joinedload(Account.owner), selectinload(Account.transactions))
                .where(Account.id == account_id)
            )
            return session.scalars(stmt).first()

        def project(account: Account) -> List[TransactionRecord]:
            account_record = project_account(account)
            ordered = sorted(account.transactions, key=lambda t: (t.created_at, t.id))
            return [project_transaction(t, account_record) for t in ordered]

        is_allowed = owner_or_admin(requester)
        return self.load(
            fetch,
            lambda account: is_allowed(account.owner),
            project,
            description=f"account {account_id}",
        )
