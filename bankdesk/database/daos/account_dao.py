from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from bankdesk.database.entities import Account, User


class AccountDao:
    """Persistence operations for :class:`Account`."""

    def __init__(self, session: Session):
        self.session = session

    def create_account(self, owner: User, number: str, currency: str = "EUR", nickname: str = "") -> Account:
        account = Account(
            owner=owner,
            number=number,
            currency=currency.upper(),
            nickname=nickname,
            balance=Decimal("0.00"),
        )
        self.session.add(account)
        self.session.flush()
        return account

    def get_by_id(self, account_id: int) -> Optional[Account]:
        return self.session.get(Account, account_id)

    def list_for_user(self, user_id: int) -> List[Account]:
        stmt = select(Account).where(Account.user_id == user_id).order_by(Account.id)
        return list(self.session.scalars(stmt))
