from decimal import Decimal
from typing import List, Optional, Union

from sqlalchemy import select
from sqlalchemy.orm import Session

from bankdesk.database.entities import Account, Transaction


class TransactionDao:
    """Persistence operations for :class:`Transaction`."""

    def __init__(self, session: Session):
        self.session = session

    def create_transaction(
        self, account: Account, amount: Union[Decimal, str, int], description: str = ""
    ) -> Transaction:
        """Book ``amount`` on ``account`` and adjust its balance in the same unit of work."""
        amount = Decimal(str(amount))
        transaction = Transaction(account=account, amount=amount, description=description)
        account.balance = (account.balance or Decimal("0.00")) + amount
        self.session.add(transaction)
        self.session.flush()
        return transaction

    def get_by_id(self, transaction_id: int) -> Optional[Transaction]:
        return self.session.get(Transaction, transaction_id)

    def list_for_account(self, account_id: int) -> List[Transaction]:
        stmt = (
            select(Transaction)
            .where(Transaction.account_id == account_id)
            .order_by(Transaction.created_at, Transaction.id)
        )
        return list(self.session.scalars(stmt))
