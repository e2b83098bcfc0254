from decimal import Decimal
from typing import List, TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, Numeric, String, Unicode
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bankdesk.database.entities.base import Base

if TYPE_CHECKING:
    from bankdesk.database.entities.transaction import Transaction
    from bankdesk.database.entities.user import User


class Account(Base):
    """A bank account held by a single user."""

    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    number: Mapped[str] = mapped_column(String(34), unique=True, index=True, nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="EUR")
    balance: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    nickname: Mapped[str] = mapped_column(Unicode(120), nullable=False, default="")

    owner: Mapped["User"] = relationship(back_populates="accounts", lazy="select")
    transactions: Mapped[List["Transaction"]] = relationship(
        back_populates="account", lazy="select", order_by="Transaction.id"
    )

    def __repr__(self):
        return f"<Account id={self.id} number={self.number!r}>"
