from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, Unicode
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bankdesk.database.entities.base import Base

if TYPE_CHECKING:
    from bankdesk.database.entities.account import Account


class Transaction(Base):
    """
    A single booked movement on an account.

    ``account`` is loaded lazily by default; code that needs it outside of
    the owning session must go through the projection loader.
    """

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    account_id: Mapped[int] = mapped_column(ForeignKey("accounts.id"), index=True, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    description: Mapped[str] = mapped_column(Unicode(255), nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    account: Mapped["Account"] = relationship(back_populates="transactions", lazy="select")

    def __repr__(self):
        return f"<Transaction id={self.id} account_id={self.account_id} amount={self.amount}>"
