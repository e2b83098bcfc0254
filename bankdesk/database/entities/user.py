from datetime import datetime, timezone
from typing import List, TYPE_CHECKING

from sqlalchemy import DateTime, Integer, String, Unicode
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bankdesk.database.entities.base import Base

if TYPE_CHECKING:
    from bankdesk.database.entities.account import Account


class User(Base):
    """
    A registered customer or operator of the bank.

    The ``email`` doubles as the token subject and the ``role`` is copied
    into every token issued for the user.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    full_name: Mapped[str] = mapped_column(Unicode(255), nullable=False, default="")
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default="customer")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    accounts: Mapped[List["Account"]] = relationship(back_populates="owner", lazy="select")

    def __repr__(self):
        return f"<User id={self.id} email={self.email!r} role={self.role!r}>"
