import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from bankdesk.database.entities import User

logger = logging.getLogger(__name__)


class UserDao:
    """Persistence operations for :class:`User`."""

    def __init__(self, session: Session):
        self.session = session

    def create_user(self, email: str, password: str, full_name: str = "", role: str = "customer") -> User:
        user = User(
            email=email.strip().lower(),
            full_name=full_name,
            hashed_password=generate_password_hash(password),
            role=role,
        )
        self.session.add(user)
        self.session.flush()
        logger.info("Created user %s with role %s", user.email, role)
        return user

    def get_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == email.strip().lower())
        return self.session.scalars(stmt).first()

    def authenticate(self, email: str, password: str) -> Optional[User]:
        """Return the user when the credentials match, otherwise ``None``."""
        user = self.get_by_email(email)
        if user is None or not check_password_hash(user.hashed_password, password):
            logger.warning("Failed login attempt for %s", email)
            return None
        return user
