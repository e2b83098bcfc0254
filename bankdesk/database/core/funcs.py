"""
Service functions used by the API router.

Each function opens its own unit of work and returns plain dictionaries so
that no ORM instance escapes the session that loaded it.
"""

import logging

from sqlalchemy.orm import sessionmaker

from bankdesk.database.core.session import unit_of_work
from bankdesk.database.daos import UserDao

logger = logging.getLogger(__name__)


def login_user(session_factory: sessionmaker, email: str, password: str) -> dict:
    """
    Check a user's credentials.

    Returns
    -------
    dict
        ``{'authenticated': True, 'user_details': {...}}`` on success, or
        ``{'authenticated': False, 'detail': str}`` otherwise.
    """
    with unit_of_work(session_factory) as session:
        user = UserDao(session).authenticate(email, password)
        if user is None:
            return {'authenticated': False, 'detail': 'Invalid email or password'}
        user_details = {
            'email': user.email,
            'full_name': user.full_name,
            'role': user.role,
        }
    return {'authenticated': True, 'user_details': user_details}


def register_user(session_factory: sessionmaker, email: str, password: str, full_name: str = "", role: str = "customer") -> dict:
    """Create a user unless the email is already taken."""
    with unit_of_work(session_factory) as session:
        dao = UserDao(session)
        if dao.get_by_email(email) is not None:
            return {'res': False, 'detail': 'Email already registered'}
        user = dao.create_user(email=email, password=password, full_name=full_name, role=role)
        return {'res': True, 'user_details': {'email': user.email, 'full_name': user.full_name, 'role': user.role}}
