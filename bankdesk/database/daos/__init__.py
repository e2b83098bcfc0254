"""
The `daos` package provides the Data Access Layer for the application.

It is responsible for all interactions with the database entities,
encapsulating CRUD operations that support the core functionality
of the system. Each DAO operates on a specific entity and abstracts
away the direct SQLAlchemy queries, offering a cleaner API to the
service layer. DAOs never open or close sessions themselves; they work
inside the unit of work handed to them.

Contents
--------
- UserDao
    Handles user persistence:
    * Creates users with password hashing
    * Fetches users by email
    * Authenticates email/password pairs

- AccountDao
    Manages account records:
    * Creates accounts for a user
    * Fetches accounts by ID or by owner

- TransactionDao
    Manages transaction records:
    * Books transactions and updates the account balance
    * Fetches transactions by ID or by account (chronological order)
"""

from bankdesk.database.daos.user_dao import UserDao
from bankdesk.database.daos.account_dao import AccountDao
from bankdesk.database.daos.transaction_dao import TransactionDao

__all__ = ["UserDao", "AccountDao", "TransactionDao"]
