"""
The `entities` package defines the ORM models of the application,
representing the database tables as Python classes via SQLAlchemy.

These entity classes are the foundation of the persistence layer,
used by DAOs (`daos` package) to perform CRUD operations and by the
projection loader (`core.projections`) to build read-only records.

Contents
--------
- User
    Represents a registered user in the system.
    * Stores credentials (with hashed password) and full name
    * Holds the role copied into issued tokens

- Account
    Represents a bank account belonging to a user.
    * Stores account number, currency, balance and nickname
    * Owns its transactions

- Transaction
    Represents a single booked movement on an account.
    * Stores amount, description and creation timestamp
    * Belongs to exactly one account (many-to-one)
"""

from bankdesk.database.entities.base import Base
from bankdesk.database.entities.user import User
from bankdesk.database.entities.account import Account
from bankdesk.database.entities.transaction import Transaction

__all__ = ["Base", "User", "Account", "Transaction"]
