"""bankdesk: a small banking backend built on FastAPI, SQLAlchemy and Redis."""

__version__ = "0.1.0"
