"""
SQLAlchemy ORM models package.

All models are imported here so that:
  1. Base.metadata knows every table when create_all() runs
  2. Relationship strings ("Profile", "Account", ...) resolve at mapper
     configuration time regardless of import order
"""

from bank_api.models.user import User  # noqa: F401
from bank_api.models.profile import Profile  # noqa: F401
from bank_api.models.account import Account  # noqa: F401
from bank_api.models.transaction import Transaction  # noqa: F401
