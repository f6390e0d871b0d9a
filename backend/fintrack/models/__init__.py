"""ORM Models — SQLAlchemy tables behind DatabaseStorage.

Importing this package registers every table on Base.metadata.
"""

from fintrack.models.user import UserModel  # noqa: F401
from fintrack.models.transaction import TransactionModel  # noqa: F401
