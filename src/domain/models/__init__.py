"""Domain model package.

All domain objects are pure Python / Pydantic models with no ORM or
infrastructure dependencies.  Import from this package to avoid coupling
application code to individual module paths.
"""

from .enums import UserRole
from .users import User

__all__ = [
    "User",
    "UserRole",
]
