"""ORM model registry — imports every model module so each mapper class is
registered with Base.metadata before Alembic or SQLAlchemy runs.
"""

from src.infrastructure.persistence.models.users import User

__all__ = [
    "User",
]
