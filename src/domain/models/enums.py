"""Domain enumerations for user management.

All string-valued enums use str mixin so they serialize cleanly to JSON
and remain comparable to plain strings (FastAPI / Pydantic default behaviour).
"""

from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"
