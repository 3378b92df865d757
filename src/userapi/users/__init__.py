"""
The User resource: model, validation rules, in-memory store and the
CRUD handlers that tie them to the router.
"""

from .models import User, UserPayload, PayloadError
from .validation import (
    USER_RULES,
    Rule,
    ValidationError,
    ValidationResult,
    validate_user,
)
from .store import UserStore
from .handlers import UserHandlers, home

__all__ = [
    "User",
    "UserPayload",
    "PayloadError",
    "USER_RULES",
    "Rule",
    "ValidationError",
    "ValidationResult",
    "validate_user",
    "UserStore",
    "UserHandlers",
    "home",
]
