"""
=============================================================================
IN-MEMORY USER STORE
=============================================================================

The only shared mutable state in the service. Worker threads from the
pool call into one UserStore concurrently, so every operation runs under
a single lock that covers both the map and the id counter:

    ┌───────────────────────────────────────────────────────────────┐
    │  UserStore                                                    │
    │                                                               │
    │   _lock ─────┬──────────────────────────────┐                 │
    │              │                              │                 │
    │        _users: {1: User, 3: User, ...}  _next_id: 4           │
    │                                                               │
    │   create():  id = _next_id; _next_id += 1; _users[id] = ...   │
    │              (one critical section: ids never collide)        │
    └───────────────────────────────────────────────────────────────┘

Users go in and come out as copies, so nothing outside the lock can
see a half-updated user or change one behind the store's back.

Ids are never reused: deleting user 3 does not rewind the counter.

=============================================================================
"""

from dataclasses import replace
import logging
import threading
from typing import Dict, List, Optional

from .models import User, UserPayload
from .validation import ValidationError, validate_user


logger = logging.getLogger(__name__)


class UserStore:
    """
    Thread-safe, process-local collection of users.

    Usage:
        store = UserStore()
        user = store.create(UserPayload("Ada", "Engineer", "ada@example.com"))
        store.get(user.id)          # User(id=1, ...)
        store.delete(user.id)       # True
        store.get(user.id)          # None
    """

    def __init__(self, lock: Optional[threading.Lock] = None):
        """
        Args:
            lock: Mutual-exclusion primitive guarding the map and counter.
                  A fresh threading.Lock when omitted.
        """
        self._lock = lock or threading.Lock()
        self._users: Dict[int, User] = {}
        self._next_id = 1

    def all(self) -> List[User]:
        """Every user, in insertion order."""
        with self._lock:
            return [replace(user) for user in self._users.values()]

    def get(self, user_id: int) -> Optional[User]:
        """The user with this id, or None."""
        with self._lock:
            user = self._users.get(user_id)
            return replace(user) if user else None

    def create(self, candidate: UserPayload) -> User:
        """
        Store a new user under the next id.

        Raises:
            ValidationError: If the candidate fails USER_RULES.
        """
        self._ensure_valid(candidate)

        with self._lock:
            user = User(
                id=self._next_id,
                name=candidate.name,
                title=candidate.title,
                email=candidate.email,
            )
            self._next_id += 1
            self._users[user.id] = user
            created = replace(user)

        logger.debug(f"Created user {created.id}")
        return created

    def update(self, user_id: int, replacement: UserPayload) -> Optional[User]:
        """
        Overwrite name, title and email of an existing user.

        Returns:
            The updated user, or None if no user has this id.

        Raises:
            ValidationError: If the replacement fails USER_RULES.
        """
        self._ensure_valid(replacement)

        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            user.name = replacement.name
            user.title = replacement.title
            user.email = replacement.email
            return replace(user)

    def delete(self, user_id: int) -> bool:
        """Remove a user. False if there was none."""
        with self._lock:
            return self._users.pop(user_id, None) is not None

    @property
    def next_id(self) -> int:
        """The id the next create() will assign."""
        with self._lock:
            return self._next_id

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)

    @staticmethod
    def _ensure_valid(candidate: UserPayload) -> None:
        result = validate_user(candidate)
        if not result.is_valid:
            raise ValidationError(result.errors)
