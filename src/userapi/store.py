"""
=============================================================================
IN-MEMORY USER STORE
=============================================================================

The single owner of the user collection. Handlers never see the underlying
list; they get back User values (immutable) or plain None/False for "not
found".

=============================================================================
ID ASSIGNMENT
=============================================================================

    seed:            [1 Alice, 2 Bob]          next id = 3
    create Carl  →   [1 Alice, 2 Bob, 3 Carl]  next id = 4
    delete 3     →   [1 Alice, 2 Bob]          next id = 4   (not 3!)
    create Dana  →   [1 Alice, 2 Bob, 4 Dana]  next id = 5

The store remembers the highest id it has ever held, so ids are never
reused even when the newest record is deleted.

=============================================================================
LOCKING
=============================================================================

Worker threads call the store concurrently. Every operation takes the same
lock, so "pick next id, then append" can never interleave with another
create, and readers never observe a half-applied update.

=============================================================================
"""

import logging
import threading
from dataclasses import replace
from typing import Iterable, List, Optional

from .models import User, SEED_USERS


logger = logging.getLogger(__name__)


class UserStore:
    """
    Thread-safe in-memory user collection, ordered by insertion.

        store = UserStore.seeded()
        carl = store.create_user("Carl", "carl@x.com")   # User(id=3, ...)
        store.get_user(3)                                # User(id=3, ...)
        store.delete_user(3)                             # True
        store.delete_user(3)                             # False
    """

    def __init__(self, users: Iterable[User] = ()):
        self._users: List[User] = []
        self._lock = threading.Lock()
        self._last_id = 0

        for user in users:
            if any(existing.id == user.id for existing in self._users):
                raise ValueError(f"Duplicate user id in seed data: {user.id}")
            self._users.append(user)
            self._last_id = max(self._last_id, user.id)

    @classmethod
    def seeded(cls) -> "UserStore":
        """A store holding the startup records (Alice and Bob)."""
        return cls(SEED_USERS)

    # =========================================================================
    # READS
    # =========================================================================

    def list_users(self) -> List[User]:
        """All users in insertion order (a new list each call)."""
        with self._lock:
            return list(self._users)

    def get_user(self, user_id: int) -> Optional[User]:
        """The user with this id, or None."""
        with self._lock:
            index = self._find(user_id)
            return self._users[index] if index is not None else None

    # =========================================================================
    # WRITES
    # =========================================================================

    def create_user(self, name: Optional[str], email: Optional[str]) -> User:
        """
        Append a new user and return it.

        The id is always assigned here; callers cannot choose one.
        """
        with self._lock:
            self._last_id += 1
            user = User(id=self._last_id, name=name, email=email)
            self._users.append(user)

        logger.debug(f"Created user {user.id}")
        return user

    def update_user(
        self,
        user_id: int,
        name: Optional[str],
        email: Optional[str]
    ) -> Optional[User]:
        """
        Replace name and email of an existing user.

        The record keeps its id and its position. Returns the updated user,
        or None (and changes nothing) if the id is unknown.
        """
        with self._lock:
            index = self._find(user_id)
            if index is None:
                return None

            user = replace(self._users[index], name=name, email=email)
            self._users[index] = user

        logger.debug(f"Updated user {user_id}")
        return user

    def delete_user(self, user_id: int) -> bool:
        """Remove a user. False if there was no such user."""
        with self._lock:
            index = self._find(user_id)
            if index is None:
                return False
            del self._users[index]

        logger.debug(f"Deleted user {user_id}")
        return True

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _find(self, user_id: int) -> Optional[int]:
        # caller holds self._lock
        for index, user in enumerate(self._users):
            if user.id == user_id:
                return index
        return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)

    def __contains__(self, user_id: object) -> bool:
        with self._lock:
            return any(user.id == user_id for user in self._users)
