"""
User record.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class User:
    """
    A user as stored and as sent over the wire.

    Frozen: the store replaces a record on update instead of mutating it,
    so a User handed to a handler never changes under its feet.

    name and email are not validated; a body without them stores null.
    """

    id: int
    name: Optional[str]
    email: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        """JSON shape: {"id": 1, "name": "Alice", "email": "alice@..."}."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
        }


SEED_USERS = (
    User(id=1, name="Alice", email="alice@techhive.com"),
    User(id=2, name="Bob", email="bob@techhive.com"),
)
