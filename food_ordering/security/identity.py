"""
Identity Types

The Identity is derived from a verified token on every request and is never
persisted. Role is a flat label compared by equality.
"""

import enum
from dataclasses import dataclass
from datetime import datetime


class Role(str, enum.Enum):
    """Capability label carried by an identity."""
    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class Identity:
    """
    Verified caller.

    Attributes:
        user_id: Opaque user identifier (token subject)
        username: Username at issuance time
        role: Role claim at issuance time
        issued_at: Token issue time (UTC)
        expires_at: Token expiry time (UTC)
    """
    user_id: str
    username: str
    role: Role
    issued_at: datetime
    expires_at: datetime

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
