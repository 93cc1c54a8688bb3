"""
User Models
Client-side views of the backend's user and session objects
"""

from typing import Optional, Dict, Any
from datetime import datetime
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True)
class User:
    """Signed-in user, immutable; replaced wholesale on update"""
    id: str
    email: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict, hash=False)
    email_confirmed_at: Optional[datetime] = None

    def __post_init__(self):
        # Freeze the metadata mapping so snapshots cannot be edited in place
        object.__setattr__(self, 'metadata', MappingProxyType(dict(self.metadata)))

    @classmethod
    def from_supabase(cls, user) -> "User":
        """Build from a supabase auth User object"""
        return cls(
            id=str(user.id),
            email=user.email,
            metadata=dict(user.user_metadata or {}),
            email_confirmed_at=getattr(user, 'email_confirmed_at', None),
        )

    @property
    def is_email_confirmed(self) -> bool:
        return self.email_confirmed_at is not None

    @property
    def username(self) -> Optional[str]:
        value = self.metadata.get('username')
        return value if isinstance(value, str) and value else None

    @property
    def avatar_url(self) -> Optional[str]:
        value = self.metadata.get('avatar_url')
        return value if isinstance(value, str) and value else None

    def display_name(self, fallback: str) -> str:
        """Username from metadata, else the local part of the email, else fallback"""
        if self.username:
            return self.username
        if self.email:
            local_part = self.email.split('@', 1)[0]
            if local_part:
                return local_part
        return fallback


@dataclass(frozen=True)
class Session:
    """Backend credential bundle; the access token is opaque to the client"""
    access_token: str
    user: User
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None

    @classmethod
    def from_supabase(cls, session) -> "Session":
        """Build from a supabase auth Session object"""
        return cls(
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            expires_at=session.expires_at,
            user=User.from_supabase(session.user),
        )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if session is expired"""
        if self.expires_at is None:
            return False
        now = now or datetime.now()
        return now.timestamp() >= self.expires_at

    @property
    def authorization_header(self) -> str:
        return f"Bearer {self.access_token}"
