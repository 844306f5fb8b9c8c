"""Session models."""

import time
from typing import Literal

from pydantic import BaseModel, Field

AuthSource = Literal["directory", "local"]


class UserSession(BaseModel):
    """Session issued after a successful authentication."""

    id: str = Field(description="Session token")
    username: str = Field(description="Username the session is bound to")
    user_id: str = Field(description="Internal user ID")
    auth_source: AuthSource = Field(description="Which authenticator accepted the credential")
    created_at: int = Field(description="Creation timestamp")
    last_accessed_at: int = Field(description="Last access timestamp")
    expires_at: int = Field(description="Session expiration timestamp")

    @classmethod
    def create(
        cls,
        session_id: str,
        username: str,
        user_id: str,
        auth_source: AuthSource,
        session_max_age: int = 3600,
    ) -> "UserSession":
        """Create a new user session with timestamps."""
        now = int(time.time())
        return cls(
            id=session_id,
            username=username,
            user_id=user_id,
            auth_source=auth_source,
            created_at=now,
            last_accessed_at=now,
            expires_at=now + session_max_age,
        )

    def is_expired(self) -> bool:
        """Check if session is expired."""
        return time.time() > self.expires_at

    def update_access(self) -> None:
        """Update last accessed time."""
        self.last_accessed_at = int(time.time())
