"""Session model attached to every client of the gateway."""

import time

from pydantic import BaseModel, Field


class GatewaySession(BaseModel):
    """Server-side session; transported by id in a header or cookie."""

    id: str = Field(description="Session identifier")
    uid: str | None = Field(default=None, description="Key of the signed-in user")
    provider_tokens: dict[str, str] = Field(
        default_factory=dict,
        description="Access token of the last OAuth2 sign-in, per provider",
    )
    created_at: int = Field(description="Creation timestamp")
    expires_at: int = Field(description="Expiration timestamp")

    @classmethod
    def create(cls, session_id: str, ttl_seconds: int) -> "GatewaySession":
        """Create a new anonymous session with timestamps."""
        now = int(time.time())
        return cls(id=session_id, created_at=now, expires_at=now + ttl_seconds)

    def is_expired(self) -> bool:
        return time.time() > self.expires_at

    @property
    def is_authenticated(self) -> bool:
        return self.uid is not None
