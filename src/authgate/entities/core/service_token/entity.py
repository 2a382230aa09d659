"""Service token domain model."""

from pydantic import BaseModel, Field


class ServiceTokenRecord(BaseModel):
    """Most recent Google service-account bearer credential."""

    access_token: str = Field(description='Token including its type, e.g. "Bearer xyz"')
    issued_at: int = Field(description="Issue time, epoch seconds")
    expires_at: int = Field(description="Expiry time, epoch seconds")

    def is_fresh(self, now: float, margin_seconds: int = 60) -> bool:
        """True while the token stays valid for more than ``margin_seconds``."""
        return self.expires_at > now + margin_seconds
