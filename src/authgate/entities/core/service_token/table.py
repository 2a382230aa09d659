"""Service token database table model."""

from sqlmodel import Field, SQLModel


class ServiceTokenTable(SQLModel, table=True):
    """Single-row table; every mint replaces its content."""

    id: int | None = Field(default=None, primary_key=True)
    access_token: str
    issued_at: int
    expires_at: int = Field(index=True)
