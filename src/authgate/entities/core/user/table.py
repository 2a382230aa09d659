"""User database table model."""

from sqlalchemy import Column, Index, String, text
from sqlmodel import Field

from src.authgate.entities.core._base import EntityTable

_LOCAL_ONLY = text("credential IS NOT NULL")


class UserTable(EntityTable, table=True):
    """Database persistence model for users.

    Usernames are unique among locally-registered accounts only (partial index on rows
    that carry a credential); OAuth-created accounts may share a username.
    """

    __table_args__ = (
        Index(
            "uq_user_local_username",
            "username",
            unique=True,
            sqlite_where=_LOCAL_ONLY,
            postgresql_where=_LOCAL_ONLY,
        ),
    )

    username: str = Field(sa_column=Column(String(255), nullable=False, index=True))
    email: str | None = Field(default=None, index=True)
    credential: str | None = None
    github_id: str | None = Field(default=None, index=True)
    github_token: str | None = None
    google_id: str | None = None
    google_token: str | None = None
    facebook_id: str | None = None
    facebook_token: str | None = None
    linkedin_token: str | None = None
    picture_url: str | None = None
