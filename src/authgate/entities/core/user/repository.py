"""User directory: data-access layer for user records."""

from collections.abc import Mapping
from typing import Any

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from src.authgate.core.errors import ConstraintViolation, NotFound
from src.authgate.entities.core._base import utc_now
from src.authgate.entities.core.user.entity import User
from src.authgate.entities.core.user.table import UserTable


class UserRepository:
    """Data-access layer for users.

    Every write commits on its own; a record is the unit of atomicity.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_key(self, key: str) -> User:
        row = self._session.get(UserTable, key)
        if row is None:
            raise NotFound()
        return User.model_validate(row, from_attributes=True)

    def find_one(self, predicate: Mapping[str, Any]) -> User | None:
        """Return the first user whose fields equal every value in ``predicate``."""
        statement = select(UserTable)
        for field, value in predicate.items():
            if field not in UserTable.model_fields:
                raise ValueError(f"Unknown user field: {field}")
            statement = statement.where(getattr(UserTable, field) == value)
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def find_local(self, username: str) -> User | None:
        """Return the locally-registered user with ``username``, if any."""
        statement = select(UserTable).where(
            UserTable.username == username, col(UserTable.credential).is_not(None)
        )
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def insert(self, user: User) -> User:
        row = UserTable.model_validate(user.model_dump())
        self._session.add(row)
        self._commit()
        self._session.refresh(row)
        return User.model_validate(row, from_attributes=True)

    def update(self, key: str, fields: Mapping[str, Any]) -> User:
        """Merge ``fields`` into the stored record."""
        row = self._session.get(UserTable, key)
        if row is None:
            raise NotFound()
        for field, value in fields.items():
            if field in ("id", "created_at") or field not in UserTable.model_fields:
                raise ValueError(f"Field cannot be updated: {field}")
            setattr(row, field, value)
        row.updated_at = utc_now()
        self._session.add(row)
        self._commit()
        self._session.refresh(row)
        return User.model_validate(row, from_attributes=True)

    def _commit(self) -> None:
        try:
            self._session.commit()
        except IntegrityError as e:
            self._session.rollback()
            logger.info("User write rejected by a uniqueness constraint")
            raise ConstraintViolation() from e
