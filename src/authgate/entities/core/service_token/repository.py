from sqlmodel import Session, col, select

from src.authgate.entities.core.service_token.entity import ServiceTokenRecord
from src.authgate.entities.core.service_token.table import ServiceTokenTable


class ServiceTokenRepository:
    """Data-access layer for the cached service token."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def latest(self) -> ServiceTokenRecord | None:
        statement = select(ServiceTokenTable).order_by(
            col(ServiceTokenTable.expires_at).desc()
        )
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return ServiceTokenRecord.model_validate(row, from_attributes=True)

    def replace(self, record: ServiceTokenRecord) -> None:
        """Truncate the table and store ``record`` in one transaction."""
        try:
            for row in self._session.exec(select(ServiceTokenTable)).all():
                self._session.delete(row)
            self._session.add(ServiceTokenTable(**record.model_dump()))
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
