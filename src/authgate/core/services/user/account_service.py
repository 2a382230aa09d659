"""Username/password accounts."""

from loguru import logger

from src.authgate.core.errors import InvalidCredentials, NotFound
from src.authgate.core.security import CredentialVerifier
from src.authgate.entities.core.user.entity import User
from src.authgate.entities.core.user.repository import UserRepository


class LocalAccountService:
    def __init__(self, users: UserRepository, verifier: CredentialVerifier):
        self._users = users
        self._verifier = verifier

    def signup(self, username: str, password: str) -> User:
        """Register a local account.

        Only the derived credential is stored, never the password.

        Raises:
            ConstraintViolation: A local account already uses ``username``.
        """
        credential = self._verifier.create(password)
        user = self._users.insert(User(username=username, credential=credential))
        logger.info(f"Registered local account {user.id}")
        return user

    def login(self, username: str, password: str) -> User:
        """Authenticate a local account.

        The credential check runs whether or not the account exists so both failures
        look the same to the caller.
        """
        user = self._users.find_local(username)
        credential = user.credential if user is not None else None
        if not self._verifier.verify(credential, password) or user is None:
            raise InvalidCredentials()
        return user

    def whoami(self, uid: str | None) -> User:
        if uid is None:
            raise NotFound()
        return self._users.get_by_key(uid)
