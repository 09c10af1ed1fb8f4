"""Manager password gate for setup and upload requests.

The password is stored in plaintext in the config document and compared with
``hmac.compare_digest``, which gives the same answer as string equality
without leaking the match position through timing.
"""

from __future__ import annotations

import hmac
import logging

from statusgate.config import MIN_PASSWORD_LENGTH
from statusgate.errors import InvalidInputError, NotReadyError, UnauthorizedError
from statusgate.session import SessionTracker
from statusgate.storage import ConfigStore, ManagerConfig

logger = logging.getLogger(__name__)


def _matches(provided: str, expected: str) -> bool:
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


class AuthGate:
    """Owns the in-memory manager password and the rules for changing it."""

    def __init__(
        self,
        store: ConfigStore,
        session: SessionTracker,
        *,
        initial_password: str = "",
    ) -> None:
        self._store = store
        self._session = session
        saved = store.load().manager_password
        self._password = saved or initial_password
        if not saved and initial_password:
            logger.info("Using manager password from environment (not saved yet)")

    @property
    def is_configured(self) -> bool:
        return bool(self._password)

    def complete_setup(self, password: str, current_password: str | None = None) -> None:
        """Set a new manager password.

        Raises:
            NotReadyError: If the messaging session is not linked yet
            UnauthorizedError: If a password exists and ``current_password`` differs
            InvalidInputError: If the new password is too short
            StorageError: If the config cannot be saved (password unchanged)
        """
        password = (password or "").strip()
        current_password = (current_password or "").strip()

        if not self._session.state.is_ready:
            raise NotReadyError("Scan the QR code first.")

        if self._password and not _matches(current_password, self._password):
            logger.warning("Setup rejected: current password mismatch")
            raise UnauthorizedError("Current password is incorrect.")

        if len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidInputError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
            )

        self._store.save(ManagerConfig(manager_password=password))
        replaced = bool(self._password)
        self._password = password
        logger.info("Manager password changed" if replaced else "Manager password set")

    def authorize_upload(self, provided: str | None) -> bool:
        """Check an upload password; always false until a password is set."""
        if not self._password:
            return False
        return _matches(provided or "", self._password)
