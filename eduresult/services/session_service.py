"""
Session Service
Holds the admin flag for the current session
"""
import logging
from typing import Optional

from eduresult.config import settings
from eduresult.core import StorageKeys
from eduresult.services.persistence import KeyValueBackend, MemoryBackend

logger = logging.getLogger(__name__)


class SessionService:
    """
    Ephemeral ``is_admin`` flag checked against fixed credentials.

    The flag lives in a session-scoped backend (memory by default) and is
    cleared on logout. It gates the admin routes for a single operator and
    is not a security mechanism.
    """

    def __init__(self, backend: Optional[KeyValueBackend] = None):
        self.backend = backend or MemoryBackend()

    @property
    def is_admin(self) -> bool:
        return self.backend.get(StorageKeys.IS_ADMIN) == "true"

    def login(self, username: str, password: str) -> bool:
        if username == settings.ADMIN_USERNAME and password == settings.ADMIN_PASSWORD:
            self.backend.set(StorageKeys.IS_ADMIN, "true")
            logger.info("Admin session started")
            return True

        logger.warning(f"Rejected login for user {username!r}")
        return False

    def logout(self) -> None:
        self.backend.delete(StorageKeys.IS_ADMIN)
        logger.info("Admin session ended")
