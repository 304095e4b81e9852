"""Bearer-token session backed by QSettings."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from PyQt5.QtCore import QSettings

from pharmabill import config

logger = logging.getLogger(__name__)


class SessionStore:
    """Holds the API token and mirrors it into persistent settings."""

    def __init__(self, settings: Optional[QSettings] = None, key: str = config.TOKEN_SETTINGS_KEY) -> None:
        self._settings = settings or QSettings(config.SETTINGS_ORGANIZATION, config.SETTINGS_APPLICATION)
        self._key = key
        self._token: Optional[str] = None

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    def init_from_persisted(self) -> bool:
        """Load a previously stored token; returns True when one was found."""
        stored = self._settings.value(self._key, "", type=str)
        self._token = stored or None
        if self._token:
            logger.info("Restored persisted session token")
        return self._token is not None

    def set(self, token: str) -> None:
        if not token:
            return
        self._token = token
        self._settings.setValue(self._key, token)
        self._settings.sync()

    def clear(self) -> None:
        self._token = None
        self._settings.remove(self._key)
        self._settings.sync()

    def auth_header(self) -> Dict[str, str]:
        if not self._token:
            return {}
        return {"Authorization": f"Bearer {self._token}"}
