"""Store profile lookup for receipt headers."""

from __future__ import annotations

import logging
from typing import Optional

from pharmabill.data.api_client import ApiClient
from pharmabill.errors import ApiError
from pharmabill.models.store import StoreProfile

logger = logging.getLogger(__name__)


class SettingsRepository:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def store_profile(self, defaults: Optional[StoreProfile] = None) -> StoreProfile:
        """Fetch /settings; the route may be restricted, so fall back to defaults."""
        profile = defaults or StoreProfile()
        try:
            data = self.client.get("/settings")
        except ApiError as exc:
            logger.info("Store settings unavailable, using defaults: %s", exc)
            return profile
        if not isinstance(data, dict):
            return profile
        return profile.merged_with(data)
