"""JSON-over-HTTPS client for the pharmacy API."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from pharmabill import config
from pharmabill.data.session import SessionStore
from pharmabill.errors import NotFoundError, TransientApiError

logger = logging.getLogger(__name__)


class ApiClient:
    """Thin wrapper over a requests session; raises ApiError subclasses."""

    def __init__(
        self,
        session_store: SessionStore,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.session_store = session_store
        self.base_url = (base_url or config.API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.API_TIMEOUT
        self._http = http or requests.Session()
        self._http.headers.update(
            {"Content-Type": "application/json", "Accept": "application/json"}
        )

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        url = self._url(path)
        if params:
            params = {k: v for k, v in params.items() if v not in (None, "")}
        logger.debug("%s %s params=%s", method, url, params)
        try:
            response = self._http.request(
                method,
                url,
                params=params or None,
                json=json,
                headers=self.session_store.auth_header(),
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as exc:
            logger.warning("%s %s timed out", method, url)
            raise TransientApiError(f"Request timed out: {method} {path}") from exc
        except requests.exceptions.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise TransientApiError(f"Could not reach server: {exc}") from exc

        if response.status_code >= 400:
            self._raise_for_status(method, path, response)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    def _raise_for_status(self, method: str, path: str, response: requests.Response) -> None:
        status = response.status_code
        server_message = self._server_message(response)
        if status == 401:
            logger.warning("Unauthorized response for %s %s; session token may be stale", method, path)
        detail = f"{method} {path} failed with HTTP {status}"
        if status == 404:
            raise NotFoundError(detail, status_code=status, server_message=server_message)
        logger.warning("%s: %s", detail, server_message or response.reason)
        raise TransientApiError(detail, status_code=status, server_message=server_message)

    @staticmethod
    def _server_message(response: requests.Response) -> Optional[str]:
        try:
            payload = response.json()
        except ValueError:
            return None
        if isinstance(payload, dict):
            message = payload.get("message")
            if message:
                return str(message)
        return None

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)
