"""HTTP client for the remote dispatch API."""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

import httpx

from ...config import settings

logger = logging.getLogger(__name__)


class DispatchNotConfiguredError(ValueError):
    """Dispatch API host or credentials are missing."""


class DispatchAPIError(RuntimeError):
    """The dispatch API rejected a request or answered with an error body."""

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class DispatchClient:
    def __init__(
        self,
        host: str | None = None,
        api_path: str | None = None,
        app_key: str | None = None,
        secret_key: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
    ) -> None:
        self.host = host or settings.dispatch_host
        self.app_key = app_key or settings.dispatch_app_key
        self.secret_key = secret_key or settings.dispatch_secret_key
        if not self.host:
            raise DispatchNotConfiguredError("Dispatch API host is not configured.")
        if not self.app_key or not self.secret_key:
            raise DispatchNotConfiguredError("Dispatch API credentials are not configured.")
        self.api_path = (api_path or settings.dispatch_api_path).strip("/")
        self.timeout = timeout if timeout is not None else settings.dispatch_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.dispatch_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.dispatch_backoff_seconds

    @property
    def base_url(self) -> str:
        return f"https://{self.host}/{self.api_path}"

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            auth=httpx.BasicAuth(self.app_key, self.secret_key),
            headers={"Content-Type": "application/json"},
        )

    def request(self, method: str, endpoint: str, body: Optional[dict] = None) -> Optional[dict]:
        """Call the dispatch API and return the decoded JSON reply (``None`` when empty).

        Network errors and timeouts are retried with exponential backoff. HTTP
        error statuses and error bodies are not retried.
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        params = {"app_key": self.app_key}
        logger.info("Dispatch API request ---> %s %s", method, url)
        if body is not None:
            logger.debug("Dispatch API request body: %s", body)

        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.request(method, url, params=params, json=body)
                    break
                except (httpx.TimeoutException, httpx.NetworkError) as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning("Dispatch API request failed after %d attempts: %s", attempt, exc)
                        raise ConnectionError(f"Failed to reach dispatch API at {self.base_url}: {exc}") from exc
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(
                        "Dispatch API error, retrying in %.1fs (attempt %d/%d): %s",
                        wait_time,
                        attempt,
                        self.max_retries,
                        exc,
                    )
                    time.sleep(wait_time)
        finally:
            client.close()

        logger.info("Dispatch API response <--- status %s", response.status_code)
        text = response.text
        if response.is_error:
            logger.error("Dispatch API error %s: %s", response.status_code, text)
            raise DispatchAPIError(
                f"API call failed with status {response.status_code}: {text or response.reason_phrase}",
                status_code=response.status_code,
                body=text,
            )
        if response.status_code == 204 or not text:
            return None

        try:
            data = response.json()
        except ValueError as exc:
            raise DispatchAPIError("Dispatch API returned a non-JSON response.", response.status_code, text) from exc
        if not isinstance(data, dict):
            raise DispatchAPIError("Dispatch API returned an unexpected response.", response.status_code, text)

        status_block = data.get("status") if isinstance(data.get("status"), dict) else {}
        if data.get("error") or status_block.get("type") == "error":
            message = data.get("message") or status_block.get("message") or "Unknown API error"
            logger.error("Dispatch API logic error: %s", message)
            raise DispatchAPIError(f"API Error: {message}", response.status_code, text)
        return data

    def update_journey(self, journey_payload: dict) -> dict[str, Any]:
        """Create or update a journey; returns the reply's ``body`` block."""
        data = self.request("POST", "journey/update", body=journey_payload)
        if not data:
            return {}
        return data.get("body") or {}


def extract_journey_id(body: dict[str, Any]) -> Any:
    journeys = body.get("journeys") or []
    if not journeys or not isinstance(journeys[0], dict):
        return None
    return journeys[0].get("id")


def check_health(client: DispatchClient | None = None) -> bool:
    """Check that the dispatch API host answers at all."""
    if client is None:
        if not settings.dispatch_configured:
            return False
        client = DispatchClient()
    try:
        http = client._get_client()
        try:
            response = http.get(client.base_url, params={"app_key": client.app_key})
        finally:
            http.close()
        return response.status_code < 500
    except httpx.HTTPError:
        return False
