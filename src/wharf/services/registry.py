"""HTTP client for the package registry API.

Every request goes through ``RegistryClient._call``, which applies the
shared retry policy: transport errors and gateway statuses are retried
with exponential backoff a bounded number of times, everything else is
returned to the caller as-is.
"""

import logging
from datetime import datetime
from typing import Any

import httpx
from tenacity import (
    RetryError,
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..constants import (
    REGISTRY_BACKOFF_MAX,
    REGISTRY_BACKOFF_MULTIPLIER,
    REGISTRY_MAX_ATTEMPTS,
    REGISTRY_TIMEOUT,
    RETRYABLE_STATUS_CODES,
)
from ..errors import OfflineError, RegistryError
from ..models.job import JobStatus, LogLevel, format_timestamp
from ..models.metadata import RegistryMetadata

logger = logging.getLogger(__name__)


class _RetryableStatus(Exception):
    """Internal marker for gateway errors worth retrying."""

    def __init__(self, response: httpx.Response):
        self.response = response
        super().__init__(f"HTTP {response.status_code}")


class RegistryClient:
    """Client for the registry's publish, metadata, solve and job endpoints."""

    def __init__(
        self,
        base_url: str,
        *,
        offline: bool = False,
        timeout: float = REGISTRY_TIMEOUT,
        max_attempts: int = REGISTRY_MAX_ATTEMPTS,
        backoff_multiplier: float = REGISTRY_BACKOFF_MULTIPLIER,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.offline = offline
        self.max_attempts = max_attempts
        self.backoff_multiplier = backoff_multiplier
        self._client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "RegistryClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        response = self._client.request(method, url, **kwargs)
        if response.status_code in RETRYABLE_STATUS_CODES:
            raise _RetryableStatus(response)
        return response

    def _call(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Issue a request under the shared backoff policy.

        Raises:
            OfflineError: If running offline; nothing is sent
            RegistryError: If the registry stays unreachable after max_attempts tries
        """
        url = f"{self.base_url}{path}"
        if self.offline:
            raise OfflineError(
                f"Cannot {method} {url}: wharf is running offline. "
                "Publishing needs the registry; rerun without --offline."
            )
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff_multiplier, max=REGISTRY_BACKOFF_MAX),
            retry=retry_if_exception_type((httpx.TransportError, _RetryableStatus)),
            before_sleep=before_sleep_log(logger, logging.DEBUG),
        )
        try:
            return retrying(self._send, method, url, **kwargs)
        except RetryError as e:
            last = e.last_attempt.exception()
            if isinstance(last, _RetryableStatus):
                return last.response
            raise RegistryError(
                f"Registry unreachable at {url} after {self.max_attempts} attempts: {last}"
            ) from last

    def get_metadata(self, name: str) -> RegistryMetadata | None:
        """Fetch metadata for a package, None if the registry has no record."""
        response = self._call("GET", f"/metadata/{name}")
        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise RegistryError(
                f"Could not fetch metadata for '{name}' (HTTP {response.status_code}):\n"
                f"{response.text}"
            )
        try:
            return RegistryMetadata.model_validate_json(response.text)
        except ValueError as e:
            raise RegistryError(f"Could not parse metadata for '{name}': {e}") from e

    def solve(self, ranges: dict[str, str], compiler: str) -> dict[str, str]:
        """Resolve dependency ranges to a full transitive build plan."""
        response = self._call(
            "POST", "/solve", json={"compiler": compiler, "dependencies": ranges}
        )
        if response.status_code != 200:
            raise RegistryError(
                f"Could not solve dependencies (HTTP {response.status_code}):\n{response.text}"
            )
        try:
            resolutions = response.json()["resolutions"]
        except (ValueError, KeyError, TypeError) as e:
            raise RegistryError(f"Could not parse solver response: {response.text}") from e
        if not isinstance(resolutions, dict):
            raise RegistryError(f"Could not parse solver response: {response.text}")
        return {str(k): str(v) for k, v in resolutions.items()}

    def publish(self, payload: dict[str, Any]) -> httpx.Response:
        """POST a publish request; interpreting the response is up to the caller."""
        return self._call("POST", "/publish", json=payload)

    def get_job(
        self,
        job_id: str,
        since: datetime | None = None,
        level: LogLevel = LogLevel.INFO,
    ) -> JobStatus:
        """Fetch job status and log lines newer than ``since``."""
        params = {"level": level.query_value}
        if since is not None:
            params["since"] = format_timestamp(since)
        response = self._call("GET", f"/jobs/{job_id}", params=params)
        if response.status_code != 200:
            raise RegistryError(
                f"Could not fetch status of job {job_id} (HTTP {response.status_code}):\n"
                f"{response.text}"
            )
        try:
            return JobStatus.model_validate_json(response.text)
        except ValueError as e:
            raise RegistryError(f"Could not parse status of job {job_id}: {e}") from e
