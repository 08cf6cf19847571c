from typing import Any, Dict, Optional

import httpx
from loguru import logger
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from fantavoti.models.enums import ErrorKind
from fantavoti.models.errors import VotesError

# Define common HTTP status codes that warrant a retry
RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


def is_transient(exc: BaseException) -> bool:
    """Transport failures and retryable statuses are worth another attempt."""
    if not isinstance(exc, VotesError) or exc.kind is not ErrorKind.NETWORK:
        return False
    return exc.status is None or exc.status in RETRYABLE_STATUS_CODES


class BaseClient:
    """Owns the httpx client and the request/retry plumbing shared by API clients."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        timeout: float = 30.0,
        max_attempts: int = 3,
        retry_wait: float = 1.0,
        log=logger,
    ):
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        )
        self.max_attempts = max_attempts
        self.retry_wait = retry_wait
        self.log = log  # Used when closed through the async context manager

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close(log=self.log)

    def _retrying(self, log=logger) -> AsyncRetrying:
        """Retry policy for idempotent downloads (1s, 2s, 4s... capped at 10s)."""

        def before_sleep(retry_state) -> None:
            exc = retry_state.outcome.exception()
            log.warning(
                f"Attempt {retry_state.attempt_number}/{self.max_attempts} failed: {exc}. Retrying..."
            )

        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(
                multiplier=self.retry_wait, min=self.retry_wait, max=10 * self.retry_wait
            ),
            retry=retry_if_exception(is_transient),
            before_sleep=before_sleep,
            reraise=True,  # Reraise the last VotesError after max attempts
        )

    async def _make_request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        json_data: Optional[Dict[str, Any]] = None,
        log=logger,
    ) -> httpx.Response:
        """Sends a single request. Status handling is left to the caller."""
        log.debug(f"Making request {method} {url}")
        try:
            response = await self.client.request(method, url, headers=headers, json=json_data)
        except httpx.RequestError as e:
            log.error(f"Request error for {method} {url}: {e}")
            raise VotesError.network(f"Request to {url} failed: {e}", url=url) from e
        log.debug(f"HTTP {response.status_code} for {url}")
        return response

    async def close(self, *, log=logger) -> None:
        """Closes the underlying HTTP client."""
        await self.client.aclose()
        log.debug("Closed HTTP client")
