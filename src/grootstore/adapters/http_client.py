"""
HTTP adapter — unauthenticated GET of vendor artifacts via httpx.

Adapter layer — implements the ResourceFetcher port using httpx for sync
HTTP calls. Redirects are followed (GitHub archive URLs redirect to codeload).

Retry/backoff via tenacity on transient errors (network, timeout) only.
A non-2xx status is not retried here: it is returned as a failure so the
caller decides (the Microsoft batch downloader retries at pass level).
All HTTP errors are captured into Result failures — no exceptions
leak to the business logic layer.
"""

from __future__ import annotations

from pathlib import Path

import httpx
import structlog
from railway import ErrorCode
from railway.result import Result
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

log = structlog.get_logger()

_USER_AGENT = "grootstore/0.1.0"


def _error_code_for(exc: Exception) -> ErrorCode:
    match exc:
        case httpx.HTTPStatusError() if exc.response.status_code == 429:
            return ErrorCode.RATE_LIMIT_ERROR
        case httpx.TimeoutException():
            return ErrorCode.TIMEOUT_ERROR
        case _:
            return ErrorCode.EXTERNAL_SERVICE_ERROR


class HttpResourceFetcher:
    """
    Fetch remote resources with HTTP GET.

    Implements the ResourceFetcher port.
    Uses tenacity retry on transient network errors only.
    """

    def __init__(self, timeout: int = 60) -> None:
        self._timeout = timeout

    def get(self, url: str) -> Result[bytes]:
        """
        Download `url` fully into memory.

        Returns Result[bytes] with the response body on a 2xx response,
        or Result.failure(EXTERNAL_SERVICE_ERROR | RATE_LIMIT_ERROR | TIMEOUT_ERROR, ...).
        """
        try:
            return Result.success(self._do_get(url))
        except Exception as e:
            log.warning("http.get_failed", url=url, error=str(e))
            return Result.failure(_error_code_for(e), f"GET {url} failed", e)

    def download_to_file(self, url: str, destination: Path) -> Result[Path]:
        """
        Stream `url` into `destination`, replacing any existing file.

        Returns Result[Path] with the destination on success. On failure the
        partially written file is left in place for inspection.
        """
        try:
            return Result.success(self._do_stream(url, destination))
        except Exception as e:
            log.warning("http.download_failed", url=url, error=str(e))
            return Result.failure(_error_code_for(e), f"Download of {url} failed", e)

    def _client(self) -> httpx.Client:
        return httpx.Client(
            timeout=self._timeout,
            follow_redirects=True,
            headers={"User-Agent": _USER_AGENT},
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=0.1, max=30),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
        reraise=True,
    )
    def _do_get(self, url: str) -> bytes:
        """HTTP GET with retry — exceptions are turned into failures by get()."""
        with self._client() as client:
            response = client.get(url)
            response.raise_for_status()
            data = response.content
            log.debug("http.get_complete", url=url, size_bytes=len(data))
            return data

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=0.1, max=30),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
        reraise=True,
    )
    def _do_stream(self, url: str, destination: Path) -> Path:
        """Streaming GET with retry — the body never sits fully in memory."""
        with self._client() as client, client.stream("GET", url) as response:
            response.raise_for_status()
            size = 0
            with destination.open("wb") as out:
                for chunk in response.iter_bytes():
                    out.write(chunk)
                    size += len(chunk)
            log.debug("http.download_complete", url=url, path=str(destination), size_bytes=size)
            return destination
