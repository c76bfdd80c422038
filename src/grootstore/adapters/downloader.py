"""
Batch downloader — sequential, throttled, bounded until-success retry.

Adapter layer — drives a ResourceFetcher over a list of identifiers for
servers that rate limit per IP (crt.sh):

  pass 1:  every identifier, fixed delay before each request
  pass n:  exactly the identifiers that failed in pass n-1
  stop:    a pass with zero failures, or `max_passes` passes

A failed request (bad status or transport error) is recorded and the pass
continues. Successful bodies are converted to PEM and appended to a shared
accumulator under a lock. The accumulator carries across passes, so each
good identifier contributes exactly once.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Sequence

import structlog
from railway import ErrorCode
from railway.result import Result

from grootstore.domain.models import BatchReport
from grootstore.domain.pem import armor_certificate, contains_pem, extract_certificates
from grootstore.domain.ports import ResourceFetcher

log = structlog.get_logger()


def body_to_pem(body: bytes) -> bytes:
    """PEM text is kept as-is; anything else is treated as DER and armored."""
    if contains_pem(body):
        return body if body.endswith(b"\n") else body + b"\n"
    return armor_certificate(body)


class IncompleteBatchError(Exception):
    """Raised into a failure when identifiers still fail after the last pass."""

    def __init__(self, report: BatchReport) -> None:
        super().__init__(
            f"{len(report.failed)} identifier(s) still failing after {report.passes} pass(es)"
        )
        self.report = report


class BatchDownloader:
    """
    Fetch many small resources one at a time with a fixed inter-request delay.

    `url_for` maps an identifier (fingerprint or link) to the URL to fetch.
    `sleep` is injectable so tests do not wait.
    """

    def __init__(
        self,
        fetcher: ResourceFetcher,
        url_for: Callable[[str], str],
        delay_seconds: float = 2.0,
        max_passes: int = 5,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_passes < 1:
            raise ValueError("max_passes must be at least 1")
        self._fetcher = fetcher
        self._url_for = url_for
        self._delay_seconds = delay_seconds
        self._max_passes = max_passes
        self._sleep = sleep

    def download_all(self, identifiers: Sequence[str]) -> Result[BatchReport]:
        """
        Fetch every identifier, retrying failures in later passes.

        Returns Success(BatchReport) when every identifier was fetched, or
        Failure(EXTERNAL_SERVICE_ERROR) whose exception is an
        IncompleteBatchError carrying the partial report.
        """
        lock = threading.Lock()
        accumulator = bytearray()
        fetched: list[str] = []
        pending = [identifier for identifier in identifiers if identifier]
        passes = 0

        while pending and passes < self._max_passes:
            passes += 1
            failed = self._run_pass(pending, accumulator, fetched, lock)
            log.info(
                "batch.pass_complete",
                attempt=passes,
                requested=len(pending),
                failed=len(failed),
                fetched_total=len(fetched),
            )
            pending = failed

        report = BatchReport(
            pem=bytes(accumulator),
            fetched=tuple(fetched),
            failed=tuple(pending),
            passes=passes,
        )
        if report.complete:
            return Result.success(report)

        error = IncompleteBatchError(report)
        log.error("batch.gave_up", passes=passes, failed=list(report.failed))
        return Result.failure(ErrorCode.EXTERNAL_SERVICE_ERROR, str(error), error)

    def _run_pass(
        self,
        identifiers: Sequence[str],
        accumulator: bytearray,
        fetched: list[str],
        lock: threading.Lock,
    ) -> list[str]:
        failed: list[str] = []
        for identifier in identifiers:
            self._sleep(self._delay_seconds)
            result = self._fetcher.get(self._url_for(identifier))
            if result.is_failure():
                failed.append(identifier)
                continue

            pem_bytes = body_to_pem(result.value())
            if not extract_certificates(pem_bytes):
                # logged, not retried
                log.warning("batch.no_certificate_in_response", identifier=identifier)
            with lock:
                accumulator.extend(pem_bytes)
                fetched.append(identifier)
        return failed
