"""
Chromium adapter — base64 blob → PEM blocks.

Adapter layer — implements the StoreNormalizer port.

Gitiles serves root_store.certs base64-encoded (?format=TEXT). Once decoded,
the file interleaves licence text and per-root comments with PEM blocks, so
it is line-scanned instead of PEM-parsed: only the lines from a literal
BEGIN CERTIFICATE marker through its END marker are copied.

This is the one adapter that rejects an empty result itself.
"""

from __future__ import annotations

import base64
import binascii

import structlog
from railway import ErrorCode
from railway.result import Result

from grootstore.domain.models import StorePaths, VendorSource
from grootstore.domain.pem import BEGIN_CERTIFICATE, END_CERTIFICATE
from grootstore.domain.ports import ResourceFetcher

log = structlog.get_logger()


def select_certificate_lines(text: str) -> str:
    """Copy BEGIN..END CERTIFICATE lines (inclusive), dropping everything else."""
    selected: list[str] = []
    inside = False
    for line in text.splitlines():
        if line == BEGIN_CERTIFICATE:
            inside = True
            selected.append(line)
        elif inside:
            selected.append(line)
            if line == END_CERTIFICATE:
                inside = False
    return "".join(f"{line}\n" for line in selected)


def decode_root_store(encoded: bytes) -> Result[bytes]:
    """
    Decode the base64 blob and keep only its certificate blocks.

    Returns Result.failure(PARSE_ERROR, ...) when the blob is not base64 or
    holds no certificate block.
    """
    try:
        decoded = base64.b64decode(encoded)
    except (binascii.Error, ValueError) as e:
        return Result.failure(ErrorCode.PARSE_ERROR, "Chromium root store is not valid base64", e)

    pem_text = select_certificate_lines(decoded.decode("utf-8", errors="replace"))
    if not pem_text:
        return Result.failure(ErrorCode.PARSE_ERROR, "error parsing certificates")
    log.info("chromium.decoded", certificates=pem_text.count(BEGIN_CERTIFICATE))
    return Result.success(pem_text.encode("utf-8"))


class ChromiumStoreNormalizer:
    """
    Normalize Chromium's root_store.certs.

    Implements the StoreNormalizer port.
    """

    def __init__(self, source: VendorSource, fetcher: ResourceFetcher) -> None:
        self._source = source
        self._fetcher = fetcher

    @property
    def source(self) -> VendorSource:
        return self._source

    def fetch_and_normalize(self, paths: StorePaths) -> Result[bytes]:
        log.info("chromium.downloading", url=self._source.primary_url)
        return self._fetcher.get(self._source.primary_url).flat_map(decode_root_store)
