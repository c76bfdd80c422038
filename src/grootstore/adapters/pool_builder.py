"""
Trust pool builder — NormalizedStore file → TrustPool.

Adapter layer — implements the TrustPoolBuilder port using:
  - grootstore.domain.pem: PEM → ordered DER entries
  - cryptography (PyCA): x509.load_der_x509_certificate for each entry

Pipeline:
  store file bytes
    → extract_certificates() → [DER, ...]
    → x509.load_der_x509_certificate() for each
    → TrustPool

The build is all-or-nothing: the first DER entry that fails to parse fails
the whole build and no partial pool is returned.
"""

from __future__ import annotations

from pathlib import Path

import structlog
from cryptography import x509
from railway import ErrorCode
from railway.result import Result

from grootstore.domain.models import TrustPool
from grootstore.domain.pem import extract_certificates

log = structlog.get_logger()


class EmptyStoreError(Exception):
    """The store file holds no decodable CERTIFICATE block."""


def _read_store(store_file: Path) -> Result[bytes]:
    if not store_file.exists():
        return Result.failure(
            ErrorCode.NOT_FOUND,
            f"Store file {store_file} does not exist; run update first",
            FileNotFoundError(str(store_file)),
        )
    return Result.from_computation(
        store_file.read_bytes,
        ErrorCode.STORAGE_ERROR,
        f"Failed to read store file {store_file}",
    ).ensure(
        lambda data: len(data) > 0,
        ErrorCode.STORAGE_ERROR,
        f"Store file {store_file} is empty; run update first",
    )


def _decode(origin: str, data: bytes) -> Result[list[bytes]]:
    entries = extract_certificates(data)
    if not entries:
        return Result.failure(
            ErrorCode.PARSE_ERROR,
            "error decoding pem to tls",
            EmptyStoreError(origin),
        )
    return Result.success(entries)


def _parse_all(entries: list[bytes]) -> TrustPool:
    pool = TrustPool()
    for index, der_bytes in enumerate(entries):
        try:
            pool.add(x509.load_der_x509_certificate(der_bytes))
        except ValueError as e:
            raise ValueError(f"certificate #{index} is not valid DER: {e}") from e
    return pool


class X509TrustPoolBuilder:
    """
    Parse a NormalizedStore file into a TrustPool.

    Implements the TrustPoolBuilder port.
    All exceptions are caught at this adapter boundary via Result.from_computation().
    """

    def build(self, store_file: Path) -> Result[TrustPool]:
        return _read_store(store_file).flat_map(lambda data: self.parse(data, str(store_file)))

    def parse(self, pem_bytes: bytes, origin: str) -> Result[TrustPool]:
        """Parse PEM bytes; `origin` names the file or vendor in messages and logs."""
        return (
            _decode(origin, pem_bytes)
            .flat_map(
                lambda entries: Result.from_computation(
                    lambda: _parse_all(entries),
                    ErrorCode.PARSE_ERROR,
                    f"Failed to parse certificates in {origin}",
                )
            )
            .peek(lambda pool: log.info("pool.built", origin=origin, certificates=len(pool)))
        )
