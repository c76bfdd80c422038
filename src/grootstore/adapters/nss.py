"""
NSS adapter — CCADB CSV report → PEM.

Adapter layer — implements the StoreNormalizer port.

Mozilla's CCADB publishes IncludedCACertificateReportPEMCSV: one row per
included root, with the PEM wrapped in single quotes in a fixed column.
The CSV is streamed to a scratch file, parsed, and deleted on success.
"""

from __future__ import annotations

import csv
from pathlib import Path

import structlog
from railway import ErrorCode
from railway.result import Result

from grootstore.domain.models import StorePaths, VendorSource
from grootstore.domain.ports import ResourceFetcher

log = structlog.get_logger()


def pem_from_csv(csv_file: Path, pem_column: int) -> bytes:
    """
    Concatenate the PEM column of every data row, quotes stripped.

    Raises ValueError when a data row has no `pem_column`.
    """
    chunks: list[str] = []
    with csv_file.open(newline="", encoding="utf-8") as handle:
        reader = csv.reader(handle)
        next(reader, None)  # header
        for row in reader:
            if len(row) <= pem_column:
                raise ValueError(
                    f"CSV line {reader.line_num} has {len(row)} columns, "
                    f"PEM column {pem_column} is out of range"
                )
            chunks.append(row[pem_column].replace("'", "") + "\n")
    return "".join(chunks).encode("utf-8")


class NssStoreNormalizer:
    """
    Normalize Mozilla's CCADB PEM CSV report.

    Implements the StoreNormalizer port.
    """

    def __init__(self, source: VendorSource, fetcher: ResourceFetcher, pem_column: int = 32) -> None:
        self._source = source
        self._fetcher = fetcher
        self._pem_column = pem_column

    @property
    def source(self) -> VendorSource:
        return self._source

    def fetch_and_normalize(self, paths: StorePaths) -> Result[bytes]:
        log.info("nss.downloading", url=self._source.primary_url, path=str(paths.nss_csv))
        return (
            self._fetcher.download_to_file(self._source.primary_url, paths.nss_csv)
            .flat_map(self._parse)
            .flat_map(lambda pem_bytes: self._remove_csv(paths.nss_csv, pem_bytes))
        )

    def _parse(self, csv_file: Path) -> Result[bytes]:
        return Result.from_computation(
            lambda: pem_from_csv(csv_file, self._pem_column),
            ErrorCode.PARSE_ERROR,
            f"Failed to read NSS CSV report {csv_file}",
        ).peek(lambda pem_bytes: log.info("nss.parsed", size_bytes=len(pem_bytes)))

    def _remove_csv(self, csv_file: Path, pem_bytes: bytes) -> Result[bytes]:
        return Result.from_computation(
            lambda: csv_file.unlink(),
            ErrorCode.STORAGE_ERROR,
            f"Failed to remove NSS CSV report {csv_file}",
        ).map(lambda _: pem_bytes)
