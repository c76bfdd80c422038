"""
Microsoft adapter — scraped report + one download per certificate.

Adapter layer — implements the StoreNormalizer port using:
  - BeautifulSoup: parse the CCADB "IncludedCACertificateReportForMSFT" page
  - BatchDownloader: sequential, throttled fetch with bounded retry passes

Each `.dataRow` of the report holds `span` cells. The status cell and the
identifier cell are located by index; rows whose status is "Disabled" are
dropped. In fingerprint mode the identifier is a SHA-1 fingerprint appended
to the per-certificate endpoint (crt.sh/?d=); in link mode it is the
download link itself.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Literal, TypeAlias

import structlog
from bs4 import BeautifulSoup, Tag
from railway import ErrorCode
from railway.result import Result

from grootstore.adapters.downloader import BatchDownloader
from grootstore.domain.models import StorePaths, VendorSource
from grootstore.domain.ports import ResourceFetcher

log = structlog.get_logger()

DISABLED = "Disabled"

Mode: TypeAlias = Literal["fingerprint", "link"]


def _cell_identifier(cell: Tag, mode: Mode) -> str:
    if mode == "link":
        anchor = cell.find("a", href=True)
        if isinstance(anchor, Tag):
            return str(anchor["href"]).strip()
    return cell.get_text(strip=True)


def parse_report(
    html: bytes | str,
    mode: Mode = "fingerprint",
    status_index: int = 0,
    identifier_index: int = 3,
) -> list[str]:
    """
    Return the identifiers of every row not marked "Disabled", in page order.

    Rows too short to hold an identifier, and empty identifiers, are skipped.
    """
    soup = BeautifulSoup(html, "html.parser")
    identifiers: list[str] = []
    for row in soup.select(".dataRow"):
        cells = row.find_all("span")
        if len(cells) <= max(status_index, identifier_index):
            continue
        if cells[status_index].get_text(strip=True) == DISABLED:
            continue
        identifier = _cell_identifier(cells[identifier_index], mode)
        if identifier:
            identifiers.append(identifier)
    return identifiers


class MicrosoftStoreNormalizer:
    """
    Normalize Microsoft's root program into one PEM accumulator.

    Implements the StoreNormalizer port.
    `source.urls` is (report page URL, per-certificate endpoint prefix).
    """

    def __init__(
        self,
        source: VendorSource,
        fetcher: ResourceFetcher,
        mode: Mode = "fingerprint",
        delay_seconds: float = 2.0,
        max_passes: int = 5,
        status_index: int = 0,
        identifier_index: int = 3,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._source = source
        self._fetcher = fetcher
        self._mode: Mode = mode
        self._status_index = status_index
        self._identifier_index = identifier_index
        self._downloader = BatchDownloader(
            fetcher,
            url_for=self._certificate_url,
            delay_seconds=delay_seconds,
            max_passes=max_passes,
            sleep=sleep,
        )

    @property
    def source(self) -> VendorSource:
        return self._source

    def fetch_and_normalize(self, paths: StorePaths) -> Result[bytes]:
        return (
            self.list_identifiers()
            .flat_map(self._downloader.download_all)
            .peek(
                lambda report: log.info(
                    "microsoft.downloaded", certificates=len(report.fetched), passes=report.passes
                )
            )
            .map(lambda report: report.pem)
        )

    def list_identifiers(self) -> Result[list[str]]:
        """Scrape the report page; zero kept rows is a failure."""
        list_url = self._source.urls[0]
        log.info("microsoft.listing", url=list_url, mode=self._mode)
        return (
            self._fetcher.get(list_url)
            .flat_map(
                lambda html: Result.from_computation(
                    lambda: parse_report(
                        html, self._mode, self._status_index, self._identifier_index
                    ),
                    ErrorCode.PARSE_ERROR,
                    "Failed to parse Microsoft report page",
                )
            )
            .ensure(
                lambda identifiers: len(identifiers) > 0,
                ErrorCode.PARSE_ERROR,
                "no microsoft urls found",
            )
            .peek(lambda identifiers: log.info("microsoft.listed", count=len(identifiers)))
        )

    def _certificate_url(self, identifier: str) -> str:
        if self._mode == "link":
            return identifier
        return f"{self._source.urls[1]}{identifier}"
