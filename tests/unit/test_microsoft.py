"""
Unit tests for the Microsoft adapter — scraped report + per-certificate fetch.
"""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import MagicMock

from railway import ErrorCode, Result, ResultAssertions

from grootstore.adapters.microsoft import MicrosoftStoreNormalizer, parse_report
from grootstore.domain.models import FormatKind, StorePaths, Vendor, VendorSource
from grootstore.domain.pem import extract_certificates

LIST_URL = "https://ccadb.example/IncludedCACertificateReportForMSFT"
CERT_URL = "https://crt.example/?d="


def _row(status: str, fingerprint: str, link: str | None = None) -> str:
    identifier = f'<a href="{link}">{fingerprint}</a>' if link else fingerprint
    return (
        '<tr class="dataRow">'
        f"<td><span>{status}</span></td>"
        "<td><span>Example CA</span></td>"
        "<td><span>Example Root</span></td>"
        f"<td><span>{identifier}</span></td>"
        "</tr>"
    )


def _page(*rows: str) -> bytes:
    return f"<html><body><table>{''.join(rows)}</table></body></html>".encode()


REPORT = _page(
    _row("Included", "AAAA", "https://crt.example/?d=AAAA"),
    _row("Disabled", "BBBB", "https://crt.example/?d=BBBB"),
    _row("NotBefore", "CCCC", "https://crt.example/?d=CCCC"),
)


def _source() -> VendorSource:
    return VendorSource(Vendor.MICROSOFT, (LIST_URL, CERT_URL), FormatKind.SCRAPED_LIST)


class TestParseReport:
    """
    GIVEN the CCADB Microsoft report page
    WHEN parse_report runs
    THEN every row except "Disabled" yields its identifier, in page order.
    """

    def test_fingerprint_mode(self) -> None:
        assert parse_report(REPORT) == ["AAAA", "CCCC"]

    def test_link_mode(self) -> None:
        assert parse_report(REPORT, mode="link") == [
            "https://crt.example/?d=AAAA",
            "https://crt.example/?d=CCCC",
        ]

    def test_link_mode_falls_back_to_text_without_anchor(self) -> None:
        assert parse_report(_page(_row("Included", "DDDD")), mode="link") == ["DDDD"]

    def test_short_rows_are_skipped(self) -> None:
        page = _page('<tr class="dataRow"><td><span>Included</span></td></tr>')

        assert parse_report(page) == []

    def test_custom_column_indexes(self) -> None:
        assert parse_report(REPORT, status_index=0, identifier_index=1) == [
            "Example CA",
            "Example CA",
        ]

    def test_page_without_rows(self) -> None:
        assert parse_report(b"<html><body>maintenance</body></html>") == []


class TestMicrosoftStoreNormalizer:
    def test_fingerprint_mode_appends_to_endpoint(
        self,
        certificate_factory: Callable[[str], bytes],
        store_paths: StorePaths,
    ) -> None:
        """
        GIVEN a report with two enabled rows
        WHEN fetch_and_normalize runs in fingerprint mode
        THEN each fingerprint is fetched from the crt endpoint and the DER armored.
        """
        a, c = certificate_factory("A"), certificate_factory("C")
        bodies = {LIST_URL: REPORT, f"{CERT_URL}AAAA": a, f"{CERT_URL}CCCC": c}
        fetcher = MagicMock()
        fetcher.get.side_effect = lambda url: Result.success(bodies[url])
        normalizer = MicrosoftStoreNormalizer(_source(), fetcher, sleep=lambda _s: None)

        pem_bytes = ResultAssertions.assert_success(normalizer.fetch_and_normalize(store_paths))

        assert extract_certificates(pem_bytes) == [a, c]
        requested = [call.args[0] for call in fetcher.get.call_args_list]
        assert requested == [LIST_URL, f"{CERT_URL}AAAA", f"{CERT_URL}CCCC"]

    def test_link_mode_fetches_links_verbatim(
        self,
        root_der: bytes,
        pem_encoder: Callable[[bytes], bytes],
        store_paths: StorePaths,
    ) -> None:
        pem_body = pem_encoder(root_der)
        fetcher = MagicMock()
        fetcher.get.side_effect = lambda url: Result.success(REPORT if url == LIST_URL else pem_body)
        normalizer = MicrosoftStoreNormalizer(
            _source(), fetcher, mode="link", sleep=lambda _s: None
        )

        pem_bytes = ResultAssertions.assert_success(normalizer.fetch_and_normalize(store_paths))

        assert pem_bytes == pem_body * 2
        assert fetcher.get.call_args_list[1].args[0] == "https://crt.example/?d=AAAA"

    def test_no_rows_is_parse_error(self, store_paths: StorePaths) -> None:
        fetcher = MagicMock()
        fetcher.get.return_value = Result.success(_page(_row("Disabled", "BBBB")))
        normalizer = MicrosoftStoreNormalizer(_source(), fetcher, sleep=lambda _s: None)

        result = normalizer.fetch_and_normalize(store_paths)

        ResultAssertions.assert_failure(result, ErrorCode.PARSE_ERROR)
        ResultAssertions.assert_failure_message_contains(result, "no microsoft urls found")
        fetcher.get.assert_called_once_with(LIST_URL)

    def test_list_failure_propagates(self, store_paths: StorePaths) -> None:
        fetcher = MagicMock()
        fetcher.get.return_value = Result.failure(ErrorCode.EXTERNAL_SERVICE_ERROR, "503")
        normalizer = MicrosoftStoreNormalizer(_source(), fetcher, sleep=lambda _s: None)

        ResultAssertions.assert_failure(
            normalizer.fetch_and_normalize(store_paths), ErrorCode.EXTERNAL_SERVICE_ERROR
        )

    def test_persistent_failure_gives_up(self, store_paths: StorePaths) -> None:
        """
        GIVEN the per-certificate endpoint always fails
        WHEN fetch_and_normalize runs with max_passes=2
        THEN the update fails after two passes instead of looping forever.
        """

        def get(url: str) -> Result[bytes]:
            if url == LIST_URL:
                return Result.success(REPORT)
            return Result.failure(ErrorCode.RATE_LIMIT_ERROR, "429")

        fetcher = MagicMock()
        fetcher.get.side_effect = get
        normalizer = MicrosoftStoreNormalizer(
            _source(), fetcher, max_passes=2, sleep=lambda _s: None
        )

        ResultAssertions.assert_failure(
            normalizer.fetch_and_normalize(store_paths), ErrorCode.EXTERNAL_SERVICE_ERROR
        )
        assert fetcher.get.call_count == 1 + 2 * 2
