"""
Domain models — vendors, sources, on-disk layout and the trust pool.

VendorSource and StorePaths are frozen dataclasses: a store location is a
pure function of the root directory, never shared mutable state.
TrustPool is the only mutable model; it is built fresh on every query.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum, unique
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.x509.verification import Store


@unique
class Vendor(Enum):
    """A root store publisher. The value is the name used in config and on the CLI."""

    APPLE = "apple"
    CHROMIUM = "chromium"
    MICROSOFT = "microsoft"
    NSS = "nss"

    @property
    def store_file_name(self) -> str:
        return _STORE_FILE_NAMES[self]


_STORE_FILE_NAMES = {
    Vendor.APPLE: "AppleRoot.pem",
    Vendor.CHROMIUM: "ChromiumRoot.pem",
    Vendor.MICROSOFT: "MSroot.pem",
    Vendor.NSS: "NSSroot.pem",
}


@unique
class FormatKind(Enum):
    """Distribution format of a vendor's published root store."""

    TARBALL_OF_PEM_FILES = "tarball-of-pem-files"
    BASE64_PEM_TEXT = "base64-concatenated-pem-text"
    SCRAPED_LIST = "scraped-list-per-item-fetch"
    CSV_PEM_COLUMN = "csv-with-embedded-pem-column"


@dataclass(frozen=True, slots=True)
class VendorSource:
    """
    Where and in which format a vendor publishes its root store.

    `urls` holds the artifact URL, or for scraped lists the list page
    followed by the per-item endpoint.
    """

    vendor: Vendor
    urls: tuple[str, ...]
    format_kind: FormatKind

    @property
    def primary_url(self) -> str:
        return self.urls[0]


@dataclass(frozen=True, slots=True)
class StorePaths:
    """
    On-disk layout under a single root directory.

      <root>/<VendorFileName>.pem                 one normalized store per vendor
      <root>/apple/                               Apple extraction scratch directory
      <root>/IncludedCACertificateWithPEMReport.csv   NSS scratch CSV
    """

    root: Path

    def store_file(self, vendor: Vendor) -> Path:
        return self.root / vendor.store_file_name

    @property
    def apple_directory(self) -> Path:
        return self.root / "apple"

    @property
    def apple_roots_directory(self) -> Path:
        return self.apple_directory / "roots"

    @property
    def nss_csv(self) -> Path:
        return self.root / "IncludedCACertificateWithPEMReport.csv"


@dataclass(frozen=True, slots=True)
class BatchReport:
    """
    Outcome of a sequential batch download.

    `pem` is the accumulated PEM text of every identifier in `fetched`,
    in fetch order. `failed` lists identifiers that never succeeded.
    """

    pem: bytes = field(repr=False)
    fetched: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()
    passes: int = 0

    @property
    def complete(self) -> bool:
        return not self.failed


class TrustPool:
    """
    A set of parsed root certificates, de-duplicated by SHA-256 fingerprint.

    Insertion order is preserved. Owned by the caller; nothing is cached
    between queries.
    """

    def __init__(self, certificates: list[x509.Certificate] | None = None) -> None:
        self._by_fingerprint: dict[bytes, x509.Certificate] = {}
        for certificate in certificates or []:
            self.add(certificate)

    def add(self, certificate: x509.Certificate) -> bool:
        """Add a certificate; returns False when it was already present."""
        fingerprint = certificate.fingerprint(hashes.SHA256())
        if fingerprint in self._by_fingerprint:
            return False
        self._by_fingerprint[fingerprint] = certificate
        return True

    def __len__(self) -> int:
        return len(self._by_fingerprint)

    def __iter__(self) -> Iterator[x509.Certificate]:
        return iter(self._by_fingerprint.values())

    def __contains__(self, certificate: object) -> bool:
        if not isinstance(certificate, x509.Certificate):
            return False
        return certificate.fingerprint(hashes.SHA256()) in self._by_fingerprint

    def find_by_subject(self, subject: x509.Name) -> list[x509.Certificate]:
        """All certificates whose subject equals `subject` (cross-signed roots may share one)."""
        return [cert for cert in self if cert.subject == subject]

    def subjects(self) -> list[str]:
        return [cert.subject.rfc4514_string() for cert in self]

    def verification_store(self) -> Store:
        """Export as a cryptography verification Store. Raises ValueError when empty."""
        return Store(list(self))

    def __repr__(self) -> str:
        return f"TrustPool({len(self)} certificates)"
