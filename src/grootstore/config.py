"""
Configuration — typed, validated settings loaded from environment/.env.

Uses pydantic-settings to:
  - Load from environment variables (prefix GROOTSTORE_)
  - Fall back to .env file
  - Validate types and constraints at startup

The root directory is checked eagerly: a missing or inaccessible directory
is a configuration error before any network activity happens.

Architecture: Only AppSettings is a BaseSettings instance. Vendor settings are
plain BaseModel classes populated via env_nested_delimiter="__", so the env var
GROOTSTORE_MICROSOFT__DELAY_SECONDS maps to microsoft.delay_seconds.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from grootstore.domain.models import FormatKind, StorePaths, Vendor, VendorSource

_ENV_FILE = Path(__file__).parent.parent.parent / ".env"


def validate_root_directory(directory: Path) -> Path:
    """
    Return `directory` resolved, or raise ValueError.

    It must exist, be a directory, and be readable, writable and searchable
    by this process.
    """
    if not directory.is_dir():
        raise ValueError(f"Root directory does not exist or is not a directory: {directory}")
    if not os.access(directory, os.R_OK | os.W_OK | os.X_OK):
        raise ValueError(f"Root directory is not accessible: {directory}")
    return directory.resolve()


class AppleSettings(BaseModel):
    """
    Apple publishes source releases of security_certificates, not a PEM bundle.

    The archive URL is derived from `version` so bumping a release is a
    config change only.
    """

    version: str = Field(default="55246.140.2", description="security_certificates release tag")
    url_template: str = Field(
        default=(
            "https://github.com/apple-oss-distributions/security_certificates/"
            "archive/refs/tags/security_certificates-{version}.tar.gz"
        ),
        description="Archive URL; {version} is substituted",
    )

    @property
    def url(self) -> str:
        return self.url_template.format(version=self.version)


class ChromiumSettings(BaseModel):
    """Chromium root store served as base64 text by gitiles (?format=TEXT)."""

    url: str = Field(
        default=(
            "https://chromium.googlesource.com/chromium/src/+/main/"
            "net/data/ssl/chrome_root_store/root_store.certs?format=TEXT"
        ),
    )


class MicrosoftSettings(BaseModel):
    """
    Microsoft's root program report, scraped row by row.

    mode="fingerprint": the identifier column holds a SHA-1 fingerprint that is
      appended to `certificate_url`; the response is raw DER.
    mode="link": the identifier column holds a crt.sh link; the response is PEM.

    crt.sh rate limits per IP, so requests are sequential with a fixed delay.
    """

    mode: Literal["fingerprint", "link"] = "fingerprint"
    list_url: str = Field(
        default="https://ccadb-public.secure.force.com/microsoft/IncludedCACertificateReportForMSFT",
    )
    certificate_url: str = Field(default="https://crt.sh/?d=")
    delay_seconds: float = Field(default=2.0, ge=0)
    max_passes: int = Field(default=5, ge=1, description="Upper bound on retry passes")
    status_index: int = Field(default=0, ge=0)
    identifier_index: int = Field(default=3, ge=0)


class NssSettings(BaseModel):
    """Mozilla's CCADB report: one CSV row per included root, PEM in a fixed column."""

    url: str = Field(
        default="https://ccadb-public.secure.force.com/mozilla/IncludedCACertificateReportPEMCSV",
    )
    pem_column: int = Field(default=32, ge=0)


class AppSettings(BaseSettings):
    """
    Root application settings — aggregates all sub-settings.

    Load order (highest priority first):
      1. Environment variables
      2. .env file
      3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="GROOTSTORE_",
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    root_directory: Path = Field(default=Path("roots"), validate_default=True)
    apple: AppleSettings = Field(default_factory=AppleSettings)
    chromium: ChromiumSettings = Field(default_factory=ChromiumSettings)
    microsoft: MicrosoftSettings = Field(default_factory=MicrosoftSettings)
    nss: NssSettings = Field(default_factory=NssSettings)

    http_timeout_seconds: int = Field(default=60, ge=1)
    log_level: str = Field(default="INFO")

    @field_validator("root_directory")
    @classmethod
    def check_root_directory(cls, value: Path) -> Path:
        return validate_root_directory(value)

    @property
    def paths(self) -> StorePaths:
        return StorePaths(root=self.root_directory)

    def vendor_sources(self) -> dict[Vendor, VendorSource]:
        """The static source description of every vendor."""
        return {
            Vendor.APPLE: VendorSource(
                Vendor.APPLE, (self.apple.url,), FormatKind.TARBALL_OF_PEM_FILES
            ),
            Vendor.CHROMIUM: VendorSource(
                Vendor.CHROMIUM, (self.chromium.url,), FormatKind.BASE64_PEM_TEXT
            ),
            Vendor.MICROSOFT: VendorSource(
                Vendor.MICROSOFT,
                (self.microsoft.list_url, self.microsoft.certificate_url),
                FormatKind.SCRAPED_LIST,
            ),
            Vendor.NSS: VendorSource(Vendor.NSS, (self.nss.url,), FormatKind.CSV_PEM_COLUMN),
        }
