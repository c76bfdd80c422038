"""
RootStores — per-vendor update/get API.

Holds one StoreNormalizer per vendor plus the shared cache and pool builder,
and the StorePaths derived from the configured root directory. Every call
may override the root directory; the override is validated before any
network activity and only affects that call.

    stores = RootStores.from_settings(AppSettings())
    pool = stores.update(Vendor.NSS)              # Result[TrustPool]
    pool = stores.get_chromium(root_directory=Path("/srv/roots"))
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from railway import ErrorCode
from railway.result import Result

from grootstore.adapters.apple import AppleStoreNormalizer
from grootstore.adapters.chromium import ChromiumStoreNormalizer
from grootstore.adapters.http_client import HttpResourceFetcher
from grootstore.adapters.microsoft import MicrosoftStoreNormalizer
from grootstore.adapters.nss import NssStoreNormalizer
from grootstore.adapters.pool_builder import X509TrustPoolBuilder
from grootstore.adapters.store_cache import FileStoreCache
from grootstore.config import AppSettings, validate_root_directory
from grootstore.domain.models import StorePaths, TrustPool, Vendor
from grootstore.domain.ports import (
    ResourceFetcher,
    StoreCache,
    StoreNormalizer,
    TrustPoolBuilder,
)
from grootstore.pipeline import get_root_store, update_root_store


def create_normalizers(
    settings: AppSettings,
    fetcher: ResourceFetcher,
) -> dict[Vendor, StoreNormalizer]:
    """
    Instantiate one normalizer per vendor from application settings.

    This is the ONLY place where vendor adapters are created.
    """
    sources = settings.vendor_sources()
    return {
        Vendor.APPLE: AppleStoreNormalizer(sources[Vendor.APPLE], fetcher),
        Vendor.CHROMIUM: ChromiumStoreNormalizer(sources[Vendor.CHROMIUM], fetcher),
        Vendor.MICROSOFT: MicrosoftStoreNormalizer(
            sources[Vendor.MICROSOFT],
            fetcher,
            mode=settings.microsoft.mode,
            delay_seconds=settings.microsoft.delay_seconds,
            max_passes=settings.microsoft.max_passes,
            status_index=settings.microsoft.status_index,
            identifier_index=settings.microsoft.identifier_index,
        ),
        Vendor.NSS: NssStoreNormalizer(
            sources[Vendor.NSS], fetcher, pem_column=settings.nss.pem_column
        ),
    }


def resolve_paths(root_directory: Path) -> Result[StorePaths]:
    """Validate a root directory override and derive its StorePaths."""
    return Result.from_computation(
        lambda: StorePaths(root=validate_root_directory(Path(root_directory))),
        ErrorCode.CONFIGURATION_ERROR,
        f"Invalid root directory {root_directory}",
    )


class RootStores:
    """Update or read the normalized root store of each vendor."""

    def __init__(
        self,
        paths: StorePaths,
        normalizers: Mapping[Vendor, StoreNormalizer],
        cache: StoreCache | None = None,
        builder: TrustPoolBuilder | None = None,
    ) -> None:
        self._paths = paths
        self._normalizers = dict(normalizers)
        self._cache = cache or FileStoreCache()
        self._builder = builder or X509TrustPoolBuilder()

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings,
        fetcher: ResourceFetcher | None = None,
    ) -> RootStores:
        fetcher = fetcher or HttpResourceFetcher(timeout=settings.http_timeout_seconds)
        return cls(settings.paths, create_normalizers(settings, fetcher))

    @property
    def paths(self) -> StorePaths:
        return self._paths

    def update(self, vendor: Vendor, root_directory: Path | None = None) -> Result[TrustPool]:
        """Download `vendor`'s store unless already present, then parse it."""
        normalizer = self._normalizers.get(vendor)
        if normalizer is None:
            return Result.failure(
                ErrorCode.CONFIGURATION_ERROR, f"No adapter configured for {vendor.value}"
            )
        return self._paths_for(root_directory).flat_map(
            lambda paths: update_root_store(paths, normalizer, self._cache, self._builder)
        )

    def get(self, vendor: Vendor, root_directory: Path | None = None) -> Result[TrustPool]:
        """Parse `vendor`'s existing store; fails if update has not run."""
        return self._paths_for(root_directory).flat_map(
            lambda paths: get_root_store(vendor, paths, self._builder)
        )

    def update_all(self) -> dict[Vendor, Result[TrustPool]]:
        """Update every configured vendor in turn; one failure does not stop the others."""
        return {vendor: self.update(vendor) for vendor in self._normalizers}

    def update_apple(self, root_directory: Path | None = None) -> Result[TrustPool]:
        return self.update(Vendor.APPLE, root_directory)

    def get_apple(self, root_directory: Path | None = None) -> Result[TrustPool]:
        return self.get(Vendor.APPLE, root_directory)

    def update_chromium(self, root_directory: Path | None = None) -> Result[TrustPool]:
        return self.update(Vendor.CHROMIUM, root_directory)

    def get_chromium(self, root_directory: Path | None = None) -> Result[TrustPool]:
        return self.get(Vendor.CHROMIUM, root_directory)

    def update_microsoft(self, root_directory: Path | None = None) -> Result[TrustPool]:
        return self.update(Vendor.MICROSOFT, root_directory)

    def get_microsoft(self, root_directory: Path | None = None) -> Result[TrustPool]:
        return self.get(Vendor.MICROSOFT, root_directory)

    def update_nss(self, root_directory: Path | None = None) -> Result[TrustPool]:
        return self.update(Vendor.NSS, root_directory)

    def get_nss(self, root_directory: Path | None = None) -> Result[TrustPool]:
        return self.get(Vendor.NSS, root_directory)

    def _paths_for(self, root_directory: Path | None) -> Result[StorePaths]:
        if root_directory is None:
            return Result.success(self._paths)
        return resolve_paths(root_directory)
