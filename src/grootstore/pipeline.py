"""
Pipeline — the ROP pipeline for one vendor's root store.

Domain layer — all I/O is injected via ports (Protocol interfaces).

update_root_store:

  cache.is_populated(store file)?
    yes → builder.build(store file)
    no  → normalizer.fetch_and_normalize(paths)
            → builder.parse(normalized bytes)
              → cache.write(store file)
                → the parsed TrustPool

get_root_store:

  builder.build(store file)

Each stage returns Result[T]. Failures short-circuit automatically
through the railway. Normalized bytes are parsed before the write; a store
that does not parse is never written.
"""

from __future__ import annotations

import structlog
from railway.result import Result

from grootstore.domain.models import StorePaths, TrustPool, Vendor
from grootstore.domain.ports import StoreCache, StoreNormalizer, TrustPoolBuilder

log = structlog.get_logger()


def update_root_store(
    paths: StorePaths,
    normalizer: StoreNormalizer,
    cache: StoreCache,
    builder: TrustPoolBuilder,
) -> Result[TrustPool]:
    """
    Download-if-absent, normalize, persist, and parse one vendor's root store.

    A present, non-empty store file short-circuits straight to parsing, with
    no network I/O. Returns Result[TrustPool], or the first failing stage's
    failure.
    """
    vendor = normalizer.source.vendor
    store_file = paths.store_file(vendor)
    if cache.is_populated(store_file):
        return builder.build(store_file)

    log.info("store.updating", vendor=vendor.value, path=str(store_file))
    return normalizer.fetch_and_normalize(paths).flat_map(
        lambda pem_bytes: builder.parse(pem_bytes, vendor.store_file_name).flat_map(
            lambda pool: cache.write(store_file, pem_bytes).map(lambda _: pool)
        )
    )


def get_root_store(
    vendor: Vendor,
    paths: StorePaths,
    builder: TrustPoolBuilder,
) -> Result[TrustPool]:
    """Parse an existing store file; never downloads. A missing file is NOT_FOUND."""
    return builder.build(paths.store_file(vendor))
