"""
Ports — Protocol-based interfaces for infrastructure adapters.

These define WHAT the pipeline needs without specifying HOW:

  Domain ← Ports (protocols) ← Adapters (implementations)

Each port is a Protocol (structural typing) so adapters and test doubles
satisfy the contract simply by implementing the methods.

Update flow for one vendor:
  1. StoreCache.is_populated      → skip everything below on a cache hit
  2. StoreNormalizer              → vendor artifact(s) → normalized PEM bytes
  3. StoreCache.write             → NormalizedStore file on disk
  4. TrustPoolBuilder             → NormalizedStore file → TrustPool
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from railway.result import Result

from grootstore.domain.models import StorePaths, TrustPool, VendorSource


@runtime_checkable
class ResourceFetcher(Protocol):
    """
    Port: fetch a single remote resource with HTTP GET.

    A non-2xx status and a transport error are both reported as a failure,
    never raised.
    """

    def get(self, url: str) -> Result[bytes]: ...

    def download_to_file(self, url: str, destination: Path) -> Result[Path]: ...


@runtime_checkable
class StoreNormalizer(Protocol):
    """
    Port: turn one vendor's published artifact(s) into normalized PEM bytes.

    Implementations may use scratch space under `paths` but never write the
    NormalizedStore file themselves.
    """

    @property
    def source(self) -> VendorSource: ...

    def fetch_and_normalize(self, paths: StorePaths) -> Result[bytes]: ...


@runtime_checkable
class StoreCache(Protocol):
    """Port: a populated store file is authoritative and suppresses re-download."""

    def is_populated(self, store_file: Path) -> bool: ...

    def write(self, store_file: Path, pem_bytes: bytes) -> Result[Path]: ...


@runtime_checkable
class TrustPoolBuilder(Protocol):
    """
    Port: parse normalized PEM into a TrustPool.

    All-or-nothing: one unparseable certificate fails the whole build.
    `parse` works on in-memory bytes so a store can be checked before it is written.
    """

    def build(self, store_file: Path) -> Result[TrustPool]: ...

    def parse(self, pem_bytes: bytes, origin: str) -> Result[TrustPool]: ...
