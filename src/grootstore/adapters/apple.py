"""
Apple adapter — security_certificates source archive → PEM.

Adapter layer — implements the StoreNormalizer port using tarfile/shutil.

Apple publishes no PEM bundle, only tagged source releases whose
certificates/roots/ directory holds one DER file per root:

  <root>/apple/                                    cleared, then the archive is extracted here
  <root>/apple/<unpacked>/certificates/roots/  →   moved to <root>/apple/roots/
  <root>/apple/<unpacked>/                         removed
  <root>/apple/roots/*                         →   armored and concatenated
  <root>/apple/                                    removed on success

Any failure aborts the update and leaves the working directory as it was
at the moment of the failure.
"""

from __future__ import annotations

import io
import shutil
import tarfile
from pathlib import Path

import structlog
from railway import ErrorCode
from railway.result import Result

from grootstore.domain.models import StorePaths, VendorSource
from grootstore.domain.pem import armor_certificate
from grootstore.domain.ports import ResourceFetcher

log = structlog.get_logger()

CERTIFICATES_DIR = "certificates"
ROOTS_DIR = "roots"
IGNORE_MARKER = ".cvsignore"


def extract_archive(archive: bytes, workdir: Path) -> list[Path]:
    """
    Extract a .tar.gz into a fresh `workdir`; return its top-level directories.

    The "tar" extraction filter keeps file mode bits and refuses members that
    would land outside `workdir`.
    """
    if workdir.exists():
        shutil.rmtree(workdir)
    workdir.mkdir(parents=True)
    with tarfile.open(fileobj=io.BytesIO(archive), mode="r:gz") as tar:
        tar.extractall(workdir, filter="tar")
    return sorted(entry for entry in workdir.iterdir() if entry.is_dir())


def relocate_roots(unpacked: list[Path], roots_target: Path) -> Path:
    """
    Keep only certificates/roots/ of the unpacked release, moved to `roots_target`.

    Raises FileNotFoundError when no unpacked directory contains it.
    """
    for directory in unpacked:
        for entry in directory.iterdir():
            if entry.name == CERTIFICATES_DIR:
                continue
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
        roots_source = directory / CERTIFICATES_DIR / ROOTS_DIR
        if roots_source.is_dir() and not roots_target.exists():
            shutil.move(roots_source, roots_target)
        shutil.rmtree(directory)
    if not roots_target.is_dir():
        raise FileNotFoundError(f"{CERTIFICATES_DIR}/{ROOTS_DIR} not found in Apple archive")
    return roots_target


def armor_directory(roots_directory: Path) -> bytes:
    """Armor every regular file in `roots_directory`, in name order, skipping ignore markers."""
    chunks: list[bytes] = []
    for certificate_file in sorted(roots_directory.iterdir()):
        if IGNORE_MARKER in certificate_file.name or not certificate_file.is_file():
            continue
        chunks.append(armor_certificate(certificate_file.read_bytes()))
    return b"".join(chunks)


class AppleStoreNormalizer:
    """
    Normalize an Apple security_certificates release.

    Implements the StoreNormalizer port.
    All exceptions are caught at this adapter boundary via Result.from_computation().
    """

    def __init__(self, source: VendorSource, fetcher: ResourceFetcher) -> None:
        self._source = source
        self._fetcher = fetcher

    @property
    def source(self) -> VendorSource:
        return self._source

    def fetch_and_normalize(self, paths: StorePaths) -> Result[bytes]:
        log.info("apple.downloading", url=self._source.primary_url)
        return (
            self._fetcher.get(self._source.primary_url)
            .flat_map(
                lambda archive: Result.from_computation(
                    lambda: extract_archive(archive, paths.apple_directory),
                    ErrorCode.PARSE_ERROR,
                    "Failed to extract Apple archive",
                )
            )
            .flat_map(
                lambda unpacked: Result.from_computation(
                    lambda: relocate_roots(unpacked, paths.apple_roots_directory),
                    ErrorCode.STORAGE_ERROR,
                    "Failed to relocate Apple roots directory",
                )
            )
            .flat_map(
                lambda roots: Result.from_computation(
                    lambda: armor_directory(roots),
                    ErrorCode.STORAGE_ERROR,
                    "Failed to read Apple root certificates",
                )
            )
            .flat_map(lambda pem_bytes: self._cleanup(paths.apple_directory, pem_bytes))
        )

    def _cleanup(self, workdir: Path, pem_bytes: bytes) -> Result[bytes]:
        return Result.from_computation(
            lambda: shutil.rmtree(workdir),
            ErrorCode.STORAGE_ERROR,
            f"Failed to remove Apple working directory {workdir}",
        ).map(lambda _: pem_bytes).peek(
            lambda data: log.info("apple.normalized", size_bytes=len(data))
        )
