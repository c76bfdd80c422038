"""
Store cache — the normalized store file on disk is the cache.

Adapter layer — implements the StoreCache port on the local filesystem.

A present, non-empty file is authoritative: it is never re-downloaded or
re-normalized, even if stale. A write replaces the file whole (temp file in
the same directory, then os.replace), so readers never see a half-written store.
The temp file is created 0600; it is widened to 0666 minus the umask, the mode
a plain open() would give.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import structlog
from railway import ErrorCode
from railway.result import Result

log = structlog.get_logger()

_STORE_MODE = 0o666


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


class FileStoreCache:
    """
    Treat an existing, non-empty store file as a cache hit.

    Implements the StoreCache port.
    """

    def is_populated(self, store_file: Path) -> bool:
        try:
            size = store_file.stat().st_size
        except OSError:
            return False
        if size > 0:
            log.info("store.cache_hit", path=str(store_file), size_bytes=size)
            return True
        return False

    def write(self, store_file: Path, pem_bytes: bytes) -> Result[Path]:
        """
        Atomically replace `store_file` with `pem_bytes`.

        Returns Result.failure(STORAGE_ERROR, ...) if the file cannot be written.
        """
        return Result.from_computation(
            lambda: self._replace(store_file, pem_bytes),
            ErrorCode.STORAGE_ERROR,
            f"Failed to write store file {store_file}",
        )

    def _replace(self, store_file: Path, pem_bytes: bytes) -> Path:
        fd, tmp_name = tempfile.mkstemp(
            dir=store_file.parent, prefix=f".{store_file.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as tmp:
                os.fchmod(tmp.fileno(), _STORE_MODE & ~_current_umask())
                tmp.write(pem_bytes)
            os.replace(tmp_name, store_file)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        log.info("store.written", path=str(store_file), size_bytes=len(pem_bytes))
        return store_file
