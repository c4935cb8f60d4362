"""
In-memory reader for statement bundle archives.

A statement bundle is a zip file exported by CockroachDB's
``EXPLAIN ANALYZE (DEBUG)``. It holds plain-text members such as
``schema.sql``, ``statement.sql``, ``plan.txt`` and ``env.sql``.
"""

from __future__ import annotations

import io
import locale
import logging
import struct
import zipfile
import zlib
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from .errors import ArchiveReadError, EntryReadError

logger = logging.getLogger(__name__)

# Failures zipfile can raise while parsing the central directory
_ARCHIVE_ERRORS = (
    zipfile.BadZipFile,
    NotImplementedError,
    EOFError,
    struct.error,
    OSError,
    ValueError,
)

# Failures zipfile can raise while decompressing a single member
_ENTRY_ERRORS = (
    zipfile.BadZipFile,
    zlib.error,
    NotImplementedError,
    RuntimeError,
    EOFError,
    struct.error,
    OSError,
    ValueError,
)


@dataclass(frozen=True)
class ArchiveEntry:
    """A decoded archive member."""

    path: str
    content: str


def _decode(raw: bytes) -> str:
    return raw.decode(locale.getpreferredencoding(False), errors="replace")


def iter_entries(data: bytes) -> Iterator[ArchiveEntry]:
    """
    Yield every non-directory member of a zip archive held in memory.

    Args:
        data: Raw archive bytes

    Yields:
        ArchiveEntry per file member, in archive order

    Raises:
        ArchiveReadError: If ``data`` is not a valid zip archive
        EntryReadError: If a member cannot be decompressed or read
    """
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except _ARCHIVE_ERRORS as e:
        raise ArchiveReadError(f"not a valid bundle archive: {e}") from e

    with archive:
        for info in archive.infolist():
            if info.is_dir():
                continue
            try:
                with archive.open(info) as member:
                    raw = member.read()
            except _ENTRY_ERRORS as e:
                raise EntryReadError(info.filename, str(e)) from e
            yield ArchiveEntry(path=info.filename, content=_decode(raw))


def read_archive(data: bytes) -> dict[str, str]:
    """Read an archive into a mapping of member path to text content."""
    contents = {entry.path: entry.content for entry in iter_entries(data)}
    logger.debug("Read %d file entries from archive", len(contents))
    return contents


def load_bundle(path: str | Path) -> dict[str, str]:
    """
    Read a bundle from disk.

    Raises:
        ArchiveReadError: If the file cannot be read or is not a zip archive
        EntryReadError: If a member cannot be read
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ArchiveReadError(f"failed to read file {path}: {e.strerror or e}") from e
    return read_archive(data)


__all__ = ["ArchiveEntry", "iter_entries", "load_bundle", "read_archive"]
