"""Safe ZIP extraction into an isolated directory."""

from __future__ import annotations

import io
import logging
import os
import re
import shutil
import stat
import zipfile
import zlib
from pathlib import Path
from typing import Optional, Union

from modcheck.errors import ExtractionError, ExtractionPathError, ExtractionStructureError
from modcheck.models import FetchedArchive

logger = logging.getLogger(__name__)

_DRIVE = re.compile(r"^[A-Za-z]:")

# What zipfile and zlib raise for hostile or damaged archives.
_ARCHIVE_ERRORS = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    zlib.error,
    NotImplementedError,
    RuntimeError,
    UnicodeDecodeError,
    ValueError,
    EOFError,
)


def _is_symlink(info: zipfile.ZipInfo) -> bool:
    mode = info.external_attr >> 16
    return stat.S_ISLNK(mode)


def _is_absolute(name: str) -> bool:
    return name.startswith("/") or bool(_DRIVE.match(name))


def _resolve_member(dest: str, name: str) -> str:
    """Return the absolute target path for an entry, or raise if it escapes dest."""
    normalized = name.replace("\\", "/")
    if _is_absolute(normalized):
        raise ExtractionPathError(f"invalid file path: {name} (absolute path)")

    target = os.path.normpath(os.path.join(dest, *normalized.split("/")))
    if target == dest or os.path.commonpath([dest, target]) != dest:
        raise ExtractionPathError(f"invalid file path: {name} (escapes destination)")
    return target


def _check_link(dest: str, target: str, info: zipfile.ZipInfo, link: str) -> None:
    """Reject a symlink entry whose target would point outside dest."""
    normalized = link.replace("\\", "/")
    escapes = _is_absolute(normalized)
    if not escapes:
        resolved = os.path.normpath(os.path.join(os.path.dirname(target), *normalized.split("/")))
        escapes = os.path.commonpath([dest, resolved]) != dest
    if escapes:
        raise ExtractionPathError(
            f"invalid file path: {info.filename} (symlink to {link!r} escapes destination)"
        )


def _check_real_parent(dest_real: str, target: str) -> None:
    # Catches directories under dest that were swapped for symlinks.
    parent = os.path.realpath(os.path.dirname(target))
    if os.path.commonpath([dest_real, parent]) != dest_real:
        raise ExtractionPathError(f"invalid file path: {target} (symbolic escape)")


def _check_size(zf: zipfile.ZipFile, max_bytes: Optional[int]) -> None:
    if max_bytes is None:
        return
    total = sum(info.file_size for info in zf.infolist())
    if total > max_bytes:
        raise ExtractionError(
            f"archive expands to {total} bytes, exceeding the limit of {max_bytes} bytes"
        )


def safe_extract(
    archive: Union[FetchedArchive, bytes],
    dest: Path,
    max_bytes: Optional[int] = None,
) -> Path:
    """Unpack a ZIP archive into ``dest`` and return its single root directory.

    Every entry must resolve inside ``dest``. The first entry that does not
    (parent segments, absolute paths, drive letters, symlinks pointing
    outside) aborts the extraction with ExtractionPathError. Symlinks that
    stay inside the tree are not written, matching how module zips and the
    h1 hash ignore them. Permission bits stored in the archive are ignored.
    ``max_bytes`` caps the total uncompressed size.
    """
    data = archive.content if isinstance(archive, FetchedArchive) else archive
    dest = Path(dest)
    dest.mkdir(parents=True, exist_ok=True)
    dest_abs = os.path.abspath(dest)
    dest_real = os.path.realpath(dest)

    try:
        zf = zipfile.ZipFile(io.BytesIO(data))
    except _ARCHIVE_ERRORS as e:
        raise ExtractionError(f"failed to open archive: {e}") from e

    with zf:
        _check_size(zf, max_bytes)
        for info in zf.infolist():
            target = _resolve_member(dest_abs, info.filename)

            try:
                if _is_symlink(info):
                    link = zf.read(info).decode("utf-8")
                    _check_link(dest_abs, target, info, link)
                    logger.debug("Skipping symlink %s -> %s", info.filename, link)
                    continue

                if info.is_dir():
                    os.makedirs(target, exist_ok=True)
                    continue

                os.makedirs(os.path.dirname(target), exist_ok=True)
                _check_real_parent(dest_real, target)
                with zf.open(info) as src, open(target, "wb") as out:
                    shutil.copyfileobj(src, out)
            except (OSError,) + _ARCHIVE_ERRORS as e:
                raise ExtractionError(f"failed to extract {info.filename}: {e}") from e

    entries = list(dest.iterdir())
    if len(entries) != 1 or entries[0].is_symlink() or not entries[0].is_dir():
        raise ExtractionStructureError(
            f"unexpected archive structure: expected one top-level directory, "
            f"found {sorted(e.name for e in entries)}"
        )

    logger.debug("Extracted archive into %s", entries[0])
    return entries[0]
