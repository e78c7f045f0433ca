"""Deterministic content hashing of directory trees (the ``h1:`` scheme).

The digest of a tree is computed from a summary listing every file::

    <sha256 hex of content>  <prefix>/<relative path>\\n

with one line per file, ordered by file name. The SHA-256 of that listing,
base64 encoded and tagged ``h1:``, is the tree's digest. It does not depend on
traversal order, filesystem or platform.
"""

from __future__ import annotations

import base64
import hashlib
import logging
import os
import stat
from pathlib import Path
from typing import BinaryIO, Callable, Iterable

from modcheck.errors import HashComputeError

logger = logging.getLogger(__name__)

H1_TAG = "h1"

_CHUNK = 1 << 16


def _raise(err: OSError) -> None:
    raise err


def dir_files(root: Path, prefix: str) -> list[str]:
    """List the regular files under ``root`` as ``<prefix>/<posix relative path>``."""
    files = []
    for dirpath, _dirnames, filenames in os.walk(root, onerror=_raise):
        for name in filenames:
            full = os.path.join(dirpath, name)
            if not stat.S_ISREG(os.lstat(full).st_mode):
                continue
            rel = os.path.relpath(full, root).replace(os.sep, "/")
            files.append(f"{prefix}/{rel}")
    return files


def _sha256_hex(stream: BinaryIO) -> str:
    h = hashlib.sha256()
    for chunk in iter(lambda: stream.read(_CHUNK), b""):
        h.update(chunk)
    return h.hexdigest()


def hash1(files: Iterable[str], opener: Callable[[str], BinaryIO]) -> str:
    """Compute the ``h1:`` digest of the named files, read through ``opener``."""
    summary = hashlib.sha256()
    for name in sorted(files):
        if "\n" in name:
            raise HashComputeError(f"file names with newlines are not supported: {name!r}")
        try:
            with opener(name) as stream:
                digest = _sha256_hex(stream)
        except OSError as e:
            raise HashComputeError(f"failed to read {name}: {e}") from e
        summary.update(f"{digest}  {name}\n".encode("utf-8"))
    return f"{H1_TAG}:" + base64.b64encode(summary.digest()).decode("ascii")


def hash_dir(root: Path, prefix: str) -> str:
    """Hash every regular file under ``root``, naming each ``<prefix>/<relpath>``."""
    root = Path(root)
    try:
        files = dir_files(root, prefix)
    except OSError as e:
        raise HashComputeError(f"failed to list {root}: {e}") from e

    strip = len(prefix) + 1

    def _open(name: str) -> BinaryIO:
        return open(root.joinpath(*name[strip:].split("/")), "rb")

    digest = hash1(files, _open)
    logger.debug("Hashed %d files under %s: %s", len(files), root, digest)
    return digest
