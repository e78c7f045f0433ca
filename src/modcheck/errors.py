"""Exception types raised by the verification engine."""

from __future__ import annotations


class ModCheckError(Exception):
    pass


class ManifestReadError(ModCheckError):
    """The checksum manifest could not be opened or read."""


class FetchError(ModCheckError):
    def __init__(self, message: str, url: str | None = None, status: int | None = None):
        super().__init__(message)
        self.url = url
        self.status = status


class ExtractionError(ModCheckError):
    pass


class ExtractionPathError(ExtractionError):
    """An archive entry would land outside the destination directory."""


class ExtractionStructureError(ExtractionError):
    """The unpacked archive is not a single top-level directory."""


class HashComputeError(ModCheckError):
    pass


class DigestMismatchError(ModCheckError):
    def __init__(self, expected: str, actual: str):
        super().__init__(f"checksum mismatch:\nexpected: {expected}\nactual: {actual}")
        self.expected = expected
        self.actual = actual
