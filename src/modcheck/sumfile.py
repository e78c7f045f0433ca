"""Checksum manifest parser - loads go.sum style files."""

from __future__ import annotations

from pathlib import Path

from modcheck.errors import ManifestReadError
from modcheck.models import TargetKind, VerificationRecord

SUM_FILE_NAME = "go.sum"
DECLARATION_SUFFIX = "/go.mod"


def parse_sum(text: str) -> list[VerificationRecord]:
    """Parse manifest text into records, in file order.

    Each line is ``<module path> <version>[/go.mod] <digest>``. Lines that do
    not split into exactly three fields are skipped.
    """
    records = []
    for line in text.splitlines():
        parts = line.split()
        if len(parts) != 3:
            continue

        path, version, digest = parts
        kind = TargetKind.CONTENT_ARCHIVE
        if version.endswith(DECLARATION_SUFFIX):
            version = version[: -len(DECLARATION_SUFFIX)]
            kind = TargetKind.DECLARATION_FILE

        records.append(
            VerificationRecord(
                module_path=path,
                version=version,
                expected_digest=digest,
                target_kind=kind,
            )
        )
    return records


def load_sum_file(path: Path) -> list[VerificationRecord]:
    """Read and parse a manifest file. Any read failure aborts the whole file."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestReadError(f"failed to read {path}: {e}") from e
    return parse_sum(text)


def find_sum_file(project_dir: Path) -> Path:
    project_dir = Path(project_dir)
    if not project_dir.is_dir():
        raise ManifestReadError(f"Project directory does not exist: {project_dir}")
    sum_file = project_dir / SUM_FILE_NAME
    if not sum_file.is_file():
        raise ManifestReadError(f"{SUM_FILE_NAME} file not found in: {project_dir}")
    return sum_file
