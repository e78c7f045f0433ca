"""Verification pipeline: fetch, extract, hash and compare per record."""

from __future__ import annotations

import logging
import re
import shutil
import tempfile
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional, Sequence

from modcheck.config import DEFAULT_MAX_EXTRACTED_BYTES, DEFAULT_WORKERS
from modcheck.dirhash import hash_dir
from modcheck.errors import DigestMismatchError, ModCheckError
from modcheck.extract import safe_extract
from modcheck.fetcher import ArchiveFetcher
from modcheck.models import VerificationOutcome, VerificationRecord, VerificationReport

logger = logging.getLogger(__name__)

OutcomeCallback = Callable[[VerificationOutcome], None]
StartCallback = Callable[[VerificationRecord], None]


@contextmanager
def scratch_space(parent: Optional[Path] = None) -> Iterator[Path]:
    """Create a scratch root for one run and remove it recursively afterwards."""
    if parent is not None:
        Path(parent).mkdir(parents=True, exist_ok=True)
    path = Path(tempfile.mkdtemp(prefix="modcheck-", dir=parent))
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)


def _workdir_name(index: int, record: VerificationRecord) -> str:
    safe = re.sub(r"[^A-Za-z0-9._@-]", "_", record.key)
    return f"{index:05d}-{safe}"


class Verifier:
    """Verifies content-archive records against their expected digests."""

    def __init__(
        self,
        fetcher: ArchiveFetcher,
        workers: int = DEFAULT_WORKERS,
        max_extracted_bytes: Optional[int] = DEFAULT_MAX_EXTRACTED_BYTES,
    ):
        self._fetcher = fetcher
        self._workers = max(1, workers)
        self._max_extracted_bytes = max_extracted_bytes

    def verify_record(self, record: VerificationRecord, workdir: Path) -> VerificationOutcome:
        """Run the full pipeline for one record. Never raises for per-record failures."""
        try:
            digest = self._compute(record, workdir)
            if digest != record.expected_digest:
                raise DigestMismatchError(record.expected_digest, digest)
        except DigestMismatchError as e:
            logger.warning("Checksum mismatch for %s", record.key)
            return VerificationOutcome.mismatch(record, e.actual)
        except (ModCheckError, OSError) as e:
            logger.warning("Verification of %s failed: %s", record.key, e)
            return VerificationOutcome.failed(record, e)
        return VerificationOutcome.verified(record, digest)

    def _compute(self, record: VerificationRecord, workdir: Path) -> str:
        archive = self._fetcher.fetch(record.module_path, record.version)
        root = safe_extract(archive, workdir / "extract", max_bytes=self._max_extracted_bytes)
        return hash_dir(root, record.key)

    def verify(
        self,
        records: Sequence[VerificationRecord],
        scratch_root: Path,
        on_result: Optional[OutcomeCallback] = None,
        on_start: Optional[StartCallback] = None,
    ) -> VerificationReport:
        """Verify every content-archive record; declaration records are skipped.

        Outcomes come back in manifest order regardless of completion order.
        """
        targets = [r for r in records if not r.is_declaration]
        skipped = [r for r in records if r.is_declaration]
        slots: list[Optional[VerificationOutcome]] = [None] * len(targets)

        def _run(index: int) -> None:
            record = targets[index]
            if on_start is not None:
                on_start(record)
            workdir = Path(scratch_root) / _workdir_name(index, record)
            try:
                outcome = self.verify_record(record, workdir)
            finally:
                shutil.rmtree(workdir, ignore_errors=True)
            slots[index] = outcome
            if on_result is not None:
                on_result(outcome)

        if targets:
            with ThreadPoolExecutor(max_workers=min(self._workers, len(targets))) as pool:
                futures = [pool.submit(_run, i) for i in range(len(targets))]
                for fut in futures:
                    fut.result()

        return VerificationReport(outcomes=list(slots), skipped=skipped)
