"""Shared Pydantic models for modcheck."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class TargetKind(str, Enum):
    CONTENT_ARCHIVE = "content_archive"
    DECLARATION_FILE = "declaration_file"


class OutcomeStatus(str, Enum):
    VERIFIED = "verified"
    MISMATCH = "mismatch"
    ERROR = "error"


# === Manifest Models ===


class VerificationRecord(BaseModel):
    """One parsed line of the checksum manifest."""

    module_path: str
    version: str
    expected_digest: str
    target_kind: TargetKind = TargetKind.CONTENT_ARCHIVE

    model_config = {"frozen": True}

    @property
    def key(self) -> str:
        return f"{self.module_path}@{self.version}"

    @property
    def is_declaration(self) -> bool:
        return self.target_kind is TargetKind.DECLARATION_FILE


@dataclass(frozen=True)
class FetchedArchive:
    url: str
    content: bytes

    def __len__(self) -> int:
        return len(self.content)


# === Result Models ===


class VerificationOutcome(BaseModel):
    record: VerificationRecord
    status: OutcomeStatus
    expected: str
    actual: Optional[str] = None
    error_kind: Optional[str] = None
    cause: Optional[str] = None

    model_config = {"frozen": True}

    @classmethod
    def verified(cls, record: VerificationRecord, digest: str) -> VerificationOutcome:
        return cls(
            record=record,
            status=OutcomeStatus.VERIFIED,
            expected=record.expected_digest,
            actual=digest,
        )

    @classmethod
    def mismatch(cls, record: VerificationRecord, actual: str) -> VerificationOutcome:
        return cls(
            record=record,
            status=OutcomeStatus.MISMATCH,
            expected=record.expected_digest,
            actual=actual,
            error_kind="DigestMismatchError",
            cause=(
                f"checksum mismatch for {record.key}: "
                f"expected {record.expected_digest}, got {actual}"
            ),
        )

    @classmethod
    def failed(cls, record: VerificationRecord, exc: BaseException) -> VerificationOutcome:
        return cls(
            record=record,
            status=OutcomeStatus.ERROR,
            expected=record.expected_digest,
            error_kind=type(exc).__name__,
            cause=f"{record.key}: {exc}",
        )

    @property
    def key(self) -> str:
        return self.record.key

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.VERIFIED

    @property
    def summary(self) -> str:
        if self.ok:
            return "verified"
        return f"warning: {self.cause}"


class VerificationReport(BaseModel):
    """Outcomes in manifest order, plus the declaration records left unverified."""

    outcomes: list[VerificationOutcome] = Field(default_factory=list)
    skipped: list[VerificationRecord] = Field(default_factory=list)

    model_config = {"frozen": True}

    def _with_status(self, status: OutcomeStatus) -> list[VerificationOutcome]:
        return [o for o in self.outcomes if o.status is status]

    @property
    def verified(self) -> list[VerificationOutcome]:
        return self._with_status(OutcomeStatus.VERIFIED)

    @property
    def mismatches(self) -> list[VerificationOutcome]:
        return self._with_status(OutcomeStatus.MISMATCH)

    @property
    def errors(self) -> list[VerificationOutcome]:
        return self._with_status(OutcomeStatus.ERROR)

    @property
    def ok(self) -> bool:
        return all(o.ok for o in self.outcomes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": {o.key: o.summary for o in self.outcomes},
            "outcomes": [o.model_dump(mode="json") for o in self.outcomes],
            "skipped": [r.key for r in self.skipped],
            "counts": {
                "verified": len(self.verified),
                "mismatch": len(self.mismatches),
                "error": len(self.errors),
                "skipped": len(self.skipped),
            },
        }
