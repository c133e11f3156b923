"""Data models for the dropbox_backup package."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class OutcomeKind(Enum):
    """Result of a single upload request."""

    SUCCESS = "success"
    AUTH_EXPIRED = "auth_expired"
    PERMANENT_FAILURE = "permanent_failure"


class CandidateState(Enum):
    """Terminal state of a candidate after orchestration."""

    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    PERMANENT_FAILURE = "permanent_failure"
    PARTIAL_SUCCESS = "partial_success"


@dataclass(frozen=True)
class FileCandidate:
    """A local file eligible for transfer."""

    path: Path
    display_name: str
    extension: str

    @classmethod
    def from_path(cls, path: Path) -> FileCandidate:
        path = path.absolute()
        return cls(
            path=path,
            display_name=path.name.replace(" ", "_"),
            extension=path.suffix,
        )


@dataclass(frozen=True)
class TransferOutcome:
    """Outcome of one upload attempt."""

    kind: OutcomeKind
    status_code: int | None = None
    reason: str | None = None

    @property
    def success(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    @property
    def auth_expired(self) -> bool:
        return self.kind is OutcomeKind.AUTH_EXPIRED

    @classmethod
    def ok(cls, status_code: int) -> TransferOutcome:
        return cls(OutcomeKind.SUCCESS, status_code=status_code)

    @classmethod
    def unauthorized(cls) -> TransferOutcome:
        return cls(OutcomeKind.AUTH_EXPIRED, status_code=401)

    @classmethod
    def failed(cls, reason: str, status_code: int | None = None) -> TransferOutcome:
        return cls(OutcomeKind.PERMANENT_FAILURE, status_code=status_code, reason=reason)


@dataclass(frozen=True)
class CandidateResult:
    """Terminal result for one candidate."""

    candidate: FileCandidate
    state: CandidateState
    remote_path: str
    error: str | None = None
    refreshed: bool = False

    @property
    def success(self) -> bool:
        return self.state in (CandidateState.SUCCEEDED, CandidateState.SKIPPED)


@dataclass
class RunReport:
    """Ordered results of one pipeline run."""

    results: list[CandidateResult] = field(default_factory=list)

    def counts(self) -> Counter[CandidateState]:
        return Counter(result.state for result in self.results)

    def by_state(self, state: CandidateState) -> list[CandidateResult]:
        return [result for result in self.results if result.state is state]

    @property
    def ok(self) -> bool:
        """True when no candidate failed or was left half-done."""
        return all(result.success for result in self.results)

    def __len__(self) -> int:
        return len(self.results)
