from dataclasses import dataclass
from typing import Callable, Sequence, Tuple

from batchwatch.core.common.enums import ArtifactKind, WorkflowStatus

from .models import LogArtifact


@dataclass(frozen=True)
class StatusEvidence:
    """What the inspector found in one workflow directory."""
    has_error: bool
    artifact_count: int
    has_summary: bool

    @classmethod
    def from_artifacts(cls, artifacts: Sequence[LogArtifact]) -> "StatusEvidence":
        return cls(
            has_error=any(a.signals_error for a in artifacts),
            artifact_count=len(artifacts),
            has_summary=any(a.kind == ArtifactKind.SUMMARY for a in artifacts),
        )


@dataclass(frozen=True)
class StatusRule:
    name: str
    applies: Callable[[StatusEvidence], bool]
    status: WorkflowStatus


# Evaluated top to bottom; the first matching row wins.
# Error evidence dominates completion evidence.
STATUS_TABLE: Tuple[StatusRule, ...] = (
    StatusRule("error signaled", lambda e: e.has_error, WorkflowStatus.FAILED),
    StatusRule("no artifacts", lambda e: e.artifact_count == 0, WorkflowStatus.NO_LOGS),
    StatusRule("summary present", lambda e: e.has_summary, WorkflowStatus.COMPLETED),
    StatusRule("otherwise", lambda e: True, WorkflowStatus.IN_PROGRESS),
)


def derive_status(evidence: StatusEvidence) -> WorkflowStatus:
    for rule in STATUS_TABLE:
        if rule.applies(evidence):
            return rule.status
    # Unreachable: the last row always applies
    return WorkflowStatus.IN_PROGRESS
