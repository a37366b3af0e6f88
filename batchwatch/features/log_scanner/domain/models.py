from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from batchwatch.core.common.enums import ArtifactKind, FailureScope, WorkflowStatus


@dataclass(frozen=True)
class LogArtifact:
    """
    One recognized log file inside a workflow directory, as seen at scan time.
    """
    source: str
    date: str
    workflow: str
    kind: ArtifactKind
    path: Path
    size_bytes: int
    modified_at: datetime
    signals_error: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "date": self.date,
            "workflow": self.workflow,
            "kind": self.kind.value,
            "log_type": self.kind.filename,
            "file_path": str(self.path),
            "size": self.size_bytes,
            "mod_time": self.modified_at.isoformat(),
            "has_errors": self.signals_error,
        }


@dataclass(frozen=True)
class WorkflowRun:
    """
    Aggregate view of one workflow directory for one date.
    (source, date, workflow) is the natural key.

    has_error is derived from the artifacts and cannot be passed in.
    """
    source: str
    date: str
    workflow: str
    artifacts: Tuple[LogArtifact, ...]
    status: WorkflowStatus
    has_error: bool = field(init=False)

    def __post_init__(self):
        # Frozen dataclass: bypass __setattr__ for the derived field
        object.__setattr__(self, "has_error", any(a.signals_error for a in self.artifacts))

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.source, self.date, self.workflow)

    def artifact(self, kind: ArtifactKind) -> Optional[LogArtifact]:
        return next((a for a in self.artifacts if a.kind == kind), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "date": self.date,
            "workflow": self.workflow,
            "status": self.status.value,
            "has_errors": self.has_error,
            "logs": [a.to_dict() for a in self.artifacts],
        }


@dataclass(frozen=True)
class ScanFailure:
    """A unit (source, workflow or artifact) left out of a scan, and why."""
    scope: FailureScope
    unit: str
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {"scope": self.scope.value, "unit": self.unit, "reason": self.reason}


@dataclass(frozen=True)
class ScanResult:
    """
    Ordered runs for one date, paired with everything that was skipped.
    """
    date: str
    runs: Tuple[WorkflowRun, ...] = ()
    failures: Tuple[ScanFailure, ...] = ()

    def __len__(self) -> int:
        return len(self.runs)

    def __iter__(self):
        return iter(self.runs)

    @property
    def is_partial(self) -> bool:
        return bool(self.failures)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "workflows": [r.to_dict() for r in self.runs],
            "skipped": [f.to_dict() for f in self.failures],
        }


@dataclass(frozen=True)
class SearchMatch:
    """First line of an artifact that contains the searched keyword."""
    artifact: LogArtifact
    line_number: int
    line: str

    def to_dict(self) -> Dict[str, Any]:
        data = self.artifact.to_dict()
        data["line_number"] = self.line_number
        data["content"] = self.line
        return data
