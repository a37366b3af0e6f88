from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class Elapsed:
    hrs: int = 0
    min: int = 0
    sec: int = 0

    def __str__(self) -> str:
        return f"{self.hrs:02d}:{self.min:02d}:{self.sec:02d}"

    def to_dict(self) -> Dict[str, int]:
        return {"hrs": self.hrs, "min": self.min, "sec": self.sec}


@dataclass(frozen=True)
class WorkflowStat:
    """
    A workflow execution. Datetimes are naive, in repository-local time.
    finished_at is None while the workflow is still running.
    """
    stat_id: int
    workflow_name: str
    status: str
    started_at: Optional[datetime]
    finished_at: Optional[datetime]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    elapsed: Elapsed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stat_id": self.stat_id,
            "workflow_name": self.workflow_name,
            "status": self.status,
            "started_at": _iso(self.started_at),
            "finished_at": _iso(self.finished_at),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
            "elapsed": self.elapsed.to_dict(),
        }


@dataclass(frozen=True)
class TaskStat:
    parent_stat_id: int
    task_name: str
    service_name: str
    node_name: str
    status: str
    started_at: Optional[datetime]
    finished_at: Optional[datetime]
    elapsed: Elapsed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parent_stat_id": self.parent_stat_id,
            "task_name": self.task_name,
            "service_name": self.service_name,
            "node_name": self.node_name,
            "status": self.status,
            "started_at": _iso(self.started_at),
            "finished_at": _iso(self.finished_at),
            "elapsed": self.elapsed.to_dict(),
        }


@dataclass(frozen=True)
class WorkflowWithTasks:
    workflow: WorkflowStat
    tasks: List[TaskStat] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"workflow": self.workflow.to_dict(), "tasks": [t.to_dict() for t in self.tasks]}
