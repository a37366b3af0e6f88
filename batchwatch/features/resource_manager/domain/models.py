from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class Application:
    """
    One application as reported by the resource manager (/ws/v1/cluster/apps).
    Times are epoch milliseconds.
    """
    id: str
    name: str
    application_type: str = ""
    user: str = ""
    queue: str = ""
    state: str = ""
    final_status: str = ""
    progress: float = 0.0
    tracking_url: str = ""
    diagnostics: str = ""
    started_time: int = 0
    finished_time: int = 0
    elapsed_time: int = 0
    allocated_mb: int = 0
    allocated_vcores: int = 0
    running_containers: int = 0

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Application":
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            application_type=data.get("applicationType", ""),
            user=data.get("user", ""),
            queue=data.get("queue", ""),
            state=data.get("state", ""),
            final_status=data.get("finalStatus", ""),
            progress=float(data.get("progress") or 0.0),
            tracking_url=data.get("trackingUrl", ""),
            diagnostics=data.get("diagnostics", ""),
            started_time=int(data.get("startedTime") or 0),
            finished_time=int(data.get("finishedTime") or 0),
            elapsed_time=int(data.get("elapsedTime") or 0),
            # The RM reports -1 for finished apps
            allocated_mb=max(0, int(data.get("allocatedMB") or 0)),
            allocated_vcores=max(0, int(data.get("allocatedVCores") or 0)),
            running_containers=max(0, int(data.get("runningContainers") or 0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ClusterInfo:
    id: int
    started_on: int
    state: str
    ha_state: str = ""
    resource_manager_version: str = ""

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "ClusterInfo":
        return cls(
            id=int(data.get("id") or 0),
            started_on=int(data.get("startedOn") or 0),
            state=data.get("state", ""),
            ha_state=data.get("haState", ""),
            resource_manager_version=data.get("resourceManagerVersion", ""),
        )


# camelCase RM field -> our attribute name
_METRIC_FIELDS = {
    "appsSubmitted": "apps_submitted",
    "appsCompleted": "apps_completed",
    "appsPending": "apps_pending",
    "appsRunning": "apps_running",
    "appsFailed": "apps_failed",
    "appsKilled": "apps_killed",
    "availableMB": "available_mb",
    "allocatedMB": "allocated_mb",
    "totalMB": "total_mb",
    "availableVirtualCores": "available_vcores",
    "allocatedVirtualCores": "allocated_vcores",
    "totalVirtualCores": "total_vcores",
    "containersAllocated": "containers_allocated",
    "containersPending": "containers_pending",
    "totalNodes": "total_nodes",
    "activeNodes": "active_nodes",
    "lostNodes": "lost_nodes",
    "unhealthyNodes": "unhealthy_nodes",
    "decommissionedNodes": "decommissioned_nodes",
}


@dataclass(frozen=True)
class ClusterMetrics:
    apps_submitted: int = 0
    apps_completed: int = 0
    apps_pending: int = 0
    apps_running: int = 0
    apps_failed: int = 0
    apps_killed: int = 0
    available_mb: int = 0
    allocated_mb: int = 0
    total_mb: int = 0
    available_vcores: int = 0
    allocated_vcores: int = 0
    total_vcores: int = 0
    containers_allocated: int = 0
    containers_pending: int = 0
    total_nodes: int = 0
    active_nodes: int = 0
    lost_nodes: int = 0
    unhealthy_nodes: int = 0
    decommissioned_nodes: int = 0

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "ClusterMetrics":
        return cls(**{attr: int(data.get(key) or 0) for key, attr in _METRIC_FIELDS.items()})

    @property
    def memory_utilization(self) -> float:
        """Allocated share of total memory, in percent."""
        if self.total_mb <= 0:
            return 0.0
        return 100.0 * self.allocated_mb / self.total_mb

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
