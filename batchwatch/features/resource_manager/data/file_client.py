import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from ..domain.errors import ResourceManagerError
from ..domain.interfaces import IResourceManagerClient
from ..domain.models import Application, ClusterInfo, ClusterMetrics

logger = logging.getLogger(__name__)


class FileResourceManagerClient(IResourceManagerClient):
    """
    Test-mode adapter: serves a saved RM response document from disk.

    The file holds the /ws/v1/cluster/apps payload ({"apps": {"app": [...]}}),
    optionally with "clusterInfo" and "clusterMetrics" sections.
    The document is re-read on every call. Kills are refused.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        logger.info(f"Creating file-backed resource manager client: {self.path}")

    def _load(self) -> Dict[str, Any]:
        try:
            return json.loads(self.path.read_text()) or {}
        except OSError as e:
            raise ResourceManagerError(f"Cannot read RM fixture {self.path}: {e}") from e
        except ValueError as e:
            raise ResourceManagerError(f"Invalid RM fixture {self.path}: {e}") from e

    def _apps(self) -> List[Application]:
        apps = (self._load().get("apps") or {}).get("app") or []
        return [Application.from_json(a) for a in apps]

    def get_applications(self, state: str) -> List[Application]:
        wanted = {s.strip().upper() for s in state.split(",")}
        return [a for a in self._apps() if a.state.upper() in wanted]

    def get_application(self, app_id: str) -> Application:
        for app in self._apps():
            if app.id == app_id:
                return app
        raise ResourceManagerError(f"Application {app_id} not found", 404)

    def kill_application(self, app_id: str) -> None:
        raise ResourceManagerError(f"Cannot kill {app_id}: file-backed client is read-only")

    def get_cluster_info(self) -> ClusterInfo:
        # A fixture without clusterInfo describes a healthy cluster
        return ClusterInfo.from_json(self._load().get("clusterInfo") or {"state": "STARTED"})

    def get_cluster_metrics(self) -> ClusterMetrics:
        return ClusterMetrics.from_json(self._load().get("clusterMetrics") or {})
