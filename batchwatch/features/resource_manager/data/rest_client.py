import logging
from typing import Any, Dict, List, Optional

import backoff
import requests

from ..domain.errors import ResourceManagerError
from ..domain.interfaces import IResourceManagerClient
from ..domain.models import Application, ClusterInfo, ClusterMetrics

logger = logging.getLogger(__name__)


class RestResourceManagerClient(IResourceManagerClient):
    """
    Adapter for the resource manager REST API (/ws/v1/cluster/...).
    GETs are retried with exponential backoff; the kill PUT is sent once.
    """

    def __init__(self, base_url: str, timeout: int = 30, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._sess = session or requests.Session()
        self._sess.headers.update({"Accept": "application/json"})
        logger.info(f"Creating resource manager client for RM: {self.base_url}")

    # ---- internal helpers ------------------------------------------------ #

    @backoff.on_exception(
        backoff.expo,
        (requests.ConnectionError, requests.Timeout),
        max_tries=3,
        jitter=backoff.full_jitter
    )
    def _fetch(self, path: str, **kw) -> requests.Response:
        kw.setdefault("timeout", self.timeout)
        return self._sess.get(f"{self.base_url}{path}", **kw)

    def _get_json(self, path: str, what: str, **kw) -> Dict[str, Any]:
        try:
            resp = self._fetch(path, **kw)
        except requests.RequestException as e:
            raise ResourceManagerError(f"Failed to fetch {what}: {e}") from e

        if resp.status_code != 200:
            raise ResourceManagerError(f"Failed to fetch {what}: HTTP {resp.status_code}", resp.status_code)

        try:
            return resp.json() or {}
        except ValueError as e:
            raise ResourceManagerError(f"Failed to decode {what} response: {e}") from e

    # ---- API ------------------------------------------------------------- #

    def get_applications(self, state: str) -> List[Application]:
        data = self._get_json("/ws/v1/cluster/apps", "applications", params={"states": state})
        # The RM returns {"apps": null} when nothing matches
        apps = (data.get("apps") or {}).get("app") or []
        return [Application.from_json(a) for a in apps]

    def get_application(self, app_id: str) -> Application:
        data = self._get_json(f"/ws/v1/cluster/apps/{app_id}", f"application {app_id}")
        if not data.get("app"):
            raise ResourceManagerError(f"Application {app_id} not found", 404)
        return Application.from_json(data["app"])

    def kill_application(self, app_id: str) -> None:
        url = f"{self.base_url}/ws/v1/cluster/apps/{app_id}/state"
        try:
            resp = self._sess.put(url, json={"state": "KILLED"}, timeout=self.timeout)
        except requests.RequestException as e:
            raise ResourceManagerError(f"Failed to kill application {app_id}: {e}") from e

        if resp.status_code not in (200, 202):
            raise ResourceManagerError(
                f"Failed to kill application {app_id}: HTTP {resp.status_code}", resp.status_code
            )
        logger.info(f"Successfully killed application: {app_id}")

    def get_cluster_info(self) -> ClusterInfo:
        data = self._get_json("/ws/v1/cluster/info", "cluster info")
        return ClusterInfo.from_json(data.get("clusterInfo") or {})

    def get_cluster_metrics(self) -> ClusterMetrics:
        data = self._get_json("/ws/v1/cluster/metrics", "cluster metrics")
        return ClusterMetrics.from_json(data.get("clusterMetrics") or {})
