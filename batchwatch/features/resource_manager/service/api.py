import logging
import re
import time
from datetime import timedelta
from pathlib import Path
from typing import List, Optional

from batchwatch.core.config.settings import Settings, settings as default_settings

from ..data.file_client import FileResourceManagerClient
from ..data.rest_client import RestResourceManagerClient
from ..domain.errors import ResourceManagerError
from ..domain.interfaces import IResourceManagerClient
from ..domain.models import Application, ClusterMetrics

logger = logging.getLogger(__name__)


def build_client(url: str) -> IResourceManagerClient:
    """http(s) URLs talk to a live RM; anything else is a JSON fixture path."""
    if url.startswith(("http://", "https://")):
        return RestResourceManagerClient(url)
    return FileResourceManagerClient(Path(url))


class ResourceManagerService:
    """
    Facade for the Resource Manager feature.
    """

    def __init__(self, client: IResourceManagerClient):
        self.client = client

    def running_applications(self) -> List[Application]:
        return self.client.get_applications("RUNNING")

    def applications_by_state(self, state: str) -> List[Application]:
        return self.client.get_applications(state)

    def kill_by_pattern(self, pattern: str) -> List[str]:
        """
        Kills every RUNNING application whose name matches the regex.
        A failed kill is logged and skipped. Returns the killed ids.
        """
        try:
            regex = re.compile(pattern)
        except re.error as e:
            raise ValueError(f"Invalid pattern '{pattern}': {e}") from e

        killed: List[str] = []
        for app in self.running_applications():
            if not regex.search(app.name):
                continue
            try:
                self.client.kill_application(app.id)
            except ResourceManagerError as e:
                logger.error(f"Failed to kill application {app.id} ({app.name}): {e}")
                continue
            killed.append(app.id)

        logger.info(f"Killed {len(killed)} applications matching pattern: {pattern}")
        return killed

    def stale_applications(self, max_age: timedelta, now_ms: Optional[int] = None) -> List[Application]:
        """RUNNING applications started longer than max_age ago."""
        now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
        limit_ms = max_age.total_seconds() * 1000

        return [
            app for app in self.running_applications()
            if app.started_time > 0 and (now_ms - app.started_time) > limit_ms
        ]

    def cluster_metrics(self) -> ClusterMetrics:
        return self.client.get_cluster_metrics()

    def is_healthy(self) -> bool:
        try:
            return self.client.get_cluster_info().state == "STARTED"
        except ResourceManagerError as e:
            logger.warning(f"Resource manager health check failed: {e}")
            return False


def build_service(config: Optional[Settings] = None) -> ResourceManagerService:
    config = config or default_settings
    return ResourceManagerService(build_client(config.YARN_URL))
