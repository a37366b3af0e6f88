from abc import ABC, abstractmethod
from typing import List

from .models import Application, ClusterInfo, ClusterMetrics


class IResourceManagerClient(ABC):
    """
    Contract for talking to the cluster resource manager.
    All failures surface as ResourceManagerError.
    """

    @abstractmethod
    def get_applications(self, state: str) -> List[Application]:
        """Applications currently in `state` (e.g. RUNNING, ACCEPTED)."""
        pass

    @abstractmethod
    def get_application(self, app_id: str) -> Application:
        pass

    @abstractmethod
    def kill_application(self, app_id: str) -> None:
        """Requests the KILLED state for one application."""
        pass

    @abstractmethod
    def get_cluster_info(self) -> ClusterInfo:
        pass

    @abstractmethod
    def get_cluster_metrics(self) -> ClusterMetrics:
        pass
