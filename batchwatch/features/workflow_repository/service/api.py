import logging
from typing import List, Optional

from batchwatch.core.config.settings import Settings, settings as default_settings
from batchwatch.core.database.connection import build_engine, build_session_factory

from ..data.repository import SqlWorkflowRepository
from ..domain.errors import WorkflowNotFoundError
from ..domain.interfaces import IWorkflowRepository
from ..domain.models import WorkflowStat, WorkflowWithTasks
from ..domain.timeutil import local_now

logger = logging.getLogger(__name__)


class WorkflowRepositoryService:
    """
    Facade for the workflow repository feature.
    """

    def __init__(self, repository: IWorkflowRepository, time_offset_hours: int = 3):
        self.repository = repository
        self.time_offset_hours = time_offset_hours

    def workflows_today(self) -> List[WorkflowStat]:
        """Executions started on the current repository-local day."""
        today = local_now(self.time_offset_hours).date()
        return self.repository.workflows_started_on(today)

    def running_workflows(self) -> List[WorkflowStat]:
        return self.repository.running_workflows()

    def workflow_with_tasks(self, stat_id: int) -> WorkflowWithTasks:
        return self.repository.workflow_with_tasks(stat_id)

    def platform_tree(self, platform: Optional[str] = None) -> List[WorkflowWithTasks]:
        """
        Today's executions whose name contains `platform` (case-insensitive),
        each with its tasks. No platform means every execution of the day.
        """
        needle = (platform or "").lower()
        tree: List[WorkflowWithTasks] = []

        for workflow in self.workflows_today():
            if needle and needle not in workflow.workflow_name.lower():
                continue
            try:
                tree.append(self.repository.workflow_with_tasks(workflow.stat_id))
            except WorkflowNotFoundError:
                # Purged between the two queries.
                logger.debug(f"Workflow execution {workflow.stat_id} disappeared, skipping")

        return tree

    def is_healthy(self) -> bool:
        return self.repository.is_healthy()


def build_service(config: Optional[Settings] = None) -> WorkflowRepositoryService:
    """Connects to the repository named by config.WORKFLOW_REPO_URL."""
    config = config or default_settings
    offset = config.INFORMATICA_TIME_OFFSET

    session_factory = build_session_factory(build_engine(config.WORKFLOW_REPO_URL))
    repository = SqlWorkflowRepository(session_factory=session_factory, time_offset_hours=offset)
    return WorkflowRepositoryService(repository, time_offset_hours=offset)
