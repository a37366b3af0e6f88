from abc import ABC, abstractmethod
from datetime import date
from typing import List

from .models import WorkflowStat, WorkflowWithTasks


class IWorkflowRepository(ABC):
    """
    Read-only contract for the workflow-execution repository.
    """

    @abstractmethod
    def workflows_started_on(self, day: date) -> List[WorkflowStat]:
        """Executions that started on a repository-local calendar day, newest first."""
        pass

    @abstractmethod
    def running_workflows(self) -> List[WorkflowStat]:
        """Top-level executions still running, newest first."""
        pass

    @abstractmethod
    def workflow_with_tasks(self, stat_id: int) -> WorkflowWithTasks:
        """Raises WorkflowNotFoundError for an unknown stat id."""
        pass

    @abstractmethod
    def is_healthy(self) -> bool:
        pass
