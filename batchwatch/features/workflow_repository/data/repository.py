import logging
from datetime import date
from typing import Callable, List, Optional

from sqlalchemy import or_, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from batchwatch.core.config.settings import settings
from batchwatch.core.database.connection import get_session_factory
from .sql_models import TaskStatModel, WorkflowStatModel
from ..domain.errors import WorkflowNotFoundError, WorkflowRepositoryError
from ..domain.interfaces import IWorkflowRepository
from ..domain.models import TaskStat, WorkflowStat, WorkflowWithTasks
from ..domain.timeutil import (
    elapsed_between,
    epoch_ms_to_local,
    local_day_bounds_ms,
    local_now,
    map_task_state,
    map_workflow_state,
)

logger = logging.getLogger(__name__)

RUNNING_STATE = 0

# Selected explicitly so the running query can drop POW_PARENTSTATID on older repositories.
_WORKFLOW_COLUMNS = (
    WorkflowStatModel.stat_id,
    WorkflowStatModel.workflow_name,
    WorkflowStatModel.state,
    WorkflowStatModel.start_time,
    WorkflowStatModel.end_time,
    WorkflowStatModel.created_time,
    WorkflowStatModel.last_update_time,
)

_TASK_COLUMNS = (
    TaskStatModel.parent_stat_id,
    TaskStatModel.task_name,
    TaskStatModel.service_name,
    TaskStatModel.node_name,
    TaskStatModel.state,
    TaskStatModel.start_time,
    TaskStatModel.end_time,
)


class SqlWorkflowRepository(IWorkflowRepository):
    """
    Reads workflow and task executions from the repository database.
    Never writes. Every call opens and closes its own session.
    """

    def __init__(
        self,
        session_factory: Optional[Callable[[], Session]] = None,
        time_offset_hours: Optional[int] = None,
    ):
        self._session_factory = session_factory
        self.time_offset_hours = (
            settings.INFORMATICA_TIME_OFFSET if time_offset_hours is None else time_offset_hours
        )

    def _session(self) -> Session:
        factory = self._session_factory or get_session_factory()
        return factory()

    def workflows_started_on(self, day: date) -> List[WorkflowStat]:
        start_ms, end_ms = local_day_bounds_ms(day, self.time_offset_hours)

        try:
            with self._session() as db:
                rows = (
                    db.query(*_WORKFLOW_COLUMNS)
                    .filter(WorkflowStatModel.start_time >= start_ms)
                    .filter(WorkflowStatModel.start_time < end_ms)
                    .order_by(WorkflowStatModel.start_time.desc())
                    .all()
                )
        except SQLAlchemyError as e:
            raise WorkflowRepositoryError(f"Failed to query workflows for {day}: {e}") from e

        return [self._to_workflow(row) for row in rows]

    def running_workflows(self) -> List[WorkflowStat]:
        try:
            rows = self._query_running(top_level_only=True)
        except SQLAlchemyError as e:
            # The driver message, not the statement: the statement always names the column
            if "POW_PARENTSTATID" not in str(getattr(e, "orig", e)).upper():
                raise WorkflowRepositoryError(f"Failed to query running workflows: {e}") from e

            # Older repositories have no parent column: every row is top-level.
            logger.warning("POW_PARENTSTATID unavailable, querying running workflows without parent filter")
            try:
                rows = self._query_running(top_level_only=False)
            except SQLAlchemyError as retry_error:
                raise WorkflowRepositoryError(
                    f"Failed to query running workflows: {retry_error}"
                ) from retry_error

        return [self._to_workflow(row) for row in rows]

    def _query_running(self, top_level_only: bool):
        with self._session() as db:
            query = db.query(*_WORKFLOW_COLUMNS).filter(WorkflowStatModel.state == RUNNING_STATE)
            if top_level_only:
                query = query.filter(
                    or_(
                        WorkflowStatModel.parent_stat_id.is_(None),
                        WorkflowStatModel.parent_stat_id == 0,
                    )
                )
            return query.order_by(WorkflowStatModel.start_time.desc()).all()

    def workflow_with_tasks(self, stat_id: int) -> WorkflowWithTasks:
        try:
            with self._session() as db:
                # 1. Parent execution
                row = db.query(*_WORKFLOW_COLUMNS).filter(WorkflowStatModel.stat_id == stat_id).first()
                if row is None:
                    raise WorkflowNotFoundError(f"Workflow execution {stat_id} not found")

                # 2. Its tasks, in execution order
                task_rows = (
                    db.query(*_TASK_COLUMNS)
                    .filter(TaskStatModel.parent_stat_id == stat_id)
                    .order_by(TaskStatModel.start_time.asc())
                    .all()
                )
        except SQLAlchemyError as e:
            raise WorkflowRepositoryError(f"Failed to load workflow execution {stat_id}: {e}") from e

        return WorkflowWithTasks(
            workflow=self._to_workflow(row),
            tasks=[self._to_task(task_row) for task_row in task_rows],
        )

    def is_healthy(self) -> bool:
        try:
            with self._session() as db:
                db.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning(f"Workflow repository health check failed: {e}")
            return False

    def _to_workflow(self, row) -> WorkflowStat:
        offset = self.time_offset_hours
        started = epoch_ms_to_local(row.start_time, offset)
        finished = epoch_ms_to_local(row.end_time, offset)

        return WorkflowStat(
            stat_id=row.stat_id,
            workflow_name=row.workflow_name,
            status=map_workflow_state(row.state),
            started_at=started,
            finished_at=finished,
            created_at=epoch_ms_to_local(row.created_time, offset),
            updated_at=epoch_ms_to_local(row.last_update_time, offset),
            elapsed=elapsed_between(started, finished or local_now(offset)),
        )

    def _to_task(self, row) -> TaskStat:
        offset = self.time_offset_hours
        started = epoch_ms_to_local(row.start_time, offset)
        finished = epoch_ms_to_local(row.end_time, offset)

        return TaskStat(
            parent_stat_id=row.parent_stat_id,
            task_name=row.task_name,
            service_name=row.service_name or "",
            node_name=row.node_name or "",
            status=map_task_state(row.state),
            started_at=started,
            finished_at=finished,
            elapsed=elapsed_between(started, finished or local_now(offset)),
        )
