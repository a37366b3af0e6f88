from sqlalchemy import BigInteger, Column, Integer, String

from batchwatch.core.database.base import Base


class WorkflowStatModel(Base):
    """
    One workflow execution in the repository.
    All *TIME columns are epoch milliseconds (UTC).
    """
    __tablename__ = "PO_WORKFLOWSTAT"

    stat_id = Column("POW_STATID", BigInteger, primary_key=True)
    workflow_name = Column("POW_WORKFLOWDEFINITIONNAM", String, nullable=False)
    state = Column("POW_STATE", Integer, nullable=False)
    start_time = Column("POW_STARTTIME", BigInteger, nullable=False)
    end_time = Column("POW_ENDTIME", BigInteger, nullable=True)
    created_time = Column("POW_CREATEDTIME", BigInteger, nullable=True)
    last_update_time = Column("POW_LASTUPDATETIME", BigInteger, nullable=True)

    # NULL or 0 for top-level workflows. Missing on older repository versions.
    parent_stat_id = Column("POW_PARENTSTATID", BigInteger, nullable=True)


class TaskStatModel(Base):
    """
    One task execution belonging to a workflow execution.
    The repository table has no primary key; this one exists for the mapper only.
    """
    __tablename__ = "PO_TASKSTAT"

    parent_stat_id = Column("POT_PARENTSTATID", BigInteger, primary_key=True)
    task_name = Column("POT_TASKNAME", String, primary_key=True)
    start_time = Column("POT_STARTTIME", BigInteger, primary_key=True)
    service_name = Column("POT_SERVICENAME", String, nullable=True)
    node_name = Column("POT_NODENAME", String, nullable=True)
    state = Column("POT_STATE", Integer, nullable=False)
    end_time = Column("POT_ENDTIME", BigInteger, nullable=True)
