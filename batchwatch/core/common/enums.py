# File: batchwatch/core/common/enums.py

from enum import Enum, unique

@unique
class ArtifactKind(str, Enum):
    """
    The recognized log roles inside a workflow directory.
    Declaration order is the kind-priority order used when listing artifacts.
    """
    GENERAL = "general"
    ERROR = "error"
    SUMMARY = "summary"

    @property
    def filename(self) -> str:
        return _ARTIFACT_FILENAMES[self]

_ARTIFACT_FILENAMES = {
    ArtifactKind.GENERAL: "info.log",
    ArtifactKind.ERROR: "error.log",
    ArtifactKind.SUMMARY: "run.log",
}

@unique
class WorkflowStatus(str, Enum):
    FAILED = "Failed"
    COMPLETED = "Completed"
    IN_PROGRESS = "In Progress"
    NO_LOGS = "No Logs"

@unique
class FailureScope(str, Enum):
    SOURCE = "source"
    WORKFLOW = "workflow"
    ARTIFACT = "artifact"

@unique
class RunMode(str, Enum):
    TEST = "test"
    PROD = "prod"
