import pytest

from batchwatch.core.common.enums import WorkflowStatus
from batchwatch.features.log_scanner.domain.status_rules import (
    STATUS_TABLE,
    StatusEvidence,
    derive_status,
)


@pytest.mark.parametrize("has_error, count, has_summary, expected", [
    (True, 3, True, WorkflowStatus.FAILED),
    (True, 1, False, WorkflowStatus.FAILED),
    (False, 0, False, WorkflowStatus.NO_LOGS),
    (False, 2, True, WorkflowStatus.COMPLETED),
    (False, 1, True, WorkflowStatus.COMPLETED),
    (False, 2, False, WorkflowStatus.IN_PROGRESS),
])
def test_decision_table(has_error, count, has_summary, expected):
    evidence = StatusEvidence(has_error=has_error, artifact_count=count, has_summary=has_summary)

    assert derive_status(evidence) == expected


def test_error_dominates_completion():
    evidence = StatusEvidence(has_error=True, artifact_count=3, has_summary=True)

    assert derive_status(evidence) == WorkflowStatus.FAILED


def test_table_ends_with_catch_all():
    last = STATUS_TABLE[-1]
    assert last.applies(StatusEvidence(False, 0, False))
    assert last.status == WorkflowStatus.IN_PROGRESS


def test_evidence_from_no_artifacts():
    evidence = StatusEvidence.from_artifacts([])

    assert evidence == StatusEvidence(has_error=False, artifact_count=0, has_summary=False)
