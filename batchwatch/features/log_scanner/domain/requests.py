import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from batchwatch.core.common.enums import WorkflowStatus

from .errors import InvalidScanRequestError

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def validate_date(date: str) -> str:
    """Accepts only a real calendar date written as YYYY-MM-DD."""
    if not isinstance(date, str) or not _ISO_DATE.match(date):
        raise InvalidScanRequestError(f"Invalid date '{date}': expected YYYY-MM-DD")
    try:
        datetime.strptime(date, "%Y-%m-%d")
    except ValueError:
        raise InvalidScanRequestError(f"Invalid date '{date}': not a calendar date")
    return date


def parse_status(status: Union[str, WorkflowStatus, None]) -> Optional[WorkflowStatus]:
    """Accepts a WorkflowStatus, its label ('In Progress') or its name ('in_progress')."""
    if status is None or status == "":
        return None
    if isinstance(status, WorkflowStatus):
        return status

    for candidate in WorkflowStatus:
        if status.strip().lower() in (candidate.value.lower(), candidate.name.lower()):
            return candidate

    allowed = ", ".join(s.value for s in WorkflowStatus)
    raise InvalidScanRequestError(f"Unknown status '{status}'. Expected one of: {allowed}")


@dataclass(frozen=True)
class ScanRequest:
    """
    User intent to scan one date. Validated on creation.
    """
    date: str

    def __post_init__(self):
        validate_date(self.date)


@dataclass(frozen=True)
class SearchRequest:
    """
    User intent to search one date's artifacts for a keyword.
    """
    keyword: str
    date: str
    max_lines: int = 1000

    def __post_init__(self):
        if not isinstance(self.keyword, str) or not self.keyword.strip():
            raise InvalidScanRequestError("Search keyword cannot be empty.")
        if self.max_lines < 0:
            raise InvalidScanRequestError(f"max_lines cannot be negative: {self.max_lines}")
        validate_date(self.date)
