from datetime import date, datetime, timedelta, timezone
from typing import Optional, Tuple

from .models import Elapsed

_WORKFLOW_STATES = {0: "RUNNING", 1: "SUCCESS", 3: "FAILED"}
_TASK_STATES = {1: "RUNNING", 2: "SUCCESS"}


def map_workflow_state(state: int) -> str:
    return _WORKFLOW_STATES.get(state, f"UNKNOWN_{state}")


def map_task_state(state: int) -> str:
    return _TASK_STATES.get(state, f"UNKNOWN_{state}")


def epoch_ms_to_local(epoch_ms: Optional[int], offset_hours: int) -> Optional[datetime]:
    """
    Repository epoch milliseconds -> naive repository-local datetime.
    0 / NULL mean "not set". Sub-second precision is dropped.
    """
    if not epoch_ms:
        return None
    utc = datetime.fromtimestamp(epoch_ms // 1000, tz=timezone.utc).replace(tzinfo=None)
    return utc + timedelta(hours=offset_hours)


def local_now(offset_hours: int) -> datetime:
    """Current time in the same naive, offset frame as epoch_ms_to_local."""
    return datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(hours=offset_hours)


def local_day_bounds_ms(day: date, offset_hours: int) -> Tuple[int, int]:
    """[start, end) of a repository-local calendar day, as UTC epoch milliseconds."""
    start_local = datetime(day.year, day.month, day.day)
    start_utc = (start_local - timedelta(hours=offset_hours)).replace(tzinfo=timezone.utc)
    start_ms = int(start_utc.timestamp()) * 1000
    return start_ms, start_ms + 24 * 3600 * 1000


def elapsed_between(start: Optional[datetime], end: datetime) -> Elapsed:
    if start is None:
        return Elapsed()

    total = max(0, int((end - start).total_seconds()))
    return Elapsed(hrs=total // 3600, min=(total % 3600) // 60, sec=total % 60)
