import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date as date_cls
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from batchwatch.core.common.enums import FailureScope, WorkflowStatus

from ..data.tree_walker import LocalLogTreeWalker
from ..domain.interfaces import ILogTreeWalker
from ..domain.models import ScanFailure, ScanResult, WorkflowRun
from ..domain.requests import ScanRequest, parse_status
from .inspector import WorkflowInspector

module_logger = logging.getLogger(__name__)

SourceOutcome = Tuple[List[WorkflowRun], List[ScanFailure]]


class LogScanner:
    """
    Scan Orchestrator.

    Walks every source for one date, inspects each workflow directory and
    returns a ScanResult sorted by (source, workflow).

    A broken source, workflow or artifact is logged, recorded in
    ScanResult.failures and left out. Only an unlistable root fails the scan.
    Each call builds its result from scratch; nothing is cached between calls.
    """

    def __init__(self,
                 root: Union[str, Path],
                 walker: Optional[ILogTreeWalker] = None,
                 inspector: Optional[WorkflowInspector] = None,
                 logger: Optional[logging.Logger] = None,
                 max_workers: int = 1,
                 clock: Callable[[], date_cls] = date_cls.today):
        self.root = Path(root)
        self.logger = logger or module_logger
        self.walker = walker or LocalLogTreeWalker()
        self.inspector = inspector or WorkflowInspector(self.root, logger=self.logger)
        self.max_workers = max(1, max_workers)
        self.clock = clock
        self.logger.debug(f"INIT: LogScanner root={self.root} workers={self.max_workers}")

    def today(self) -> str:
        """Caller's local calendar date, ISO formatted."""
        return self.clock().isoformat()

    def scan_today(self) -> ScanResult:
        today = self.today()
        self.logger.info(f"Scanning today's logs for date: {today}")
        return self.scan(today)

    def scan(self, date: str) -> ScanResult:
        request = ScanRequest(date=date)
        self.logger.info(f"Scanning logs for date: {request.date} in root: {self.root}")

        # Raises LogRootUnavailableError: the only whole-scan failure
        sources = self.walker.list_sources(self.root)

        if self.max_workers > 1 and len(sources) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                outcomes = list(pool.map(lambda s: self._scan_source(s, request.date), sources))
        else:
            outcomes = [self._scan_source(s, request.date) for s in sources]

        runs: List[WorkflowRun] = []
        failures: List[ScanFailure] = []
        for source_runs, source_failures in outcomes:
            runs.extend(source_runs)
            failures.extend(source_failures)

        # Explicit ordinal sort, independent of directory listing order
        runs.sort(key=lambda r: (r.source, r.workflow))

        self.logger.info(
            f"Found {len(runs)} workflow runs for date {request.date}"
            + (f" ({len(failures)} units skipped)" if failures else "")
        )
        return ScanResult(date=request.date, runs=tuple(runs), failures=tuple(failures))

    def _scan_source(self, source: str, date: str) -> SourceOutcome:
        runs: List[WorkflowRun] = []
        failures: List[ScanFailure] = []

        try:
            workflows = self.walker.list_workflows(self.root, source, date)
        except OSError as e:
            self.logger.error(f"Failed to scan source {source} for date {date}: {e}")
            failures.append(ScanFailure(FailureScope.SOURCE, source, str(e)))
            return runs, failures

        for workflow in workflows:
            try:
                runs.append(self.inspector.inspect(source, date, workflow, failures))
            except Exception as e:
                unit = f"{source}/{date}/{workflow}"
                self.logger.exception(f"Failed to scan workflow {unit}: {e}")
                failures.append(ScanFailure(FailureScope.WORKFLOW, unit, str(e)))

        return runs, failures

    @staticmethod
    def filter_runs(result: ScanResult,
                    source: Optional[str] = None,
                    status: Union[str, WorkflowStatus, None] = None) -> ScanResult:
        """
        Keeps runs matching the source name and/or status. Order is preserved.
        """
        wanted_status = parse_status(status)

        kept = tuple(
            r for r in result.runs
            if (not source or r.source == source)
            and (wanted_status is None or r.status == wanted_status)
        )
        return ScanResult(date=result.date, runs=kept, failures=result.failures)
