from pathlib import Path
from typing import List, Optional, Union

from batchwatch.core.common.enums import WorkflowStatus
from batchwatch.core.config.settings import Settings, settings as default_settings

from ..domain.models import ScanResult, SearchMatch
from .content import LogContentService
from .scanner import LogScanner


def build_scanner(config: Optional[Settings] = None, root: Union[str, Path, None] = None) -> LogScanner:
    config = config or default_settings
    return LogScanner(root or config.LOG_ROOT, max_workers=config.SCAN_MAX_WORKERS)


def build_content_service(config: Optional[Settings] = None,
                          root: Union[str, Path, None] = None) -> LogContentService:
    config = config or default_settings
    return LogContentService(build_scanner(config, root), search_max_lines=config.SEARCH_MAX_LINES)


def scan_logs(date: Optional[str] = None,
              source: Optional[str] = None,
              status: Union[str, WorkflowStatus, None] = None,
              config: Optional[Settings] = None) -> ScanResult:
    """
    Standalone API: scan one date (today when omitted), optionally filtered.
    """
    scanner = build_scanner(config)
    result = scanner.scan(date) if date is not None else scanner.scan_today()
    if source or status:
        result = LogScanner.filter_runs(result, source=source, status=status)
    return result


def search_logs(keyword: str, date: Optional[str] = None, config: Optional[Settings] = None) -> List[SearchMatch]:
    return build_content_service(config).search(keyword, date)


def read_log(path: Union[str, Path], max_lines: int = 0, config: Optional[Settings] = None) -> List[str]:
    return build_content_service(config).read_lines(path, max_lines)


def tail_log(path: Union[str, Path], n: int = 50, config: Optional[Settings] = None) -> List[str]:
    return build_content_service(config).tail_lines(path, n)
